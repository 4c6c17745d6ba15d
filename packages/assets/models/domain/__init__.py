from packages.assets.models.domain.asset_job import AssetJob, AssetGenerationType

__all__ = ["AssetJob", "AssetGenerationType"]
