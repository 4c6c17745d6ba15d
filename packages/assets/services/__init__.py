from packages.assets.services.asset_queue_service import AssetQueueService

__all__ = ["AssetQueueService"]
