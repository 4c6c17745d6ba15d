from abc import ABC, abstractmethod
from typing import Optional, BinaryIO


class StorageInterface(ABC):
    @abstractmethod
    async def upload(
        self,
        key: str,
        data: BinaryIO,
        content_type: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> bool:
        pass

    @abstractmethod
    async def get_presigned_url(
        self, key: str, expiration: int = 3600
    ) -> Optional[str]:
        """Time-limited GET URL that external model providers can fetch."""
        pass

    @abstractmethod
    async def get_storage_uri(self, key: str) -> str:
        """Native URI for a key ('s3://bucket/key' or 'gs://bucket/key')."""
        pass
