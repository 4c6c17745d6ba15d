import asyncio
from typing import Optional, BinaryIO
from datetime import timedelta
from google.cloud import storage
import google.auth

from common.core.config import settings
from .interface import StorageInterface
from common.core.otel_axiom_exporter import trace_span, get_logger

logger = get_logger(__name__)


class GCSStorage(StorageInterface):
    def __init__(self, bucket_name: Optional[str] = None):
        self.bucket_name = bucket_name or settings.s3_bucket_name

        # Workload Identity provides the credentials on GKE
        self.client = storage.Client()
        self.bucket = self.client.bucket(self.bucket_name)

        # IAM signing needs the service account email, not a private key
        credentials, _ = google.auth.default()
        self.service_account_email = credentials.service_account_email

        logger.info(f"Initialized GCS storage with bucket: {self.bucket_name}")

    @trace_span
    async def upload(
        self,
        key: str,
        data: BinaryIO,
        content_type: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> bool:
        try:
            blob = self.bucket.blob(key)
            if metadata:
                blob.metadata = metadata
            await asyncio.to_thread(
                blob.upload_from_file, data, rewind=True, content_type=content_type
            )
            logger.info(f"Uploaded {key} to {self.bucket_name}")
            return True
        except Exception as e:
            logger.error(f"Failed to upload {key}: {e}")
            return False

    @trace_span
    async def get_presigned_url(
        self, key: str, expiration: int = 3600
    ) -> Optional[str]:
        try:
            return await asyncio.to_thread(
                self.bucket.blob(key).generate_signed_url,
                version="v4",
                expiration=timedelta(seconds=expiration),
                service_account_email=self.service_account_email,
            )
        except Exception as e:
            logger.error(f"Failed to generate presigned URL for {key}: {e}")
            return None

    async def get_storage_uri(self, key: str) -> str:
        return f"gs://{self.bucket_name}/{key}"
