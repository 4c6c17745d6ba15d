import asyncio
from typing import Optional, BinaryIO
import boto3
from botocore.config import Config

from common.core.config import settings
from .interface import StorageInterface
from common.core.otel_axiom_exporter import trace_span, get_logger

logger = get_logger(__name__)


class S3Storage(StorageInterface):
    def __init__(self, bucket_name: Optional[str] = None):
        self.bucket_name = bucket_name or settings.s3_bucket_name

        client_config = {
            "service_name": "s3",
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
            "region_name": settings.aws_region,
        }

        # LocalStack needs path-style addressing
        if settings.s3_endpoint_url:
            client_config["endpoint_url"] = settings.s3_endpoint_url
            client_config["config"] = Config(s3={"addressing_style": "path"})

        self.client = boto3.client(**client_config)

    @trace_span
    async def upload(
        self,
        key: str,
        data: BinaryIO,
        content_type: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> bool:
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type
        if metadata:
            extra_args["Metadata"] = metadata

        try:
            await asyncio.to_thread(
                self.client.upload_fileobj,
                data,
                self.bucket_name,
                key,
                ExtraArgs=extra_args,
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
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expiration,
            )
        except Exception as e:
            logger.error(f"Failed to generate presigned URL for {key}: {e}")
            return None

    async def get_storage_uri(self, key: str) -> str:
        return f"s3://{self.bucket_name}/{key}"
