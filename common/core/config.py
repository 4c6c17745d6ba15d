from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import (
    Environment,
    StorageProvider,
    LockProvider,
    ProgressChannelProvider,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment Profile
    environment: Environment = Environment.LOCAL

    # API Settings
    app_name: str = "storyforge-api"
    api_version: str = "v1"
    debug: bool = False

    # Database Components
    db_user: str = "storyforge"
    db_password: str = "storyforge"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "storyforge"
    db_use_nullpool: bool = (
        False  # True for workers (sequential), False for API (concurrent)
    )
    db_pool_size: int = 10
    db_pool_overflow: int = 5

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # AWS/S3
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "us-east-1"
    s3_bucket_name: str = "storyforge-uploads"
    s3_endpoint_url: Optional[str] = None  # For LocalStack

    # RabbitMQ
    rabbitmq_host: str = "localhost"
    rabbitmq_port: int = 5672
    rabbitmq_username: str = "guest"
    rabbitmq_password: str = "guest"
    rabbitmq_vhost: str = "/"
    rabbitmq_max_priority: int = 10

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    @property
    def redis_connection_url(self) -> str:
        """Construct Redis URL from components."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        else:
            return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # OpenAI
    openai_api_keys: List[str] = []
    openai_model: str = "gpt-4o-mini"

    # xAI (Grok)
    xai_api_keys: List[str] = []
    xai_model: str = "grok-3"

    # Vertex ai (Gemini)
    google_project_id: str = ""
    google_region: str = "us-central1"
    google_application_credentials: Optional[str] = (
        None  # Optional - falls back to pod identity with Workload Identity
    )
    google_model: str = "gemini-2.5-flash"

    # Capability routing: safe content vs. mature/sensitive content
    safe_ai_provider: str = "google"
    safe_ai_model: Optional[str] = None
    sensitive_ai_provider: str = "xai"
    sensitive_ai_model: Optional[str] = None
    capability_timeout_seconds: float = 60.0

    # OpenTelemetry
    otel_service_name: str = "storyforge-api"
    otel_service_version: str = "0.1.0"

    # Axiom (export is skipped when the token is not set)
    axiom_token: Optional[str] = None
    axiom_dataset: Optional[str] = None

    # Firebase Auth (uses Workload Identity on GKE - no API keys needed)
    firebase_project_id: Optional[str] = None  # Falls back to google_project_id

    # Credits
    credit_reservation_ttl_seconds: int = 900
    credit_lock_ttl_seconds: int = 10
    credit_lock_acquire_timeout_seconds: float = 5.0
    reconciliation_interval_seconds: int = 60

    # Progress WebSocket: close after this long without an event
    progress_idle_timeout_seconds: float = 300.0

    # Providers
    lock_provider: LockProvider = LockProvider.REDIS
    progress_channel_provider: ProgressChannelProvider = (
        ProgressChannelProvider.MEMORY
    )

    # Generation request limits
    generation_text_max_length: int = 2000
    generation_image_max_bytes: int = 10 * 1024 * 1024
    generation_rate_limit: str = "10/minute"

    # Environment-aware properties
    @property
    def storage_provider(self) -> StorageProvider:
        """Auto-select storage provider based on environment."""
        return (
            StorageProvider.S3
            if self.environment == Environment.LOCAL
            else StorageProvider.GCS
        )

    @property
    def rate_limit_storage_uri(self) -> str:
        """Local runs keep rate-limit counters in process."""
        if self.environment == Environment.LOCAL:
            return "memory://"
        return self.redis_connection_url

    @property
    def cors_allowed_origins(self) -> List[str]:
        """Auto-select CORS origins based on environment."""
        if self.environment == Environment.LOCAL:
            return [
                "http://localhost:3000",
                "http://localhost:5173",
            ]
        return [
            "https://storyforge.app",
            "https://api.storyforge.app",
        ]


settings = Settings()
