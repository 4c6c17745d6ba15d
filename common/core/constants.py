from enum import Enum


class Environment(str, Enum):
    """Environment profiles."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class StorageProvider(str, Enum):
    """Storage provider types."""

    S3 = "s3"
    GCS = "gcs"


class LockProvider(str, Enum):
    """Distributed lock backends."""

    REDIS = "redis"
    MEMORY = "memory"


class ProgressChannelProvider(str, Enum):
    """Progress event transports."""

    MEMORY = "memory"
    REDIS = "redis"


class AgeRating(str, Enum):
    """Content age ratings, lowest first."""

    L = "L"
    TEN = "TEN"
    TWELVE = "TWELVE"
    FOURTEEN = "FOURTEEN"
    SIXTEEN = "SIXTEEN"
    EIGHTEEN = "EIGHTEEN"

    @classmethod
    def parse(cls, value, default: "AgeRating" = None) -> "AgeRating":
        """Lenient parse for model output; unknown values map to ``default``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        return default if default is not None else cls.L


class Visibility(str, Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    UNLISTED = "UNLISTED"
