from typing import Optional
import secrets


ALLOWED_IMAGE_CONTENT_TYPES = [
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/gif",
]


def generate_session_id() -> str:
    """Opaque, unguessable identifier for a generation session."""
    return secrets.token_urlsafe(24)


def generate_job_id(prefix: str) -> str:
    return f"{prefix}_{secrets.token_hex(12)}"


def validate_image_content_type(
    content_type: Optional[str], allowed_types: Optional[list] = None
) -> bool:
    """Validate an uploaded image by its declared content type."""
    if allowed_types is None:
        allowed_types = ALLOWED_IMAGE_CONTENT_TYPES

    if not content_type:
        return False

    return content_type.split(";", 1)[0].strip().lower() in allowed_types
