"""
Object keys for generation uploads.

Pattern: temp/{domain}-generation/{user_id}/{session_id}.{ext}
Uploaded references live under temp/ because the rendering backend copies
what it keeps; a bucket lifecycle rule expires the prefix.
"""


def get_generation_upload_prefix(domain: str, user_id: str) -> str:
    return f"temp/{domain}-generation/{user_id}"


def get_generation_reference_image_path(
    domain: str, user_id: str, session_id: str, extension: str = "webp"
) -> str:
    """Key of the normalized reference image for one generation session."""
    return f"{get_generation_upload_prefix(domain, user_id)}/{session_id}.{extension}"
