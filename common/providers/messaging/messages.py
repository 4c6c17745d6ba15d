from typing import Literal, Optional
from pydantic import BaseModel


class AssetGenerationMessage(BaseModel):
    """Job for the image rendering backend: an avatar or a story cover.

    The rendering worker writes the finished image back onto the entity
    identified by ``entity_id``.
    """

    job_id: str
    generation_type: Literal["avatar", "cover"]
    user_id: str
    entity_id: int
    session_id: str
    prompt: str
    reference_image_url: Optional[str] = None
    priority: int = 5
