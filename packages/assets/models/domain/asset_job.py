from enum import Enum
from typing import Optional
from pydantic import BaseModel


class AssetGenerationType(str, Enum):
    AVATAR = "avatar"
    COVER = "cover"


class AssetJob(BaseModel):
    """Render request for a freshly persisted entity."""

    generation_type: AssetGenerationType
    user_id: str
    entity_id: int
    session_id: str
    prompt: str
    reference_image_url: Optional[str] = None
    priority: int = 5
