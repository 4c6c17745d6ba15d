from typing import Optional
from pydantic import BaseModel, ConfigDict


class CapabilityPrompt(BaseModel):
    model_config = ConfigDict(frozen=True)

    system_prompt: str
    user_prompt: str
    temperature: float = 0.7
    max_tokens: Optional[int] = 1024


class CapabilityContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    image_url: Optional[str] = None
    # Log correlation only
    session_id: Optional[str] = None
