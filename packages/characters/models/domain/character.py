from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from common.core.constants import AgeRating, Visibility
from packages.characters.models.domain.enums import VisualStyle


class Character(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    first_name: str
    last_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    species: Optional[str] = None
    style: VisualStyle
    physical_characteristics: Optional[str] = None
    personality: Optional[str] = None
    history: Optional[str] = None
    age_rating: AgeRating
    visibility: Visibility
    avatar_image_key: Optional[str] = None
    generation_session_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CharacterDraft(BaseModel):
    """Validated output of the character pipeline, ready for a single insert."""

    user_id: str
    first_name: str = Field(min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=10000)
    gender: Optional[str] = None
    species: Optional[str] = None
    style: VisualStyle = VisualStyle.ANIME
    physical_characteristics: Optional[str] = None
    personality: Optional[str] = None
    history: Optional[str] = None
    age_rating: AgeRating = AgeRating.L
    visibility: Visibility = Visibility.PRIVATE
    generation_session_id: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    def summary(self) -> dict:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "age": self.age,
            "gender": self.gender,
            "species": self.species,
            "style": self.style.value,
            "ageRating": self.age_rating.value,
        }
