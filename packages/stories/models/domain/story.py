from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from common.core.constants import AgeRating, Visibility

MAX_OBJECTIVES = 5


class StoryCharacterRole(str, Enum):
    MAIN = "MAIN"
    SECONDARY = "SECONDARY"


class ContentTag(str, Enum):
    """Content warnings a story may carry."""

    VIOLENCE = "VIOLENCE"
    GORE = "GORE"
    SEXUAL = "SEXUAL"
    NUDITY = "NUDITY"
    LANGUAGE = "LANGUAGE"
    DRUGS = "DRUGS"
    ALCOHOL = "ALCOHOL"
    HORROR = "HORROR"
    PSYCHOLOGICAL = "PSYCHOLOGICAL"
    CRIME = "CRIME"
    GAMBLING = "GAMBLING"


class StoryObjective(BaseModel):
    id: str
    description: str
    completed: bool = False


class StoryCharacter(BaseModel):
    """Character embedded in a story; stored as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    first_name: str
    last_name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    personality: Optional[str] = None
    physical_characteristics: Optional[str] = None
    attire: Optional[str] = None
    role: StoryCharacterRole = StoryCharacterRole.SECONDARY


class Story(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    synopsis: str
    initial_text: str
    genre: Optional[str] = None
    mood: Optional[str] = None
    setting: Optional[str] = None
    age_rating: AgeRating
    objectives: List[StoryObjective] = Field(default_factory=list)
    characters: List[StoryCharacter] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    content_tags: List[ContentTag] = Field(default_factory=list)
    cover_prompt: Optional[str] = None
    cover_image_key: Optional[str] = None
    visibility: Visibility
    generation_session_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StoryDraft(BaseModel):
    """Validated output of the story pipeline, ready for a single insert."""

    user_id: str
    title: str = Field(min_length=1, max_length=200)
    synopsis: str = Field(min_length=1)
    initial_text: str = Field(min_length=1)
    genre: Optional[str] = None
    mood: Optional[str] = None
    setting: Optional[str] = None
    age_rating: AgeRating = AgeRating.L
    objectives: List[StoryObjective] = Field(default_factory=list, max_length=MAX_OBJECTIVES)
    characters: List[StoryCharacter] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    content_tags: List[ContentTag] = Field(default_factory=list)
    cover_prompt: Optional[str] = None
    visibility: Visibility = Visibility.PUBLIC
    generation_session_id: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return value.strip()[:200] if isinstance(value, str) else value

    def summary(self) -> dict:
        return {
            "title": self.title,
            "synopsis": self.synopsis,
            "genre": self.genre,
            "mood": self.mood,
            "ageRating": self.age_rating.value,
            "characterCount": len(self.characters),
            "objectiveCount": len(self.objectives),
        }
