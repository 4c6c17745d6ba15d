"""
Structured image analysis returned by the IMAGE_ANALYSIS capability.

Providers answer in camelCase JSON; every field except the overall
description is optional because the model only reports what it can see.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Analysis(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class PhysicalCharacteristics(_Analysis):
    hair_color: Optional[str] = None
    hair_style: Optional[str] = None
    eye_color: Optional[str] = None
    skin_tone: Optional[str] = None
    height: Optional[str] = None
    build: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    species: Optional[str] = None
    distinctive_features: List[str] = Field(default_factory=list)


class VisualStyleAnalysis(_Analysis):
    art_style: Optional[str] = None
    color_palette: Optional[str] = None
    mood: Optional[str] = None


class ClothingAnalysis(_Analysis):
    outfit: Optional[str] = None
    style: Optional[str] = None
    accessories: List[str] = Field(default_factory=list)


class SuggestedTraits(_Analysis):
    personality: List[str] = Field(default_factory=list)
    archetype: Optional[str] = None
    suggested_occupation: Optional[str] = None


class CharacterImageAnalysis(_Analysis):
    physical_characteristics: PhysicalCharacteristics = Field(
        default_factory=PhysicalCharacteristics
    )
    visual_style: VisualStyleAnalysis = Field(default_factory=VisualStyleAnalysis)
    clothing: ClothingAnalysis = Field(default_factory=ClothingAnalysis)
    suggested_traits: SuggestedTraits = Field(default_factory=SuggestedTraits)
    suggested_age_rating: Optional[str] = None
    overall_description: str = "Character analysis completed"


class StoryImageAnalysis(_Analysis):
    setting: Optional[str] = None
    environment: Optional[str] = None
    mood: Optional[str] = None
    atmosphere: Optional[str] = None
    time_of_day: Optional[str] = None
    visual_style: Optional[str] = None
    color_palette: Optional[str] = None
    suggested_genre: Optional[str] = None
    suggested_themes: List[str] = Field(default_factory=list)
    key_elements: List[str] = Field(default_factory=list)
    suggested_age_rating: Optional[str] = None
    overall_description: str = "Scene analysis completed"
