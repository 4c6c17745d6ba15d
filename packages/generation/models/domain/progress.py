"""
Progress events.

Events are immutable values. ``data`` is a tagged union discriminated by
``kind``; each variant only carries the fields its step can produce.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from packages.generation.models.domain.enums import (
    GenerationDomain,
    GenerationStep,
)


class _EventData(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class StartedData(_EventData):
    kind: Literal["started"] = "started"
    domain: GenerationDomain
    has_text: bool
    has_image: bool
    reserved_credits: int


class ImageUploadedData(_EventData):
    kind: Literal["image_uploaded"] = "image_uploaded"
    reference_image_key: Optional[str] = None


class ImageAnalysisData(_EventData):
    kind: Literal["image_analysis"] = "image_analysis"
    overall_description: Optional[str] = None
    suggested_age_rating: Optional[str] = None


class DescriptionData(_EventData):
    kind: Literal["description"] = "description"
    description: str


class CharacterAttributesData(_EventData):
    kind: Literal["character_attributes"] = "character_attributes"
    first_name: str
    last_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    species: Optional[str] = None
    style: Optional[str] = None


class CharacterNarrativeData(_EventData):
    kind: Literal["character_narrative"] = "character_narrative"
    physical_characteristics: Optional[str] = None
    personality: Optional[str] = None
    history: Optional[str] = None


class StoryConceptData(_EventData):
    kind: Literal["story_concept"] = "story_concept"
    title: str
    synopsis: str
    genre: Optional[str] = None
    mood: Optional[str] = None
    setting: Optional[str] = None


class StoryCharactersData(_EventData):
    kind: Literal["story_characters"] = "story_characters"
    names: List[str]


class SceneData(_EventData):
    kind: Literal["scene"] = "scene"
    preview: str


class ObjectivesData(_EventData):
    kind: Literal["objectives"] = "objectives"
    objectives: List[str]


class TagsData(_EventData):
    kind: Literal["tags"] = "tags"
    tags: List[str] = Field(default_factory=list)
    content_tags: List[str] = Field(default_factory=list)


class CoverPromptData(_EventData):
    kind: Literal["cover_prompt"] = "cover_prompt"
    prompt: str


class PersistedData(_EventData):
    kind: Literal["persisted"] = "persisted"
    entity_id: int


class AssetQueuedData(_EventData):
    kind: Literal["asset_queued"] = "asset_queued"
    job_id: Optional[str] = None
    enqueue_failed: bool = False


class CompletedData(_EventData):
    kind: Literal["completed"] = "completed"
    entity_id: int
    domain: GenerationDomain
    summary: Dict[str, Any]
    asset_job_id: Optional[str] = None
    asset_enqueue_failed: bool = False


class ErrorData(_EventData):
    kind: Literal["error"] = "error"
    failed_step: GenerationStep
    error_detail: Optional[str] = None


class StepSkippedData(_EventData):
    """An OPTIONAL step failed and its fallback data was used."""

    kind: Literal["step_skipped"] = "step_skipped"
    reason: str


ProgressData = Annotated[
    Union[
        StartedData,
        ImageUploadedData,
        ImageAnalysisData,
        DescriptionData,
        CharacterAttributesData,
        CharacterNarrativeData,
        StoryConceptData,
        StoryCharactersData,
        SceneData,
        ObjectivesData,
        TagsData,
        CoverPromptData,
        PersistedData,
        AssetQueuedData,
        CompletedData,
        ErrorData,
        StepSkippedData,
    ],
    Field(discriminator="kind"),
]


class ProgressEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    step: GenerationStep
    progress: int = Field(ge=0, le=100)
    message: str
    data: Optional[ProgressData] = None

    @property
    def is_terminal(self) -> bool:
        return self.step.is_terminal()

    def to_wire(self) -> Dict[str, Any]:
        """Client shape: ``{step, progress, message, data?}``."""
        wire: Dict[str, Any] = {
            "step": self.step.value,
            "progress": self.progress,
            "message": self.message,
        }
        if self.data is not None:
            wire["data"] = self.data.model_dump(by_alias=True, mode="json")
        return wire
