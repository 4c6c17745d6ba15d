"""
Generation enums.
"""

from enum import Enum


class GenerationDomain(str, Enum):
    CHARACTER = "character"
    STORY = "story"


class SessionStatus(str, Enum):
    """
    Session lifecycle.

    Flow: pending -> running -> completed | failed
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.FAILED)


class GenerationStep(str, Enum):
    """Step names as they appear on progress events."""

    STARTED = "STARTED"
    UPLOADING_IMAGE = "UPLOADING_IMAGE"
    ANALYZING_IMAGE = "ANALYZING_IMAGE"
    EXTRACTING_DESCRIPTION = "EXTRACTING_DESCRIPTION"

    # Character
    GENERATING_ATTRIBUTES = "GENERATING_ATTRIBUTES"
    GENERATING_NARRATIVE = "GENERATING_NARRATIVE"

    # Story
    GENERATING_CONCEPT = "GENERATING_CONCEPT"
    GENERATING_CHARACTERS = "GENERATING_CHARACTERS"
    WRITING_SCENE = "WRITING_SCENE"
    GENERATING_OBJECTIVES = "GENERATING_OBJECTIVES"
    GENERATING_TAGS = "GENERATING_TAGS"
    GENERATING_COVER_PROMPT = "GENERATING_COVER_PROMPT"

    COMPILING_ENTITY = "COMPILING_ENTITY"
    PERSISTING = "PERSISTING"
    QUEUING_ASSET = "QUEUING_ASSET"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"

    def is_terminal(self) -> bool:
        return self in (GenerationStep.COMPLETED, GenerationStep.ERROR)


class StepOutcome(str, Enum):
    OK = "OK"
    SKIPPED_FALLBACK = "SKIPPED_FALLBACK"
    FATAL = "FATAL"


class CapabilityKind(str, Enum):
    """Abstract generation functions, independent of the backing provider."""

    IMAGE_ANALYSIS = "image_analysis"
    TEXT_COMPILATION = "text_compilation"
    NARRATIVE_GENERATION = "narrative_generation"
