from packages.stories.models.domain.story import (
    Story,
    StoryDraft,
    StoryCharacter,
    StoryObjective,
    StoryCharacterRole,
    ContentTag,
)

__all__ = [
    "Story",
    "StoryDraft",
    "StoryCharacter",
    "StoryObjective",
    "StoryCharacterRole",
    "ContentTag",
]
