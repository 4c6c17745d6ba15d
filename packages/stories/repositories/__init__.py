from packages.stories.repositories.story_repository import StoryRepository

__all__ = ["StoryRepository"]
