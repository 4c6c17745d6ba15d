from packages.stories.models.database.story import StoryEntity

__all__ = ["StoryEntity"]
