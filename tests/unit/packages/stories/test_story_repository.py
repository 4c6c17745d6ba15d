from common.core.constants import AgeRating, Visibility
from packages.stories.models.database.story import StoryEntity
from packages.stories.models.domain.story import (
    ContentTag,
    StoryCharacter,
    StoryCharacterRole,
    StoryDraft,
    StoryObjective,
)
from packages.stories.repositories.story_repository import StoryRepository
from sqlalchemy import select


def draft(**kwargs):
    values = dict(
        user_id="u1",
        title="The Sky Archive",
        synopsis="A young archivist discovers a map.",
        initial_text="The bells rang twice before dawn.",
        genre="fantasy",
        age_rating=AgeRating.TEN,
        objectives=[StoryObjective(id="obj_1", description="Find the map")],
        characters=[
            StoryCharacter(
                id="char_1",
                first_name="Lena",
                physical_characteristics="ink-stained fingers",
                role=StoryCharacterRole.MAIN,
            )
        ],
        tags=["fantasy", "mystery"],
        content_tags=[ContentTag.VIOLENCE],
        cover_prompt="floating city at dawn",
        generation_session_id="sess-1",
    )
    values.update(kwargs)
    return StoryDraft(**values)


class TestStoryRepository:
    """Persisting compiled story drafts."""

    async def test_create_from_draft_round_trips(self):
        """Test a saved draft reads back with the same fields."""
        repository = StoryRepository()

        entity_id = await repository.create_from_draft(draft())

        story = await repository.get(entity_id)
        assert story.title == "The Sky Archive"
        assert story.age_rating == AgeRating.TEN
        assert story.visibility == Visibility.PUBLIC
        assert story.objectives[0].description == "Find the map"
        assert story.characters[0].first_name == "Lena"
        assert story.characters[0].role == StoryCharacterRole.MAIN
        assert story.tags == ["fantasy", "mystery"]
        assert story.content_tags == [ContentTag.VIOLENCE]
        assert story.cover_image_key is None

    async def test_embedded_characters_are_stored_camel_cased(self, test_db):
        """Test the embedded cast is stored as camelCase JSON."""
        entity_id = await StoryRepository().create_from_draft(draft())

        result = await test_db.execute(
            select(StoryEntity.characters).where(StoryEntity.id == entity_id)
        )
        stored = result.scalar_one()

        assert stored[0]["firstName"] == "Lena"
        assert stored[0]["physicalCharacteristics"] == "ink-stained fingers"
        assert "first_name" not in stored[0]

    async def test_list_by_user(self):
        """Test listing returns only the user's stories."""
        repository = StoryRepository()
        mine = await repository.create_from_draft(draft())
        await repository.create_from_draft(draft(user_id="u2"))

        stories = await repository.list_by_user("u1")

        assert [s.id for s in stories] == [mine]
