from typing import List
from sqlalchemy import select

from common.repositories.base import BaseRepository
from common.repositories.entity import EntityRepositoryInterface
from common.core.otel_axiom_exporter import trace_span
from packages.stories.models.database.story import StoryEntity
from packages.stories.models.domain.story import Story, StoryDraft


class StoryRepository(
    BaseRepository[StoryEntity, Story],
    EntityRepositoryInterface[StoryDraft],
):
    def __init__(self):
        super().__init__(StoryEntity, Story)

    @trace_span
    async def create_from_draft(self, draft: StoryDraft) -> int:
        # JSON columns take plain dicts; embedded characters keep camelCase keys
        data = draft.model_dump(exclude_none=True, mode="json")
        data["characters"] = [
            c.model_dump(by_alias=True, exclude_none=True, mode="json")
            for c in draft.characters
        ]
        entity = StoryEntity(**data)
        async with self._get_session() as session:
            session.add(entity)
            await session.flush()
            return entity.id

    @trace_span
    async def list_by_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[Story]:
        async with self._get_session() as session:
            result = await session.execute(
                select(StoryEntity)
                .where(StoryEntity.user_id == user_id)
                .order_by(StoryEntity.created_at.desc(), StoryEntity.id.desc())
                .limit(limit)
                .offset(offset)
            )
            return self._entities_to_domain(result.scalars().all())
