from typing import List
from sqlalchemy import select

from common.repositories.base import BaseRepository
from common.repositories.entity import EntityRepositoryInterface
from common.core.otel_axiom_exporter import trace_span
from packages.characters.models.database.character import CharacterEntity
from packages.characters.models.domain.character import Character, CharacterDraft


class CharacterRepository(
    BaseRepository[CharacterEntity, Character],
    EntityRepositoryInterface[CharacterDraft],
):
    def __init__(self):
        super().__init__(CharacterEntity, Character)

    @trace_span
    async def create_from_draft(self, draft: CharacterDraft) -> int:
        entity = CharacterEntity(**draft.model_dump(exclude_none=True, mode="json"))
        async with self._get_session() as session:
            session.add(entity)
            await session.flush()
            return entity.id

    @trace_span
    async def list_by_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[Character]:
        async with self._get_session() as session:
            result = await session.execute(
                select(CharacterEntity)
                .where(CharacterEntity.user_id == user_id)
                .order_by(CharacterEntity.created_at.desc(), CharacterEntity.id.desc())
                .limit(limit)
                .offset(offset)
            )
            return self._entities_to_domain(result.scalars().all())
