from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

DraftType = TypeVar("DraftType", bound=BaseModel)


class EntityRepositoryInterface(ABC, Generic[DraftType]):
    """Persists a finished generation draft."""

    @abstractmethod
    async def create_from_draft(self, draft: DraftType) -> int:
        """Write the entity in a single atomic flush and return its id."""
        pass
