from abc import ABC, abstractmethod

from packages.generation.models.domain.progress import ProgressEvent


class ProgressSubscription(ABC):
    """
    Live view of one topic.

    Iterates events in publish order and stops after the first terminal
    (COMPLETED / ERROR) event. Closing only detaches this subscriber.
    """

    def __aiter__(self) -> "ProgressSubscription":
        return self

    @abstractmethod
    async def __anext__(self) -> ProgressEvent:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "ProgressSubscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class ProgressChannelInterface(ABC):
    """Topic-based fan-out of progress events. Delivery is best effort."""

    @abstractmethod
    async def publish(self, topic: str, event: ProgressEvent) -> bool:
        """Publish to every current subscriber; returns False if the transport failed."""
        pass

    @abstractmethod
    async def join(self, topic: str) -> ProgressSubscription:
        """Subscribe to a topic. Events published after this returns are delivered."""
        pass

    async def close(self) -> None:
        pass
