from abc import ABC, abstractmethod


class APIKeyRotationInterface(ABC):
    """
    Round-robin over a provider's API keys.

    Providers report the outcome of every call made with a key so that
    failing keys sit out a cooldown instead of being handed out again.
    """

    @abstractmethod
    def get_next_key(self) -> str:
        pass

    @abstractmethod
    def report_failure(self, key: str) -> None:
        pass

    @abstractmethod
    def report_success(self, key: str) -> None:
        pass

    @abstractmethod
    def get_healthy_key_count(self) -> int:
        pass
