from abc import ABC, abstractmethod
from typing import Optional, List
from .models import Message, InputMessage


class AIProviderInterface(ABC):
    """Chat completion against one provider/model pair."""

    @abstractmethod
    async def send_messages(
        self,
        messages: List[InputMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> Message:
        """
        Args:
            messages: Typed input messages; user messages may carry an image part
            temperature: Controls randomness in the response (0.0 to 1.0)
            max_tokens: Maximum number of tokens in the response

        Returns:
            The assistant reply
        """
        pass
