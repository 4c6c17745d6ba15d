from typing import Optional, List, Dict, Any
import aisuite as ai
import asyncio
from abc import ABC, abstractmethod

from .interface import AIProviderInterface
from .models import Message, InputMessage
from common.providers.api_keys.interface import APIKeyRotationInterface
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


class AISuiteProvider(AIProviderInterface, ABC):
    """Base class for providers reached through aisuite's unified client."""

    def __init__(
        self, provider: str, model_name: str, rotator: APIKeyRotationInterface
    ):
        self.provider = provider
        self.model_name = model_name
        # aisuite addresses models as provider:model-name
        self.full_model_name = f"{provider}:{model_name}"
        self.rotator = rotator

    @abstractmethod
    def get_config_dict(self, rotated_key: str) -> Dict[str, Any]:
        """Provider config for ``ai.Client`` using the given key."""
        pass

    def _build_request(
        self,
        messages: List[InputMessage],
        temperature: float,
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        request = {
            "model": self.full_model_name,
            "messages": [msg.model_dump() for msg in messages],
            "temperature": temperature,
        }
        if max_tokens:
            request["max_tokens"] = max_tokens
        return request

    async def send_messages(
        self,
        messages: List[InputMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> Message:
        rotated_key = self.rotator.get_next_key()
        request = self._build_request(messages, temperature, max_tokens)
        with_image = any(msg.has_image for msg in messages)

        try:
            client = ai.Client(
                provider_configs={self.provider: self.get_config_dict(rotated_key)}
            )
            logger.info(
                f"Calling {self.full_model_name} with {len(messages)} messages"
                f"{' and an image' if with_image else ''}"
            )

            # aisuite is synchronous
            response = await asyncio.to_thread(
                client.chat.completions.create, **request
            )
        except Exception as e:
            self.rotator.report_failure(rotated_key)
            logger.error(f"{self.full_model_name} request failed: {e}")
            raise

        self.rotator.report_success(rotated_key)
        return Message(content=response.choices[0].message.content)
