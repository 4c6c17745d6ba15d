"""
Capability routing.

Steps ask for a capability kind; the router decides which provider and
model serve it based on the content-sensitivity flag. Safe content goes to
Gemini, sensitive content to Grok. Steps never see the provider.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from common.core.config import settings
from common.core.exceptions import ProviderError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.providers.ai.factory import get_ai_provider
from common.providers.ai.interface import AIProviderInterface
from common.providers.ai.models import InputMessage
from packages.generation.capabilities.json_extractor import extract_json_object
from packages.generation.capabilities.models import CapabilityContext, CapabilityPrompt
from packages.generation.models.domain.enums import CapabilityKind

logger = get_logger(__name__)

ProviderFactory = Callable[[str, Optional[str]], AIProviderInterface]


@dataclass(frozen=True)
class CapabilityRoute:
    provider: str
    model: Optional[str] = None


class CapabilityHandle:
    """
    Awaitable capability: ``await handle(prompt, context) -> dict``.

    Every failure surfaces as ProviderError. No retries here.
    """

    def __init__(
        self,
        kind: CapabilityKind,
        route: CapabilityRoute,
        provider_factory: ProviderFactory = get_ai_provider,
        timeout_seconds: Optional[float] = None,
    ):
        self.kind = kind
        self.route = route
        self._provider_factory = provider_factory
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.capability_timeout_seconds
        )

    def _build_messages(
        self, prompt: CapabilityPrompt, context: CapabilityContext
    ) -> List[InputMessage]:
        image_url = context.image_url if self.kind == CapabilityKind.IMAGE_ANALYSIS else None
        if self.kind == CapabilityKind.IMAGE_ANALYSIS and not image_url:
            raise ProviderError("Image analysis requires an image URL", self.route.provider)
        return [
            InputMessage.system(prompt.system_prompt),
            InputMessage.user(prompt.user_prompt, image_url=image_url),
        ]

    @trace_span
    async def __call__(
        self, prompt: CapabilityPrompt, context: Optional[CapabilityContext] = None
    ) -> Dict[str, Any]:
        context = context or CapabilityContext()
        messages = self._build_messages(prompt, context)

        try:
            provider = self._provider_factory(self.route.provider, self.route.model)
            response = await asyncio.wait_for(
                provider.send_messages(
                    messages,
                    temperature=prompt.temperature,
                    max_tokens=prompt.max_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{self.kind.value} via {self.route.provider} timed out after {self.timeout_seconds}s",
                extra={"session_id": context.session_id},
            )
            raise ProviderError(
                f"{self.kind.value} timed out after {self.timeout_seconds}s",
                self.route.provider,
            )
        except ProviderError:
            raise
        except Exception as e:
            logger.warning(
                f"{self.kind.value} via {self.route.provider} failed: {e}",
                extra={"session_id": context.session_id},
            )
            raise ProviderError(f"{self.kind.value} failed: {e}", self.route.provider) from e

        try:
            return extract_json_object(response.content or "")
        except ValueError as e:
            raise ProviderError(
                f"{self.kind.value} returned malformed output: {e}", self.route.provider
            ) from e


class CapabilityRouter:
    def __init__(
        self,
        safe_route: Optional[CapabilityRoute] = None,
        sensitive_route: Optional[CapabilityRoute] = None,
        provider_factory: ProviderFactory = get_ai_provider,
        timeout_seconds: Optional[float] = None,
    ):
        self.safe_route = safe_route or CapabilityRoute(
            settings.safe_ai_provider, settings.safe_ai_model
        )
        self.sensitive_route = sensitive_route or CapabilityRoute(
            settings.sensitive_ai_provider, settings.sensitive_ai_model
        )
        self._provider_factory = provider_factory
        self._timeout_seconds = timeout_seconds

    def route_for(self, sensitive: bool) -> CapabilityRoute:
        return self.sensitive_route if sensitive else self.safe_route

    def select(self, kind: CapabilityKind, sensitive: bool) -> CapabilityHandle:
        return CapabilityHandle(
            kind,
            self.route_for(sensitive),
            provider_factory=self._provider_factory,
            timeout_seconds=self._timeout_seconds,
        )
