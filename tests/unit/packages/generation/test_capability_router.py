import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from common.core.exceptions import ProviderError
from common.providers.ai.models import Message
from packages.generation.capabilities import (
    CapabilityContext,
    CapabilityHandle,
    CapabilityPrompt,
    CapabilityRoute,
    CapabilityRouter,
)
from packages.generation.models.domain.enums import CapabilityKind

PROMPT = CapabilityPrompt(system_prompt="You compile.", user_prompt="Make a story.")


def provider_returning(content=None, side_effect=None):
    provider = MagicMock()
    provider.send_messages = AsyncMock(
        return_value=Message(content=content), side_effect=side_effect
    )
    return provider


def handle_for(provider, kind=CapabilityKind.TEXT_COMPILATION, timeout_seconds=5):
    factory = MagicMock(return_value=provider)
    return (
        CapabilityHandle(
            kind,
            CapabilityRoute("google", "gemini-test"),
            provider_factory=factory,
            timeout_seconds=timeout_seconds,
        ),
        factory,
    )


class TestCapabilityHandle:
    """Calls through a capability handle to its provider."""

    async def test_returns_parsed_json(self):
        """Test the provider reply is parsed into a dict."""
        provider = provider_returning('```json\n{"title": "Sky"}\n```')
        handle, factory = handle_for(provider)

        result = await handle(PROMPT, CapabilityContext(session_id="s1"))

        assert result == {"title": "Sky"}
        factory.assert_called_once_with("google", "gemini-test")
        kwargs = provider.send_messages.await_args.kwargs
        assert kwargs["temperature"] == PROMPT.temperature
        assert kwargs["max_tokens"] == PROMPT.max_tokens

    async def test_text_capability_sends_plain_user_message(self):
        """Test text capabilities send a system prompt and a plain user message."""
        provider = provider_returning('{"ok": true}')
        handle, _ = handle_for(provider)

        await handle(PROMPT, CapabilityContext(image_url="https://ignored"))

        system, user = provider.send_messages.await_args.args[0]
        assert system.role == "system"
        assert user.content == "Make a story."

    async def test_image_analysis_attaches_image(self):
        """Test image analysis sends the image URL as a content part."""
        provider = provider_returning('{"overallDescription": "a city"}')
        handle, _ = handle_for(provider, kind=CapabilityKind.IMAGE_ANALYSIS)

        await handle(PROMPT, CapabilityContext(image_url="https://signed/ref.webp"))

        user = provider.send_messages.await_args.args[0][1]
        assert user.content[1] == {
            "type": "image_url",
            "image_url": {"url": "https://signed/ref.webp"},
        }

    async def test_image_analysis_without_image_fails(self):
        """Test image analysis without an image fails before calling the provider."""
        provider = provider_returning("{}")
        handle, _ = handle_for(provider, kind=CapabilityKind.IMAGE_ANALYSIS)

        with pytest.raises(ProviderError):
            await handle(PROMPT, CapabilityContext())
        provider.send_messages.assert_not_awaited()

    async def test_provider_exception_becomes_provider_error(self):
        """Test provider exceptions are wrapped with the provider name."""
        provider = provider_returning(side_effect=RuntimeError("503 from upstream"))
        handle, _ = handle_for(provider)

        with pytest.raises(ProviderError) as exc_info:
            await handle(PROMPT)
        assert exc_info.value.provider == "google"
        assert "503 from upstream" in str(exc_info.value)

    async def test_timeout_becomes_provider_error(self):
        """Test a slow provider is cut off and reported as a provider error."""
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)

        provider = MagicMock()
        provider.send_messages = slow
        handle, _ = handle_for(provider, timeout_seconds=0.01)

        with pytest.raises(ProviderError, match="timed out"):
            await handle(PROMPT)

    @pytest.mark.parametrize("content", [None, "", "I cannot help with that."])
    async def test_malformed_output_becomes_provider_error(self, content):
        """Test replies without a JSON object are reported as provider errors."""
        handle, _ = handle_for(provider_returning(content))

        with pytest.raises(ProviderError, match="malformed"):
            await handle(PROMPT)


class TestCapabilityRouter:
    """Route selection by content sensitivity."""

    @pytest.fixture
    def router(self):
        return CapabilityRouter(
            safe_route=CapabilityRoute("google", "gemini"),
            sensitive_route=CapabilityRoute("xai", "grok"),
            provider_factory=MagicMock(),
        )

    def test_routes_by_sensitivity(self, router):
        """Test safe and sensitive requests go to different providers."""
        assert router.route_for(False).provider == "google"
        assert router.route_for(True).provider == "xai"

    def test_select_builds_handle_for_route(self, router):
        """Test select returns a handle bound to the chosen route."""
        handle = router.select(CapabilityKind.NARRATIVE_GENERATION, sensitive=True)

        assert handle.kind == CapabilityKind.NARRATIVE_GENERATION
        assert handle.route == CapabilityRoute("xai", "grok")

    def test_default_routes_come_from_settings(self):
        """Test the default routes are read from settings."""
        router = CapabilityRouter()

        assert router.route_for(False).provider == "google"
        assert router.route_for(True).provider == "xai"
