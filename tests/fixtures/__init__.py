# Test data and fixtures

import io
import json
from typing import Any, Dict, List, Optional

from PIL import Image

from common.providers.ai.interface import AIProviderInterface
from common.providers.ai.models import InputMessage, Message
from packages.generation.capabilities.router import CapabilityRoute, CapabilityRouter

# System prompt fragments identifying each capability call
CHARACTER_IMAGE_ANALYSIS = "character image analyzer"
STORY_IMAGE_ANALYSIS = "story scene image analyzer"
CHARACTER_ATTRIBUTES = "character data extraction"
CHARACTER_NARRATIVE = "creative character writer"
STORY_CONCEPT = "creative story compiler"
STORY_CHARACTERS = "cast of an interactive story"
STORY_SCENE = "immersive opening scenes"
STORY_OBJECTIVES = "key objectives"
STORY_TAGS = "story tagging assistant"
STORY_COVER = "story cover art"

SAMPLE_CHARACTER_ANALYSIS = {
    "physicalCharacteristics": {
        "hairColor": "silver",
        "hairStyle": "long",
        "eyeColor": "violet",
        "skinTone": "pale",
        "height": "tall",
        "build": "slender",
        "age": "young adult",
        "gender": "female",
        "species": "elf",
        "distinctiveFeatures": ["pointed ears"],
    },
    "visualStyle": {"artStyle": "semi-realistic", "colorPalette": "cool", "mood": "calm"},
    "clothing": {"outfit": "green ranger cloak", "style": "fantasy", "accessories": ["longbow"]},
    "suggestedTraits": {"personality": ["curious", "loyal"], "archetype": "guardian"},
    "suggestedAgeRating": "TWELVE",
    "overallDescription": "A silver-haired elf ranger in a green cloak",
}

SAMPLE_CHARACTER_ATTRIBUTES = {
    "firstName": "Aria",
    "lastName": "Moonwhisper",
    "age": 120,
    "gender": "female",
    "species": "elf",
    "style": "ANIME",
    "suggestedAgeRating": "L",
}

SAMPLE_CHARACTER_NARRATIVE = {
    "physicalCharacteristics": "Tall and slender with long silver hair.",
    "personality": "Curious, loyal and quietly stubborn.",
    "history": "Raised by rangers in the northern woods.",
}

SAMPLE_STORY_ANALYSIS = {
    "setting": "a floating city",
    "mood": "wondrous",
    "suggestedGenre": "fantasy",
    "suggestedAgeRating": "TEN",
    "overallDescription": "A floating city above the clouds at dawn",
}

SAMPLE_STORY_CONCEPT = {
    "title": "The Sky Archive",
    "synopsis": "A young archivist discovers a map that should not exist.",
    "suggestedGenre": "fantasy",
    "mood": "wondrous",
    "setting": "a floating city",
    "suggestedAgeRating": "TEN",
}

SAMPLE_STORY_CHARACTERS = {
    "characters": [
        {"firstName": "Lena", "age": "17", "personality": "bookish", "role": "MAIN"},
        {"firstName": "Orin", "lastName": "Vale", "role": "SECONDARY"},
    ]
}

SAMPLE_STORY_SCENE = {
    "initialText": "The bells of the archive rang twice before dawn, and Lena knew something was wrong."
}

SAMPLE_STORY_OBJECTIVES = {
    "objectives": ["Find the lost map", "Reach the lower docks", "Unmask the thief"]
}

SAMPLE_STORY_TAGS = {
    "tagNames": ["Fantasy", "Mystery", "fantasy"],
    "contentTagNames": ["violence", "unknown"],
}

SAMPLE_STORY_COVER = {"coverPrompt": "floating city at dawn, airships, golden light"}

SAMPLE_REPLIES: Dict[str, Dict[str, Any]] = {
    CHARACTER_IMAGE_ANALYSIS: SAMPLE_CHARACTER_ANALYSIS,
    STORY_IMAGE_ANALYSIS: SAMPLE_STORY_ANALYSIS,
    CHARACTER_ATTRIBUTES: SAMPLE_CHARACTER_ATTRIBUTES,
    CHARACTER_NARRATIVE: SAMPLE_CHARACTER_NARRATIVE,
    STORY_CONCEPT: SAMPLE_STORY_CONCEPT,
    STORY_CHARACTERS: SAMPLE_STORY_CHARACTERS,
    STORY_SCENE: SAMPLE_STORY_SCENE,
    STORY_OBJECTIVES: SAMPLE_STORY_OBJECTIVES,
    STORY_TAGS: SAMPLE_STORY_TAGS,
    STORY_COVER: SAMPLE_STORY_COVER,
}


class ScriptedProvider(AIProviderInterface):
    """
    Provider answering from canned replies picked by system prompt fragment.

    A reply may be a dict (sent back as JSON), a raw string, or an exception
    instance to raise. Every call is appended to ``calls``.
    """

    def __init__(self, replies: Dict[str, Any], calls: List[Dict[str, Any]], route: str):
        self.replies = replies
        self.calls = calls
        self.route = route

    async def send_messages(
        self,
        messages: List[InputMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> Message:
        system_prompt = messages[0].content
        for marker, reply in self.replies.items():
            if marker in system_prompt:
                self.calls.append(
                    {"marker": marker, "route": self.route, "messages": messages}
                )
                if isinstance(reply, Exception):
                    raise reply
                content = reply if isinstance(reply, str) else json.dumps(reply)
                return Message(content=content)
        raise AssertionError(f"No scripted reply for prompt: {system_prompt[:80]}")


def scripted_router(overrides: Optional[Dict[str, Any]] = None):
    """
    Real CapabilityRouter backed by ScriptedProvider.

    Returns ``(router, calls)``; ``overrides`` replaces individual replies.
    """
    replies = {**SAMPLE_REPLIES, **(overrides or {})}
    calls: List[Dict[str, Any]] = []

    def factory(provider: str, model: Optional[str] = None) -> AIProviderInterface:
        return ScriptedProvider(replies, calls, provider)

    router = CapabilityRouter(
        safe_route=CapabilityRoute("google", "gemini-test"),
        sensitive_route=CapabilityRoute("xai", "grok-test"),
        provider_factory=factory,
        timeout_seconds=5,
    )
    return router, calls


def png_bytes(size=(64, 48), color=(200, 40, 40)) -> bytes:
    """Small solid-color PNG."""
    out = io.BytesIO()
    Image.new("RGB", size, color).save(out, format="PNG")
    return out.getvalue()
