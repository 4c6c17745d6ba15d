from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel


class Message(BaseModel):
    """Assistant response returned by a provider."""

    role: Literal["assistant"] = "assistant"
    content: Optional[str] = None


class InputMessage(BaseModel):
    """
    Message sent to a provider.

    ``content`` is plain text or a list of OpenAI-style content parts, e.g.
    ``[{"type": "text", "text": ...}, {"type": "image_url", "image_url": {"url": ...}}]``.
    """

    role: Literal["system", "user", "assistant"]
    content: Union[str, List[Dict[str, Any]]]

    @classmethod
    def system(cls, text: str) -> "InputMessage":
        return cls(role="system", content=text)

    @classmethod
    def user(cls, text: str, image_url: Optional[str] = None) -> "InputMessage":
        if not image_url:
            return cls(role="user", content=text)
        return cls(
            role="user",
            content=[
                {"type": "text", "text": text},
                {"type": "image_url", "image_url": {"url": image_url}},
            ],
        )

    @property
    def has_image(self) -> bool:
        return isinstance(self.content, list) and any(
            part.get("type") == "image_url" for part in self.content
        )
