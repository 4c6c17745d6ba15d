from typing import Optional
from pydantic import BaseModel, ConfigDict

from packages.generation.models.domain.enums import GenerationDomain


class ImageInput(BaseModel):
    """Uploaded image as received at intake."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    content_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class Modality(BaseModel):
    """Which input types a request supplies."""

    model_config = ConfigDict(frozen=True)

    has_text: bool = False
    has_image: bool = False


class GenerationRequest(BaseModel):
    """
    Immutable generation input.

    ``sensitive`` is the content-sensitivity flag used for capability routing.
    At least one of ``text`` and ``image`` must be present; the orchestrator
    enforces that at intake.
    """

    model_config = ConfigDict(frozen=True)

    requester_id: str
    domain: GenerationDomain
    text: Optional[str] = None
    image: Optional[ImageInput] = None
    sensitive: bool = False

    @property
    def normalized_text(self) -> Optional[str]:
        if self.text is None:
            return None
        stripped = self.text.strip()
        return stripped or None

    @property
    def modality(self) -> Modality:
        return Modality(
            has_text=self.normalized_text is not None,
            has_image=self.image is not None,
        )
