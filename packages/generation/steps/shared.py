"""
Steps shared by every catalog: image upload, image analysis and the salient
description. Image steps are no-ops on text-only requests.
"""

import asyncio
import io
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError

from common.core.exceptions import ProcessingError, ProviderError, StorageError
from common.core.otel_axiom_exporter import get_logger
from common.providers.storage.paths import get_generation_reference_image_path
from packages.generation.capabilities.models import CapabilityContext, CapabilityPrompt
from packages.generation.models.domain.enums import CapabilityKind, GenerationStep
from packages.generation.models.domain.progress import (
    DescriptionData,
    ImageAnalysisData,
    ImageUploadedData,
)
from packages.generation.steps.base import StepContext, StepDefinition
from packages.generation.steps.image import normalize_image

logger = get_logger(__name__)

NORMALIZED_CONTENT_TYPE = "image/webp"
GENERIC_DESCRIPTIONS = {
    "character": "An original character with a distinctive look and a story of their own.",
    "story": "An original adventure in a world full of mystery and discovery.",
}


# UPLOADING_IMAGE


async def upload_image(ctx: StepContext) -> Dict[str, Any]:
    if not ctx.has_image:
        return {}
    if ctx.storage is None:
        raise StorageError("No storage backend configured for image uploads")

    normalized = await asyncio.to_thread(normalize_image, ctx.request.image.content)
    key = get_generation_reference_image_path(
        ctx.request.domain.value, ctx.request.requester_id, ctx.session_id
    )

    uploaded = await ctx.storage.upload(
        key,
        io.BytesIO(normalized),
        content_type=NORMALIZED_CONTENT_TYPE,
        metadata={"session_id": ctx.session_id},
    )
    if not uploaded:
        raise StorageError(f"Failed to upload reference image {key}")

    url = await ctx.storage.get_presigned_url(key)
    if not url:
        raise StorageError(f"Failed to sign reference image URL for {key}")

    return {"reference_image_key": key, "reference_image_url": url}


def _upload_event(produced: Dict[str, Any]) -> ImageUploadedData:
    return ImageUploadedData(reference_image_key=produced.get("reference_image_key"))


def upload_image_step(weight: int) -> StepDefinition:
    return StepDefinition(
        step=GenerationStep.UPLOADING_IMAGE,
        weight=weight,
        required=True,
        run=upload_image,
        message="Uploading reference image",
        event_data=_upload_event,
    )


# ANALYZING_IMAGE


def analyze_image(
    prompt_factory: Callable[[], CapabilityPrompt], analysis_model: Type[BaseModel]
):
    """Build the ANALYZING_IMAGE run for one analysis model."""

    async def run(ctx: StepContext) -> Dict[str, Any]:
        if not ctx.has_image:
            return {}
        image_url = ctx.get("reference_image_url")
        if not image_url:
            raise ProcessingError("Reference image was not uploaded")

        raw = await ctx.capability(CapabilityKind.IMAGE_ANALYSIS)(
            prompt_factory(),
            CapabilityContext(image_url=image_url, session_id=ctx.session_id),
        )
        try:
            analysis = analysis_model.model_validate(raw)
        except PydanticValidationError as e:
            raise ProviderError(f"Image analysis did not match the expected shape: {e}") from e
        return {"image_analysis": analysis}

    return run


def _no_analysis(ctx: StepContext, error: Exception) -> Dict[str, Any]:
    return {"image_analysis": None}


def _analysis_event(produced: Dict[str, Any]) -> Optional[ImageAnalysisData]:
    analysis = produced.get("image_analysis")
    if analysis is None:
        return None
    return ImageAnalysisData(
        overall_description=analysis.overall_description,
        suggested_age_rating=analysis.suggested_age_rating,
    )


def analyze_image_step(
    weight: int,
    prompt_factory: Callable[[], CapabilityPrompt],
    analysis_model: Type[BaseModel],
) -> StepDefinition:
    return StepDefinition(
        step=GenerationStep.ANALYZING_IMAGE,
        weight=weight,
        required=False,
        run=analyze_image(prompt_factory, analysis_model),
        message="Analyzing image",
        fallback=_no_analysis,
        event_data=_analysis_event,
    )


# EXTRACTING_DESCRIPTION


def _text_or_generic(ctx: StepContext) -> str:
    return ctx.text or GENERIC_DESCRIPTIONS[ctx.request.domain.value]


async def extract_description(ctx: StepContext) -> Dict[str, Any]:
    analysis = ctx.get("image_analysis")
    if ctx.has_image and analysis is None:
        raise ProcessingError("Image was supplied but no image analysis is available")

    parts = []
    if ctx.text:
        parts.append(ctx.text)
    if analysis is not None:
        parts.append(f"Visual reference: {analysis.overall_description}")
    if not parts:
        parts.append(_text_or_generic(ctx))

    return {"description": "\n\n".join(parts)}


def _description_fallback(ctx: StepContext, error: Exception) -> Dict[str, Any]:
    return {"description": _text_or_generic(ctx)}


def _description_event(produced: Dict[str, Any]) -> DescriptionData:
    return DescriptionData(description=produced["description"])


def extract_description_step(weight: int) -> StepDefinition:
    return StepDefinition(
        step=GenerationStep.EXTRACTING_DESCRIPTION,
        weight=weight,
        required=False,
        run=extract_description,
        message="Extracting description",
        fallback=_description_fallback,
        event_data=_description_event,
    )
