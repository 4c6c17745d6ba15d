"""
Character pipeline.

upload -> analyze image -> description -> attributes -> narrative -> compile.
PERSISTING and QUEUING_ASSET are run by the orchestrator.
"""

from typing import Any, Dict, List, Optional

from common.core.constants import AgeRating
from common.core.exceptions import ProcessingError, ProviderError
from packages.assets.models.domain.asset_job import AssetGenerationType, AssetJob
from packages.characters.models.domain import CharacterDraft, VisualStyle
from packages.generation.models.domain.analysis import CharacterImageAnalysis
from packages.generation.models.domain.enums import (
    CapabilityKind,
    GenerationDomain,
    GenerationStep,
)
from packages.generation.models.domain.progress import (
    CharacterAttributesData,
    CharacterNarrativeData,
)
from packages.generation.steps import prompts
from packages.generation.steps.base import StepContext, StepDefinition
from packages.generation.steps.catalog import StepCatalog
from packages.generation.steps.shared import (
    analyze_image_step,
    extract_description_step,
    upload_image_step,
)
from packages.generation.capabilities.models import CapabilityContext

DEFAULT_FIRST_NAME = "Character"

AGE_BY_BRACKET = {
    "child": 8,
    "teenager": 16,
    "young adult": 22,
    "adult": 30,
    "middle-aged": 45,
    "elderly": 65,
}


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_age(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if value >= 0 else None
    if isinstance(value, str):
        digits = "".join(ch for ch in value if ch.isdigit())
        return int(digits) if digits else None
    return None


def _parse_style(value: Any) -> Optional[VisualStyle]:
    if not isinstance(value, str):
        return None
    return VisualStyle.from_art_style(value)


def merge_attributes(
    extracted: Dict[str, Any], analysis: Optional[CharacterImageAnalysis]
) -> Dict[str, Any]:
    """Combine the text extraction with what the image analysis saw; text wins."""
    attributes = {
        "first_name": _clean(extracted.get("firstName")) or DEFAULT_FIRST_NAME,
        "last_name": _clean(extracted.get("lastName")),
        "age": _coerce_age(extracted.get("age")),
        "gender": _clean(extracted.get("gender")),
        "species": _clean(extracted.get("species")),
        "style": _parse_style(extracted.get("style")),
    }
    text_rating = AgeRating.parse(extracted.get("suggestedAgeRating"))

    if analysis is None:
        attributes["age_rating"] = text_rating
        attributes["style"] = attributes["style"] or VisualStyle.ANIME
        return attributes

    physical = analysis.physical_characteristics
    attributes["gender"] = attributes["gender"] or _clean(physical.gender)
    attributes["species"] = attributes["species"] or _clean(physical.species)
    if attributes["age"] is None and physical.age:
        attributes["age"] = AGE_BY_BRACKET.get(physical.age.strip().lower())
    if attributes["style"] is None and analysis.visual_style.art_style:
        attributes["style"] = (
            VisualStyle.from_art_style(analysis.visual_style.art_style) or VisualStyle.ANIME
        )
    attributes["style"] = attributes["style"] or VisualStyle.ANIME

    image_rating = AgeRating.parse(analysis.suggested_age_rating)
    attributes["age_rating"] = image_rating if image_rating != AgeRating.L else text_rating
    return attributes


async def generate_attributes(ctx: StepContext) -> Dict[str, Any]:
    analysis = ctx.get("image_analysis")
    extracted = await ctx.capability(CapabilityKind.TEXT_COMPILATION)(
        prompts.character_attributes_prompt(ctx.get("description"), analysis),
        CapabilityContext(session_id=ctx.session_id),
    )
    return merge_attributes(extracted, analysis)


def _attributes_event(produced: Dict[str, Any]) -> CharacterAttributesData:
    style = produced.get("style")
    return CharacterAttributesData(
        first_name=produced["first_name"],
        last_name=produced.get("last_name"),
        age=produced.get("age"),
        gender=produced.get("gender"),
        species=produced.get("species"),
        style=style.value if style else None,
    )


def describe_image_details(analysis: CharacterImageAnalysis) -> str:
    physical = analysis.physical_characteristics
    clothing = analysis.clothing
    parts: List[str] = []

    hair = " ".join(p for p in (physical.hair_style, physical.hair_color) if p)
    if hair:
        parts.append(f"Hair: {hair}")
    if physical.eye_color:
        parts.append(f"Eyes: {physical.eye_color}")
    if physical.skin_tone:
        parts.append(f"Skin: {physical.skin_tone}")
    if physical.height:
        parts.append(f"Height: {physical.height}")
    if physical.build:
        parts.append(f"Build: {physical.build}")
    if physical.distinctive_features:
        parts.append(f"Distinctive features: {', '.join(physical.distinctive_features)}")
    if clothing.outfit:
        parts.append(f"Outfit: {clothing.outfit}")
    if clothing.accessories:
        parts.append(f"Accessories: {', '.join(clothing.accessories)}")

    return ". ".join(parts)


async def generate_narrative(ctx: StepContext) -> Dict[str, Any]:
    attributes = {
        "firstName": ctx.get("first_name"),
        "lastName": ctx.get("last_name"),
        "age": ctx.get("age"),
        "gender": ctx.get("gender"),
        "species": ctx.get("species"),
    }
    reply = await ctx.capability(CapabilityKind.NARRATIVE_GENERATION)(
        prompts.character_narrative_prompt(ctx.get("description"), attributes),
        CapabilityContext(session_id=ctx.session_id),
    )

    physical = _clean(reply.get("physicalCharacteristics"))
    personality = _clean(reply.get("personality"))
    history = _clean(reply.get("history"))
    if not personality and not history:
        raise ProviderError("Narrative reply had neither personality nor history")

    analysis: Optional[CharacterImageAnalysis] = ctx.get("image_analysis")
    if analysis is not None:
        details = describe_image_details(analysis)
        if details:
            physical = f"{physical}\n\n{details}" if physical else details

        traits = analysis.suggested_traits
        if not personality and traits.personality:
            personality = f"Personality traits: {', '.join(traits.personality)}"
            if traits.archetype:
                personality += f"\nArchetype: {traits.archetype}"

    return {
        "physical_characteristics": physical,
        "personality": personality,
        "history": history,
    }


def _narrative_event(produced: Dict[str, Any]) -> CharacterNarrativeData:
    return CharacterNarrativeData(
        physical_characteristics=produced.get("physical_characteristics"),
        personality=produced.get("personality"),
        history=produced.get("history"),
    )


async def compile_character(ctx: StepContext) -> Dict[str, Any]:
    try:
        draft = CharacterDraft(
            user_id=ctx.request.requester_id,
            first_name=ctx.get("first_name") or DEFAULT_FIRST_NAME,
            last_name=ctx.get("last_name"),
            age=ctx.get("age"),
            gender=ctx.get("gender"),
            species=ctx.get("species"),
            style=ctx.get("style") or VisualStyle.ANIME,
            physical_characteristics=ctx.get("physical_characteristics"),
            personality=ctx.get("personality"),
            history=ctx.get("history"),
            age_rating=ctx.get("age_rating") or AgeRating.L,
            generation_session_id=ctx.session_id,
        )
    except ValueError as e:
        raise ProcessingError(f"Character failed validation: {e}") from e
    return {"draft": draft}


def build_avatar_job(
    partial_entity: Dict[str, Any], entity_id: int, session_id: str
) -> AssetJob:
    draft: CharacterDraft = partial_entity["draft"]
    name = " ".join(p for p in (draft.first_name, draft.last_name) if p)
    prompt = f"{draft.style.value.replace('_', ' ').lower()} style portrait of {name}"
    if draft.physical_characteristics:
        prompt += f". {draft.physical_characteristics}"
    return AssetJob(
        generation_type=AssetGenerationType.AVATAR,
        user_id=draft.user_id,
        entity_id=entity_id,
        session_id=session_id,
        prompt=prompt,
        reference_image_url=partial_entity.get("reference_image_url"),
    )


CHARACTER_CATALOG = StepCatalog(
    domain=GenerationDomain.CHARACTER,
    steps=(
        upload_image_step(5),
        analyze_image_step(
            10, prompts.character_image_analysis_prompt, CharacterImageAnalysis
        ),
        extract_description_step(15),
        StepDefinition(
            step=GenerationStep.GENERATING_ATTRIBUTES,
            weight=20,
            required=True,
            run=generate_attributes,
            message="Generating character attributes",
            event_data=_attributes_event,
        ),
        StepDefinition(
            step=GenerationStep.GENERATING_NARRATIVE,
            weight=25,
            required=True,
            run=generate_narrative,
            message="Writing personality and history",
            event_data=_narrative_event,
        ),
        StepDefinition(
            step=GenerationStep.COMPILING_ENTITY,
            weight=10,
            required=True,
            run=compile_character,
            message="Compiling character",
        ),
    ),
    persisting_weight=10,
    queuing_weight=5,
    build_asset_job=build_avatar_job,
)
