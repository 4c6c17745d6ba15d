"""
Story pipeline.

upload -> analyze image -> description -> concept -> characters -> scene
-> objectives -> tags -> cover prompt -> compile.
"""

from typing import Any, Dict, List, Optional

from common.core.constants import AgeRating
from common.core.exceptions import ProcessingError, ProviderError
from packages.assets.models.domain.asset_job import AssetGenerationType, AssetJob
from packages.generation.capabilities.models import CapabilityContext
from packages.generation.models.domain.analysis import StoryImageAnalysis
from packages.generation.models.domain.enums import (
    CapabilityKind,
    GenerationDomain,
    GenerationStep,
)
from packages.generation.models.domain.progress import (
    CoverPromptData,
    ObjectivesData,
    SceneData,
    StoryCharactersData,
    StoryConceptData,
    TagsData,
)
from packages.generation.steps import prompts
from packages.generation.steps.base import StepContext, StepDefinition
from packages.generation.steps.catalog import StepCatalog
from packages.generation.steps.shared import (
    analyze_image_step,
    extract_description_step,
    upload_image_step,
)
from packages.stories.models.domain.story import (
    MAX_OBJECTIVES,
    ContentTag,
    StoryCharacter,
    StoryCharacterRole,
    StoryDraft,
    StoryObjective,
)

DEFAULT_SYNOPSIS = "An exciting adventure awaits."
DEFAULT_OBJECTIVES = [
    "Begin the journey",
    "Explore the world",
    "Discover the truth",
    "Face the final challenge",
]
MAX_CHARACTERS = 4
MAX_TAGS = 5
MAX_CONTENT_TAGS = 3
SCENE_PREVIEW_LENGTH = 280


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _concept(ctx: StepContext) -> Dict[str, Any]:
    return {
        "title": ctx.get("title"),
        "synopsis": ctx.get("synopsis"),
        "genre": ctx.get("genre"),
        "mood": ctx.get("mood"),
        "setting": ctx.get("setting"),
    }


# GENERATING_CONCEPT


def compile_concept(
    reply: Dict[str, Any], analysis: Optional[StoryImageAnalysis]
) -> Dict[str, Any]:
    genre = _clean(reply.get("suggestedGenre")) or (analysis.suggested_genre if analysis else None)
    title = _clean(reply.get("title"))
    if not title:
        title = f"A {genre.title()} Adventure" if genre else "Untitled Story"
    synopsis = _clean(reply.get("synopsis")) or (
        analysis.overall_description if analysis else None
    ) or DEFAULT_SYNOPSIS

    text_rating = AgeRating.parse(reply.get("suggestedAgeRating"))
    image_rating = AgeRating.parse(analysis.suggested_age_rating) if analysis else AgeRating.L

    return {
        "title": title,
        "synopsis": synopsis,
        "genre": genre,
        "mood": _clean(reply.get("mood")) or (analysis.mood if analysis else None),
        "setting": _clean(reply.get("setting")) or (analysis.setting if analysis else None),
        "age_rating": image_rating if image_rating != AgeRating.L else text_rating,
    }


async def generate_concept(ctx: StepContext) -> Dict[str, Any]:
    analysis = ctx.get("image_analysis")
    reply = await ctx.capability(CapabilityKind.TEXT_COMPILATION)(
        prompts.story_concept_prompt(ctx.get("description"), analysis),
        CapabilityContext(session_id=ctx.session_id),
    )
    return compile_concept(reply, analysis)


def _concept_event(produced: Dict[str, Any]) -> StoryConceptData:
    return StoryConceptData(
        title=produced["title"],
        synopsis=produced["synopsis"],
        genre=produced.get("genre"),
        mood=produced.get("mood"),
        setting=produced.get("setting"),
    )


# GENERATING_CHARACTERS


def default_lead() -> StoryCharacter:
    return StoryCharacter(
        id="char_1",
        first_name="Hero",
        age="young adult",
        personality="brave and adventurous",
        physical_characteristics="determined expression",
        attire="adventurer outfit suitable for the genre",
        role=StoryCharacterRole.MAIN,
    )


def parse_characters(raw: Any) -> List[StoryCharacter]:
    if not isinstance(raw, list):
        return []

    characters: List[StoryCharacter] = []
    for item in raw[:MAX_CHARACTERS]:
        if not isinstance(item, dict):
            continue
        role = str(item.get("role") or "").upper()
        characters.append(
            StoryCharacter(
                id=f"char_{len(characters) + 1}",
                first_name=_clean(item.get("firstName")) or "Character",
                last_name=_clean(item.get("lastName")),
                age=_clean(item.get("age")),
                gender=_clean(item.get("gender")),
                personality=_clean(item.get("personality")),
                physical_characteristics=_clean(item.get("physicalCharacteristics")),
                attire=_clean(item.get("attire")),
                role=StoryCharacterRole.MAIN if role == "MAIN" else StoryCharacterRole.SECONDARY,
            )
        )

    # Exactly one lead
    leads = [c for c in characters if c.role == StoryCharacterRole.MAIN]
    if characters and len(leads) != 1:
        lead = leads[0] if leads else characters[0]
        characters = [
            c.model_copy(
                update={
                    "role": StoryCharacterRole.MAIN
                    if c is lead
                    else StoryCharacterRole.SECONDARY
                }
            )
            for c in characters
        ]
    return characters


async def generate_characters(ctx: StepContext) -> Dict[str, Any]:
    reply = await ctx.capability(CapabilityKind.TEXT_COMPILATION)(
        prompts.story_characters_prompt(_concept(ctx)),
        CapabilityContext(session_id=ctx.session_id),
    )
    characters = parse_characters(reply.get("characters"))
    if not characters:
        raise ProviderError("Character reply contained no characters")
    return {"characters": characters}


def _characters_fallback(ctx: StepContext, error: Exception) -> Dict[str, Any]:
    return {"characters": [default_lead()]}


def _characters_event(produced: Dict[str, Any]) -> StoryCharactersData:
    return StoryCharactersData(names=[c.first_name for c in produced["characters"]])


# WRITING_SCENE


async def write_scene(ctx: StepContext) -> Dict[str, Any]:
    reply = await ctx.capability(CapabilityKind.NARRATIVE_GENERATION)(
        prompts.story_scene_prompt(_concept(ctx), ctx.get("characters") or []),
        CapabilityContext(session_id=ctx.session_id),
    )
    initial_text = _clean(reply.get("initialText"))
    if not initial_text:
        raise ProviderError("Scene reply had no opening text")
    return {"initial_text": initial_text}


def _scene_event(produced: Dict[str, Any]) -> SceneData:
    return SceneData(preview=produced["initial_text"][:SCENE_PREVIEW_LENGTH])


# GENERATING_OBJECTIVES


def build_objectives(descriptions: List[str]) -> List[StoryObjective]:
    return [
        StoryObjective(id=f"obj_{i + 1}", description=description)
        for i, description in enumerate(descriptions[:MAX_OBJECTIVES])
    ]


async def generate_objectives(ctx: StepContext) -> Dict[str, Any]:
    reply = await ctx.capability(CapabilityKind.TEXT_COMPILATION)(
        prompts.story_objectives_prompt(_concept(ctx)),
        CapabilityContext(session_id=ctx.session_id),
    )
    raw = reply.get("objectives")
    descriptions = [d for d in (_clean(o) for o in raw or []) if d] if isinstance(raw, list) else []
    if not descriptions:
        raise ProviderError("Objectives reply was empty")
    return {"objectives": build_objectives(descriptions)}


def _objectives_fallback(ctx: StepContext, error: Exception) -> Dict[str, Any]:
    return {"objectives": build_objectives(DEFAULT_OBJECTIVES)}


def _objectives_event(produced: Dict[str, Any]) -> ObjectivesData:
    return ObjectivesData(objectives=[o.description for o in produced["objectives"]])


# GENERATING_TAGS


def filter_content_tags(names: Any) -> List[ContentTag]:
    if not isinstance(names, list):
        return []
    tags: List[ContentTag] = []
    for name in names:
        try:
            tag = ContentTag(str(name).strip().upper())
        except ValueError:
            continue
        if tag not in tags:
            tags.append(tag)
    return tags[:MAX_CONTENT_TAGS]


def normalize_tags(names: Any) -> List[str]:
    if not isinstance(names, list):
        return []
    tags: List[str] = []
    for name in names:
        tag = _clean(name)
        if tag and tag.lower() not in tags:
            tags.append(tag.lower())
    return tags[:MAX_TAGS]


async def generate_tags(ctx: StepContext) -> Dict[str, Any]:
    vocabulary = ", ".join(tag.value for tag in ContentTag)
    reply = await ctx.capability(CapabilityKind.TEXT_COMPILATION)(
        prompts.story_tags_prompt(_concept(ctx), vocabulary),
        CapabilityContext(session_id=ctx.session_id),
    )
    return {
        "tags": normalize_tags(reply.get("tagNames")),
        "content_tags": filter_content_tags(reply.get("contentTagNames")),
    }


def _tags_fallback(ctx: StepContext, error: Exception) -> Dict[str, Any]:
    return {"tags": [], "content_tags": []}


def _tags_event(produced: Dict[str, Any]) -> TagsData:
    return TagsData(
        tags=produced.get("tags", []),
        content_tags=[t.value for t in produced.get("content_tags", [])],
    )


# GENERATING_COVER_PROMPT


def default_cover_prompt(concept: Dict[str, Any]) -> str:
    parts = [
        "masterpiece, best quality, highly detailed, cinematic lighting",
        "professional book cover illustration",
        concept.get("title") or "untitled story",
        f"{concept.get('genre') or 'adventure'} style",
        f"{concept.get('mood') or 'epic'} atmosphere",
    ]
    if concept.get("setting"):
        parts.append(concept["setting"])
    return ", ".join(parts)


async def generate_cover_prompt(ctx: StepContext) -> Dict[str, Any]:
    excerpt = (ctx.get("initial_text") or "")[:SCENE_PREVIEW_LENGTH]
    reply = await ctx.capability(CapabilityKind.TEXT_COMPILATION)(
        prompts.story_cover_prompt(_concept(ctx), excerpt),
        CapabilityContext(session_id=ctx.session_id),
    )
    cover_prompt = _clean(reply.get("coverPrompt"))
    if not cover_prompt:
        raise ProviderError("Cover prompt reply was empty")
    return {"cover_prompt": cover_prompt}


def _cover_fallback(ctx: StepContext, error: Exception) -> Dict[str, Any]:
    return {"cover_prompt": default_cover_prompt(_concept(ctx))}


def _cover_event(produced: Dict[str, Any]) -> CoverPromptData:
    return CoverPromptData(prompt=produced["cover_prompt"])


# COMPILING_ENTITY


async def compile_story(ctx: StepContext) -> Dict[str, Any]:
    try:
        draft = StoryDraft(
            user_id=ctx.request.requester_id,
            title=ctx.get("title"),
            synopsis=ctx.get("synopsis"),
            initial_text=ctx.get("initial_text"),
            genre=ctx.get("genre"),
            mood=ctx.get("mood"),
            setting=ctx.get("setting"),
            age_rating=ctx.get("age_rating") or AgeRating.L,
            objectives=ctx.get("objectives") or [],
            characters=ctx.get("characters") or [],
            tags=ctx.get("tags") or [],
            content_tags=ctx.get("content_tags") or [],
            cover_prompt=ctx.get("cover_prompt"),
            generation_session_id=ctx.session_id,
        )
    except ValueError as e:
        raise ProcessingError(f"Story failed validation: {e}") from e
    return {"draft": draft}


def build_cover_job(
    partial_entity: Dict[str, Any], entity_id: int, session_id: str
) -> AssetJob:
    draft: StoryDraft = partial_entity["draft"]
    return AssetJob(
        generation_type=AssetGenerationType.COVER,
        user_id=draft.user_id,
        entity_id=entity_id,
        session_id=session_id,
        prompt=draft.cover_prompt or default_cover_prompt(draft.model_dump()),
        reference_image_url=partial_entity.get("reference_image_url"),
    )


STORY_CATALOG = StepCatalog(
    domain=GenerationDomain.STORY,
    steps=(
        upload_image_step(5),
        analyze_image_step(10, prompts.story_image_analysis_prompt, StoryImageAnalysis),
        extract_description_step(10),
        StepDefinition(
            step=GenerationStep.GENERATING_CONCEPT,
            weight=15,
            required=True,
            run=generate_concept,
            message="Compiling story concept",
            event_data=_concept_event,
        ),
        StepDefinition(
            step=GenerationStep.GENERATING_CHARACTERS,
            weight=10,
            required=False,
            run=generate_characters,
            message="Creating characters",
            fallback=_characters_fallback,
            event_data=_characters_event,
        ),
        StepDefinition(
            step=GenerationStep.WRITING_SCENE,
            weight=15,
            required=True,
            run=write_scene,
            message="Writing the opening scene",
            event_data=_scene_event,
        ),
        StepDefinition(
            step=GenerationStep.GENERATING_OBJECTIVES,
            weight=10,
            required=False,
            run=generate_objectives,
            message="Generating objectives",
            fallback=_objectives_fallback,
            event_data=_objectives_event,
        ),
        StepDefinition(
            step=GenerationStep.GENERATING_TAGS,
            weight=5,
            required=False,
            run=generate_tags,
            message="Tagging story",
            fallback=_tags_fallback,
            event_data=_tags_event,
        ),
        StepDefinition(
            step=GenerationStep.GENERATING_COVER_PROMPT,
            weight=5,
            required=False,
            run=generate_cover_prompt,
            message="Preparing cover art prompt",
            fallback=_cover_fallback,
            event_data=_cover_event,
        ),
        StepDefinition(
            step=GenerationStep.COMPILING_ENTITY,
            weight=5,
            required=True,
            run=compile_story,
            message="Compiling story",
        ),
    ),
    persisting_weight=5,
    queuing_weight=5,
    build_asset_job=build_cover_job,
)
