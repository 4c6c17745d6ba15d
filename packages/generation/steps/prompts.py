"""Prompt builders for the character and story pipelines."""

import json
from typing import Any, Dict, Optional

from packages.generation.capabilities.models import CapabilityPrompt
from packages.generation.models.domain.analysis import (
    CharacterImageAnalysis,
    StoryImageAnalysis,
)

AGE_RATINGS = "L|TEN|TWELVE|FOURTEEN|SIXTEEN|EIGHTEEN"
JSON_ONLY = "Return ONLY valid JSON, no markdown or commentary."


def _lines(*lines: str) -> str:
    return "\n".join(lines)


# Image analysis


def character_image_analysis_prompt() -> CapabilityPrompt:
    return CapabilityPrompt(
        system_prompt=_lines(
            "You are a precise character image analyzer specialized in extracting character details from images.",
            "Given an input image, analyze the character and return strictly a JSON object with this structure:",
            "{",
            '  "physicalCharacteristics": {"hairColor", "hairStyle", "eyeColor", "skinTone",',
            '    "height": "very short|short|average|tall|very tall",',
            '    "build": "slim|average|athletic|muscular|heavyset",',
            '    "age": "child|teenager|young adult|adult|middle-aged|elderly",',
            '    "gender", "species", "distinctiveFeatures": [string]},',
            '  "visualStyle": {"artStyle": "anime|realistic|semi-realistic|cartoon|chibi|pixel art|other", "colorPalette", "mood"},',
            '  "clothing": {"outfit", "style", "accessories": [string]},',
            '  "suggestedTraits": {"personality": [string], "archetype", "suggestedOccupation"},',
            f'  "suggestedAgeRating": "{AGE_RATINGS}",',
            '  "overallDescription": "2-3 sentence description in en-US"',
            "}",
            "All fields except overallDescription are optional; only include what you can confidently identify.",
            "For arrays, limit to 3-5 most prominent items.",
            JSON_ONLY,
        ),
        user_prompt=_lines(
            "Analyze the character in the provided image and extract information as per the JSON schema.",
            "Only describe what is actually visible in the image. Omit features that are not clearly visible.",
        ),
        temperature=0.3,
        max_tokens=1024,
    )


def story_image_analysis_prompt() -> CapabilityPrompt:
    return CapabilityPrompt(
        system_prompt=_lines(
            "You are a precise story scene image analyzer specialized in extracting story-relevant details from images.",
            "Return strictly a JSON object with this structure:",
            "{",
            '  "setting", "environment", "mood", "atmosphere", "timeOfDay", "visualStyle", "colorPalette",',
            '  "suggestedGenre", "suggestedThemes": [string], "keyElements": [string],',
            f'  "suggestedAgeRating": "{AGE_RATINGS}",',
            '  "overallDescription": "2-3 sentence description in en-US of what this scene could be for a story"',
            "}",
            "All fields except overallDescription are optional.",
            JSON_ONLY,
        ),
        user_prompt="Analyze the scene in the provided image and extract story-relevant information as per the JSON schema.",
        temperature=0.3,
        max_tokens=1024,
    )


# Character


def character_attributes_prompt(
    description: str, analysis: Optional[CharacterImageAnalysis]
) -> CapabilityPrompt:
    hints = ""
    if analysis is not None:
        hints = "\n\nVisual analysis of the reference image:\n" + analysis.model_dump_json(
            by_alias=True, exclude_none=True
        )
    return CapabilityPrompt(
        system_prompt=_lines(
            "You are a character data extraction assistant.",
            "Given a description of a character, extract its core attributes.",
            "Return ONLY a JSON object with these fields:",
            "{",
            '  "firstName": "string (required)",',
            '  "lastName": "string (optional)",',
            '  "age": number (optional, numeric age),',
            '  "gender": "string (optional)",',
            '  "species": "string (optional, e.g., human, elf, vampire)",',
            '  "style": "ANIME|REALISTIC|SEMI_REALISTIC|CARTOON|CHIBI|PIXEL_ART (optional)",',
            f'  "suggestedAgeRating": "{AGE_RATINGS} (optional)"',
            "}",
            "Invent a fitting name when none is given. Stay true to the description.",
            JSON_ONLY,
        ),
        user_prompt=f"Character description:\n{description}{hints}\n\nExtract character attributes as JSON.",
        temperature=0.7,
        max_tokens=512,
    )


def character_narrative_prompt(
    description: str, attributes: Dict[str, Any]
) -> CapabilityPrompt:
    return CapabilityPrompt(
        system_prompt=_lines(
            "You are a creative character writer for an interactive role-play platform.",
            "Write the body of a character sheet. Return ONLY a JSON object:",
            "{",
            '  "physicalCharacteristics": "string (detailed physical description)",',
            '  "personality": "string (personality traits and characteristics)",',
            '  "history": "string (background story, 2-3 paragraphs)"',
            "}",
            "All text must be in English (en-US) and consistent with the given attributes.",
            JSON_ONLY,
        ),
        user_prompt=_lines(
            f"Character description:\n{description}",
            "",
            f"Attributes: {json.dumps(attributes, default=str)}",
            "",
            "Write the character sheet as JSON.",
        ),
        temperature=0.8,
        max_tokens=2048,
    )


# Story


def story_concept_prompt(
    description: str, analysis: Optional[StoryImageAnalysis]
) -> CapabilityPrompt:
    hints = ""
    if analysis is not None:
        hints = "\n\nScene analysis of the reference image:\n" + analysis.model_dump_json(
            by_alias=True, exclude_none=True
        )
    return CapabilityPrompt(
        system_prompt=_lines(
            "You are a creative story compiler assistant.",
            "Compile a story concept from the available inputs. Return ONLY a JSON object:",
            "{",
            '  "title": "string (required)",',
            '  "synopsis": "string (required, 100-200 words)",',
            '  "suggestedGenre": "string (fantasy, sci-fi, romance, horror, adventure, comedy, drama, etc.)",',
            '  "mood": "string (adventurous, romantic, dark, mysterious, light, epic, etc.)",',
            '  "setting": "string (where the story takes place)",',
            f'  "suggestedAgeRating": "{AGE_RATINGS}"',
            "}",
            JSON_ONLY,
        ),
        user_prompt=f"Story idea:\n{description}{hints}\n\nCompile the story concept as JSON.",
        temperature=0.8,
        max_tokens=1024,
    )


def _concept_lines(concept: Dict[str, Any]) -> str:
    return _lines(
        f"Title: {concept.get('title')}",
        f"Synopsis: {concept.get('synopsis')}",
        f"Genre: {concept.get('genre') or 'unspecified'}",
        f"Mood: {concept.get('mood') or 'unspecified'}",
        f"Setting: {concept.get('setting') or 'unspecified'}",
    )


def story_characters_prompt(concept: Dict[str, Any]) -> CapabilityPrompt:
    return CapabilityPrompt(
        system_prompt=_lines(
            "You create the cast of an interactive story.",
            "Return ONLY a JSON object with 1-4 characters, exactly one with role MAIN:",
            '{"characters": [{"firstName", "lastName", "age", "gender", "personality",',
            '  "physicalCharacteristics", "attire", "role": "MAIN|SECONDARY"}]}',
            JSON_ONLY,
        ),
        user_prompt=_concept_lines(concept) + "\n\nCreate the characters as JSON.",
        temperature=0.8,
        max_tokens=1536,
    )


def story_scene_prompt(concept: Dict[str, Any], characters: list) -> CapabilityPrompt:
    names = ", ".join(c.first_name for c in characters) or "the protagonist"
    return CapabilityPrompt(
        system_prompt=_lines(
            "You write immersive opening scenes for interactive stories.",
            'Return ONLY a JSON object: {"initialText": "string (300-500 words opening scene)"}',
            "Set the tone, introduce the setting and leave room for the reader to act.",
            JSON_ONLY,
        ),
        user_prompt=_concept_lines(concept)
        + f"\nCharacters: {names}\n\nWrite the opening scene as JSON.",
        temperature=0.9,
        max_tokens=2048,
    )


def story_objectives_prompt(concept: Dict[str, Any]) -> CapabilityPrompt:
    return CapabilityPrompt(
        system_prompt=_lines(
            "Given a story concept, create 3-5 key objectives that represent major phases or milestones of the story.",
            "Each objective is one short sentence in the imperative.",
            'Return ONLY a JSON object: {"objectives": [string]}',
            JSON_ONLY,
        ),
        user_prompt=_concept_lines(concept)
        + "\n\nCreate 3-5 story objectives representing key phases/milestones.",
        temperature=0.7,
        max_tokens=512,
    )


def story_tags_prompt(concept: Dict[str, Any], content_tags: str) -> CapabilityPrompt:
    return CapabilityPrompt(
        system_prompt=_lines(
            "You are a story tagging assistant.",
            "Return JSON with:",
            "{",
            '  "tagNames": ["3-5 genre/topic tags like: fantasy, adventure, magic, dragons"],',
            f'  "contentTagNames": ["0-3 content warning tags if applicable (choose from: {content_tags})"]',
            "}",
            "Be conservative with content warnings - only include if explicitly present.",
            JSON_ONLY,
        ),
        user_prompt=_concept_lines(concept) + "\n\nGenerate tags for this story.",
        temperature=0.3,
        max_tokens=512,
    )


def story_cover_prompt(concept: Dict[str, Any], scene_excerpt: str) -> CapabilityPrompt:
    return CapabilityPrompt(
        system_prompt=_lines(
            "You write prompts for an image model that renders story cover art.",
            'Return ONLY a JSON object: {"coverPrompt": "string (one paragraph, comma separated visual descriptors)"}',
            "Describe composition, setting, lighting and mood. No text or lettering in the image.",
            JSON_ONLY,
        ),
        user_prompt=_concept_lines(concept)
        + f"\nOpening: {scene_excerpt}\n\nWrite the cover art prompt as JSON.",
        temperature=0.7,
        max_tokens=512,
    )
