from packages.characters.models.domain.enums import VisualStyle
from packages.characters.models.domain.character import Character, CharacterDraft

__all__ = ["VisualStyle", "Character", "CharacterDraft"]
