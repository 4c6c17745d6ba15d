from enum import Enum
from typing import Optional


class VisualStyle(str, Enum):
    ANIME = "ANIME"
    REALISTIC = "REALISTIC"
    SEMI_REALISTIC = "SEMI_REALISTIC"
    CARTOON = "CARTOON"
    CHIBI = "CHIBI"
    PIXEL_ART = "PIXEL_ART"

    @classmethod
    def from_art_style(cls, art_style: Optional[str]) -> Optional["VisualStyle"]:
        """Map an image-analysis art style ("semi-realistic", "pixel art") to a style."""
        if not art_style:
            return None
        key = art_style.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return None
