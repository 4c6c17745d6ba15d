"""
Generation pricing.

Cost depends only on the requested modality, not on which steps end up
degrading to fallback data.
"""

from packages.generation.models.domain.request import Modality

TEXT_ANALYSIS_COST = 20
CONCEPT_COST = 15
SCENE_WRITING_COST = 10
COVER_COST = 30

BASE_COST = TEXT_ANALYSIS_COST + CONCEPT_COST + SCENE_WRITING_COST + COVER_COST
IMAGE_ANALYSIS_SURCHARGE = 25


def cost(modality: Modality) -> int:
    """Credits charged for a generation request with this modality."""
    total = BASE_COST
    if modality.has_image:
        total += IMAGE_ANALYSIS_SURCHARGE
    return total
