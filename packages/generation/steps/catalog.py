"""
Step catalogs.

A catalog is the fixed, ordered list of steps for one domain plus the
weights of the two orchestrator-run tail steps (PERSISTING, QUEUING_ASSET).
Weights sum to exactly 100 so progress always ends at 100 whatever gets
skipped.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

from packages.assets.models.domain.asset_job import AssetJob
from packages.generation.models.domain.enums import GenerationDomain
from packages.generation.steps.base import StepDefinition

TOTAL_WEIGHT = 100

AssetJobBuilder = Callable[[Dict[str, Any], int, str], AssetJob]


@dataclass(frozen=True)
class StepCatalog:
    domain: GenerationDomain
    steps: Tuple[StepDefinition, ...]
    persisting_weight: int
    queuing_weight: int
    build_asset_job: AssetJobBuilder

    def __post_init__(self):
        total = self.total_weight
        if total != TOTAL_WEIGHT:
            raise ValueError(
                f"{self.domain.value} catalog weights sum to {total}, expected {TOTAL_WEIGHT}"
            )
        names = [s.step for s in self.steps]
        if len(names) != len(set(names)):
            raise ValueError(f"{self.domain.value} catalog lists a step twice")

    @property
    def total_weight(self) -> int:
        return (
            sum(s.weight for s in self.steps)
            + self.persisting_weight
            + self.queuing_weight
        )

    def __iter__(self):
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)


def get_catalog(domain: GenerationDomain) -> StepCatalog:
    # Imported here: the catalog modules import StepCatalog from this module
    if domain == GenerationDomain.CHARACTER:
        from packages.generation.steps.character import CHARACTER_CATALOG

        return CHARACTER_CATALOG
    if domain == GenerationDomain.STORY:
        from packages.generation.steps.story import STORY_CATALOG

        return STORY_CATALOG
    raise ValueError(f"No catalog for domain {domain}")
