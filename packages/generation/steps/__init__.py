from packages.generation.steps.base import StepContext, StepDefinition
from packages.generation.steps.catalog import StepCatalog, get_catalog
from packages.generation.steps.executor import execute_step

__all__ = [
    "StepContext",
    "StepDefinition",
    "StepCatalog",
    "get_catalog",
    "execute_step",
]
