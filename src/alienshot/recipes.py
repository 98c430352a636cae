"""
Filter looks as immutable parameter records.

A FilterRecipe is an ordered tuple of FilterSteps, each naming a processor
and its fixed parameters. All three looks run through the same generic
FilterPipeline (see `alienshot.filters`); only the data differs.

Ollie runs denoise followed by the white-balance CLAHE, while Eiffel and
Reel run denoise alone. Each look keeps its own order of steps.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .enhancement import (
    DENOISE_COLOR_STRENGTH,
    DENOISE_SEARCH_WINDOW,
    DENOISE_STRENGTH,
    DENOISE_TEMPLATE_WINDOW,
    WHITE_BALANCE_CLIP_LIMIT,
)
from .processors import ProcessorType


@dataclass(frozen=True)
class FilterStep:
    """One processor invocation inside a recipe."""

    processor: ProcessorType
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __hash__(self):
        return hash((self.processor, tuple(sorted(self.params.items()))))

    @property
    def kwargs(self) -> dict[str, Any]:
        return dict(self.params)


@dataclass(frozen=True)
class FilterRecipe:
    """A named look: an ordered chain of processor steps."""

    name: str
    description: str
    steps: tuple[FilterStep, ...]

    def __post_init__(self):
        if not self.name:
            raise ValueError("Recipe name must not be empty")
        if not self.steps:
            raise ValueError(f"Recipe '{self.name}' has no steps")
        object.__setattr__(self, "steps", tuple(self.steps))

    def parameter(self, processor: ProcessorType, key: str, default=None):
        """Value of `key` for the first step using `processor`."""
        for step in self.steps:
            if step.processor is processor:
                return step.params.get(key, default)
        return default

    def uses(self, processor: ProcessorType) -> bool:
        return any(step.processor is processor for step in self.steps)


DENOISE_STEP = FilterStep(
    ProcessorType.DENOISE,
    {
        "strength": DENOISE_STRENGTH,
        "color_strength": DENOISE_COLOR_STRENGTH,
        "template_window": DENOISE_TEMPLATE_WINDOW,
        "search_window": DENOISE_SEARCH_WINDOW,
    },
)

OLLIE = FilterRecipe(
    name="Ollie",
    description="Warm, soft vintage",
    steps=(
        DENOISE_STEP,
        FilterStep(ProcessorType.CLAHE, {"clip_limit": WHITE_BALANCE_CLIP_LIMIT}),
        FilterStep(ProcessorType.SATURATION, {"factor": 1.15}),
        FilterStep(ProcessorType.CONTRAST, {"scale": 1.1, "offset": 5.0}),
        # B, G, R: heavier on the warm channels
        FilterStep(ProcessorType.TINT, {"bias": (5.0, 10.0, 15.0)}),
    ),
)

EIFFEL = FilterRecipe(
    name="Eiffel",
    description="Dramatic, high contrast",
    steps=(
        DENOISE_STEP,
        FilterStep(ProcessorType.CLAHE, {"clip_limit": 3.0}),
        FilterStep(ProcessorType.CONTRAST, {"scale": 1.3, "offset": -10.0}),
        FilterStep(ProcessorType.SATURATION, {"factor": 1.20}),
        FilterStep(ProcessorType.SHARPEN, {"center": 1.8, "surround": -0.1}),
    ),
)

REEL = FilterRecipe(
    name="Reel",
    description="Desaturated cinematic",
    steps=(
        DENOISE_STEP,
        FilterStep(ProcessorType.SATURATION, {"factor": 0.85}),
        FilterStep(ProcessorType.CONTRAST, {"scale": 1.15, "offset": 0.0}),
        FilterStep(ProcessorType.VIGNETTE, {"strength": 0.4}),
        # B, G, R: sepia lean
        FilterStep(ProcessorType.TINT, {"bias": (10.0, 15.0, 20.0)}),
    ),
)

FILTER_REGISTRY: dict[str, FilterRecipe] = {
    recipe.name: recipe for recipe in (OLLIE, EIFFEL, REEL)
}


def list_recipes() -> list[FilterRecipe]:
    """Recipes in the order the orchestrator applies them."""
    return list(FILTER_REGISTRY.values())


def get_recipe(name: str) -> FilterRecipe:
    """Look up a recipe by name, case-insensitively."""
    for recipe in FILTER_REGISTRY.values():
        if recipe.name.lower() == name.lower():
            return recipe
    raise ValueError(
        f"Unknown filter '{name}'. Available: {', '.join(FILTER_REGISTRY)}"
    )
