#!/usr/bin/env python3
"""
Generic transform pipeline for the filter looks.

One FilterPipeline runs any FilterRecipe: it clones the source buffer,
pushes the clone through the recipe's steps in order and checks that the
result still has the source geometry. The source buffer is never mutated.
"""

import logging

import numpy as np

from .image_buffer import ColorSpace, ImageBuffer
from .processors import BaseProcessor, ProcessingResult, ProcessorFactory, ProcessorType
from .recipes import EIFFEL, OLLIE, REEL, FilterRecipe

logger = logging.getLogger(__name__)


class FilterPipeline:
    """
    Applies FilterRecipes to device buffers.

    Processors are created per call, so one pipeline instance can serve
    several threads at once.
    """

    def apply(self, image: ImageBuffer, recipe: FilterRecipe) -> ImageBuffer:
        """
        Apply one look to a clone of `image`.

        Args:
            image: Decoded device buffer
            recipe: Look to apply

        Returns:
            New buffer with the same width, height and channel count

        Raises:
            ValueError: If the input is not a device buffer or a step produced
                an invalid result
        """
        result, _ = self.apply_with_results(image, recipe)
        return result

    def apply_with_results(
        self, image: ImageBuffer, recipe: FilterRecipe
    ) -> tuple[ImageBuffer, list[ProcessingResult]]:
        """Like apply(), also returning every step's ProcessingResult."""
        self._validate_input(image)

        processors: dict[ProcessorType, BaseProcessor] = {}
        current = image.clone()
        results = []

        logger.debug(f"Applying {recipe.name} ({len(recipe.steps)} steps) to {image}")

        for step in recipe.steps:
            if step.processor not in processors:
                processors[step.processor] = ProcessorFactory.create_processor(
                    step.processor
                )
            result = processors[step.processor].process(current, **step.kwargs)
            current = result.image
            results.append(result)

        self._validate_output(image, current, recipe)
        return current, results

    @staticmethod
    def _validate_input(image: ImageBuffer) -> None:
        if not isinstance(image, ImageBuffer):
            raise ValueError("Filters expect an ImageBuffer")
        if image.color_space is not ColorSpace.DEVICE:
            raise ValueError(
                f"Filters expect a device buffer, got {image.color_space.value}"
            )

    @staticmethod
    def _validate_output(
        source: ImageBuffer, output: ImageBuffer, recipe: FilterRecipe
    ) -> None:
        if not source.same_geometry(output):
            raise ValueError(
                f"{recipe.name} changed the image geometry: "
                f"{source.shape} -> {output.shape}"
            )
        if output.color_space is not ColorSpace.DEVICE:
            raise ValueError(
                f"{recipe.name} returned a {output.color_space.value} buffer"
            )
        if output.pixels.dtype != np.uint8:
            raise ValueError(f"{recipe.name} returned {output.pixels.dtype} pixels")


# Convenience functions for the three looks


def apply_ollie(image: ImageBuffer) -> ImageBuffer:
    """Warm, soft vintage."""
    return FilterPipeline().apply(image, OLLIE)


def apply_eiffel(image: ImageBuffer) -> ImageBuffer:
    """Dramatic, high contrast."""
    return FilterPipeline().apply(image, EIFFEL)


def apply_reel(image: ImageBuffer) -> ImageBuffer:
    """Desaturated cinematic with vignette."""
    return FilterPipeline().apply(image, REEL)
