"""
Base enhancement stage: denoise -> white balance -> auto-level.

`process()` is a standalone clean-up pass. The filter looks in
`alienshot.recipes` reuse the individual steps (not the whole pass), so
each helper here is exposed on its own.
"""

import logging

from .image_buffer import ImageBuffer
from .processors import (
    AutoLevelProcessor,
    ClaheProcessor,
    DenoiseProcessor,
    SaturationProcessor,
    UpscaleProcessor,
)

logger = logging.getLogger(__name__)

DENOISE_STRENGTH = 3.0
DENOISE_COLOR_STRENGTH = 3.0
DENOISE_TEMPLATE_WINDOW = 7
DENOISE_SEARCH_WINDOW = 21
WHITE_BALANCE_CLIP_LIMIT = 1.5
SATURATION_BOOST = 1.05
SUPER_RESOLUTION_FACTOR = 1.2


def denoise(image: ImageBuffer) -> ImageBuffer:
    """Light non-local means denoising that keeps fine detail."""
    return DenoiseProcessor().process(
        image,
        strength=DENOISE_STRENGTH,
        color_strength=DENOISE_COLOR_STRENGTH,
        template_window=DENOISE_TEMPLATE_WINDOW,
        search_window=DENOISE_SEARCH_WINDOW,
    ).image


def white_balance(image: ImageBuffer, clip_limit: float = WHITE_BALANCE_CLIP_LIMIT) -> ImageBuffer:
    """CLAHE on Lab lightness with a moderate clip limit to avoid halos."""
    return ClaheProcessor().process(image, clip_limit=clip_limit).image


def auto_level(image: ImageBuffer) -> ImageBuffer:
    """Min-max stretch to the full 8-bit range; no-op on full-range input."""
    return AutoLevelProcessor().process(image).image


def process(image: ImageBuffer) -> ImageBuffer:
    """
    Run the full base pass on a clone of `image`.

    Args:
        image: Device buffer; left untouched

    Returns:
        New buffer with the same geometry
    """
    logger.info(f"Base enhancement on {image}")
    enhanced = denoise(image.clone())
    enhanced = white_balance(enhanced)
    enhanced = auto_level(enhanced)
    return enhanced


# Not used by any filter look or by process(); kept available as standalone steps.


def boost_saturation(image: ImageBuffer, factor: float = SATURATION_BOOST) -> ImageBuffer:
    """Very light saturation boost (+5 % by default)."""
    return SaturationProcessor().process(image, factor=factor).image


def super_resolution(image: ImageBuffer, factor: float = SUPER_RESOLUTION_FACTOR) -> ImageBuffer:
    """Bicubic upscale by `factor` (x1.2 by default)."""
    return UpscaleProcessor().process(image, factor=factor).image
