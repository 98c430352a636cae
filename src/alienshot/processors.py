#!/usr/bin/env python3
"""
alienshot Processors
====================

Independent, single-purpose image processors. Every filter look and the
base enhancement pass is a sequence of these stages.

Each processor:
- takes a device-native (BGR) ImageBuffer and keyword parameters
- never mutates its input
- returns a ProcessingResult whose image has the input's geometry
  (except the upscaler) and values clamped to the 8-bit range
"""

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

import cv2
import numpy as np

from .colorspaces import merge_channels, split_channels, to_device, to_hsv, to_lab
from .image_buffer import ColorSpace, ImageBuffer
from .numba_utils import apply_vignette

logger = logging.getLogger(__name__)

# Numba's default threading layer rejects concurrent parallel launches.
_VIGNETTE_LOCK = threading.Lock()


class ProcessorType(Enum):
    """Types of processors available."""

    DENOISE = "denoise"
    CLAHE = "clahe"
    AUTO_LEVEL = "auto_level"
    SATURATION = "saturation"
    CONTRAST = "contrast"
    TINT = "tint"
    SHARPEN = "sharpen"
    VIGNETTE = "vignette"
    UPSCALE = "upscale"


class ProcessingResult:
    """Result object for processing operations."""

    def __init__(
        self,
        image: ImageBuffer,
        processor_type: str,
        parameters: dict[str, Any],
        statistics: dict | None = None,
    ):
        self.image = image
        self.processor_type = processor_type
        self.parameters = parameters
        self.statistics = statistics or {}

    def __repr__(self):
        return f"ProcessingResult({self.processor_type}, shape={self.image.shape})"


class BaseProcessor(ABC):
    """Abstract base class for all image processors."""

    def __init__(self, name: str):
        self.name = name
        self._last_result = None

    def get_last_result(self) -> ProcessingResult | None:
        """Get the result of the last processing operation."""
        return self._last_result

    @abstractmethod
    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        """Process the input image and return a ProcessingResult."""
        pass

    def _finish(
        self, image: ImageBuffer, parameters: dict[str, Any], stats: dict | None = None
    ) -> ProcessingResult:
        logger.debug(f"{self.name}: {parameters}")
        result = ProcessingResult(
            image=image,
            processor_type=self.name,
            parameters=parameters,
            statistics=stats,
        )
        self._last_result = result
        return result

    @staticmethod
    def _validate_image(image: ImageBuffer) -> None:
        """Validate input image format."""
        if image is None:
            raise ValueError("Image cannot be None")

        if not isinstance(image, ImageBuffer):
            raise ValueError("Image must be an ImageBuffer")

        if image.color_space is not ColorSpace.DEVICE:
            raise ValueError(
                f"Processors expect a device buffer, got {image.color_space.value}"
            )

    @staticmethod
    def _ensure_uint8_range(image: np.ndarray) -> np.ndarray:
        """Round and clamp to the valid uint8 range."""
        return np.clip(np.rint(image), 0, 255).astype(np.uint8)


class DenoiseProcessor(BaseProcessor):
    """
    Edge-preserving non-local means smoothing.

    The defaults are deliberately light (h = 3) so fine detail survives.
    """

    def __init__(self):
        super().__init__("Denoise")

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        """
        Args:
            image: Input device buffer
            strength: Luminance filter strength (default: 3.0)
            color_strength: Chrominance filter strength (default: 3.0)
            template_window: Template patch size, odd (default: 7)
            search_window: Search area size, odd (default: 21)
        """
        self._validate_image(image)

        strength = float(kwargs.get("strength", 3.0))
        color_strength = float(kwargs.get("color_strength", 3.0))
        template_window = int(kwargs.get("template_window", 7))
        search_window = int(kwargs.get("search_window", 21))

        if strength < 0 or color_strength < 0:
            raise ValueError("Denoise strengths must be non-negative")
        for size in (template_window, search_window):
            if size < 1 or size % 2 == 0:
                raise ValueError("Denoise window sizes must be odd and positive")

        denoised = cv2.fastNlMeansDenoisingColored(
            np.ascontiguousarray(image.pixels),
            None,
            strength,
            color_strength,
            template_window,
            search_window,
        )

        parameters = {
            "strength": strength,
            "color_strength": color_strength,
            "template_window": template_window,
            "search_window": search_window,
        }
        return self._finish(image.with_pixels(denoised), parameters)


class ClaheProcessor(BaseProcessor):
    """
    Contrast-limited adaptive histogram equalization on the Lab lightness channel.

    Chrominance (a, b) is passed through untouched, so hue does not shift.
    """

    def __init__(self):
        super().__init__("CLAHE")

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        """
        Args:
            image: Input device buffer
            clip_limit: Contrast limit (default: 1.5)
            tile_grid: Tiles per axis (default: 8)
        """
        self._validate_image(image)

        clip_limit = float(kwargs.get("clip_limit", 1.5))
        tile_grid = int(kwargs.get("tile_grid", 8))

        if clip_limit <= 0:
            raise ValueError("clip_limit must be positive")
        if tile_grid < 1:
            raise ValueError("tile_grid must be at least 1")

        lab = to_lab(image)
        lightness, a_plane, b_plane = split_channels(lab)

        clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_grid, tile_grid))
        equalized = clahe.apply(np.ascontiguousarray(lightness.pixels))

        merged = merge_channels(
            [lightness.with_pixels(equalized), a_plane, b_plane], ColorSpace.LAB
        )
        result = to_device(merged)

        stats = {
            "lightness_std_before": float(np.std(lightness.pixels)),
            "lightness_std_after": float(np.std(equalized)),
        }
        parameters = {"clip_limit": clip_limit, "tile_grid": tile_grid}
        return self._finish(result, parameters, stats)


class AutoLevelProcessor(BaseProcessor):
    """
    Global min-max stretch to the full 8-bit range, computed in floating point.

    Input that already spans [0, 255] is returned unchanged, as is a flat
    image (min == max), which has no range to stretch.
    """

    def __init__(self):
        super().__init__("Auto Level")

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        self._validate_image(image)

        working = image.pixels.astype(np.float32)
        low = float(working.min())
        high = float(working.max())

        stats = {"original_range": (low, high)}

        if (low <= 0.0 and high >= 255.0) or high - low < 1e-6:
            stats["stretched"] = False
            return self._finish(image.clone(), {}, stats)

        normalized = (working - low) / (high - low)
        stretched = self._ensure_uint8_range(normalized * 255.0)

        stats["stretched"] = True
        return self._finish(image.with_pixels(stretched), {}, stats)


class SaturationProcessor(BaseProcessor):
    """Scale the HSV saturation channel, clamping at 255."""

    def __init__(self):
        super().__init__("Saturation")

    @classmethod
    def scale_saturation(cls, saturation: np.ndarray, factor: float) -> np.ndarray:
        """min(255, rint(s * factor)) per pixel; never wraps around."""
        return cls._ensure_uint8_range(saturation.astype(np.float32) * factor)

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        """
        Args:
            image: Input device buffer
            factor: Saturation multiplier (default: 1.0, < 1 desaturates)
        """
        self._validate_image(image)

        factor = float(kwargs.get("factor", 1.0))
        if factor < 0:
            raise ValueError("Saturation factor must be non-negative")

        hsv = to_hsv(image)
        hue, saturation, value = split_channels(hsv)
        scaled = self.scale_saturation(saturation.pixels, factor)

        merged = merge_channels(
            [hue, saturation.with_pixels(scaled), value], ColorSpace.HSV
        )
        result = to_device(merged)

        stats = {
            "mean_saturation_before": float(np.mean(saturation.pixels)),
            "mean_saturation_after": float(np.mean(scaled)),
        }
        return self._finish(result, {"factor": factor}, stats)


class ContrastProcessor(BaseProcessor):
    """Affine brightness/contrast: output = input * scale + offset."""

    def __init__(self):
        super().__init__("Contrast")

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        self._validate_image(image)

        scale = float(kwargs.get("scale", 1.0))
        offset = float(kwargs.get("offset", 0.0))

        adjusted = self._ensure_uint8_range(
            image.pixels.astype(np.float32) * scale + offset
        )
        return self._finish(
            image.with_pixels(adjusted), {"scale": scale, "offset": offset}
        )


class TintProcessor(BaseProcessor):
    """Add a fixed per-channel offset (B, G, R order) to every pixel."""

    def __init__(self):
        super().__init__("Tint")

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        """
        Args:
            image: Input device buffer
            bias: Three additive offsets in device channel order (default: zeros)
        """
        self._validate_image(image)

        bias = tuple(float(v) for v in kwargs.get("bias", (0.0, 0.0, 0.0)))
        if len(bias) != image.channels:
            raise ValueError(f"Tint bias needs {image.channels} values, got {len(bias)}")

        tinted = self._ensure_uint8_range(
            image.pixels.astype(np.float32) + np.array(bias, dtype=np.float32)
        )
        return self._finish(image.with_pixels(tinted), {"bias": bias})


class SharpenProcessor(BaseProcessor):
    """
    3x3 convolution sharpening.

    Every weight is `surround` except the center. With the defaults
    (1.8, -0.1) the kernel sums to 1.0, so average brightness is kept.
    """

    def __init__(self):
        super().__init__("Sharpen")

    @staticmethod
    def build_kernel(center: float, surround: float) -> np.ndarray:
        kernel = np.full((3, 3), surround, dtype=np.float32)
        kernel[1, 1] = center
        return kernel

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        self._validate_image(image)

        center = float(kwargs.get("center", 1.8))
        surround = float(kwargs.get("surround", -0.1))
        kernel = self.build_kernel(center, surround)

        # ddepth -1 keeps uint8 output; OpenCV saturates on overflow.
        sharpened = cv2.filter2D(np.ascontiguousarray(image.pixels), -1, kernel)

        parameters = {
            "center": center,
            "surround": surround,
            "kernel_sum": float(kernel.sum()),
        }
        return self._finish(image.with_pixels(sharpened), parameters)


class VignetteProcessor(BaseProcessor):
    """Radial darkening: factor 1.0 at the center, 1 - strength at the corners."""

    def __init__(self):
        super().__init__("Vignette")

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        self._validate_image(image)

        strength = float(kwargs.get("strength", 0.4))
        if not 0.0 <= strength <= 1.0:
            raise ValueError("Vignette strength must be between 0.0 and 1.0")

        with _VIGNETTE_LOCK:
            vignetted = apply_vignette(np.ascontiguousarray(image.pixels), strength)
        return self._finish(image.with_pixels(vignetted), {"strength": strength})


class UpscaleProcessor(BaseProcessor):
    """Bicubic upscaling. Changes the buffer geometry."""

    def __init__(self):
        super().__init__("Upscale")

    def process(self, image: ImageBuffer, **kwargs) -> ProcessingResult:
        self._validate_image(image)

        factor = float(kwargs.get("factor", 1.2))
        if factor <= 0:
            raise ValueError("Upscale factor must be positive")

        new_size = (
            max(1, int(image.width * factor)),
            max(1, int(image.height * factor)),
        )
        resized = cv2.resize(
            np.ascontiguousarray(image.pixels),
            new_size,
            interpolation=cv2.INTER_CUBIC,
        )
        stats = {"original_size": (image.width, image.height), "new_size": new_size}
        return self._finish(image.with_pixels(resized), {"factor": factor}, stats)


class ProcessorFactory:
    """Factory class for creating processor instances."""

    _processors = {
        ProcessorType.DENOISE: DenoiseProcessor,
        ProcessorType.CLAHE: ClaheProcessor,
        ProcessorType.AUTO_LEVEL: AutoLevelProcessor,
        ProcessorType.SATURATION: SaturationProcessor,
        ProcessorType.CONTRAST: ContrastProcessor,
        ProcessorType.TINT: TintProcessor,
        ProcessorType.SHARPEN: SharpenProcessor,
        ProcessorType.VIGNETTE: VignetteProcessor,
        ProcessorType.UPSCALE: UpscaleProcessor,
    }

    @classmethod
    def create_processor(cls, processor_type: ProcessorType) -> BaseProcessor:
        """Create a processor instance by type."""
        if processor_type not in cls._processors:
            raise ValueError(f"Unknown processor type: {processor_type}")

        return cls._processors[processor_type]()

    @classmethod
    def get_available_processors(cls) -> list[ProcessorType]:
        """Get list of available processor types."""
        return list(cls._processors.keys())
