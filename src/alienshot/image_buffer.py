"""
In-memory raster representation shared by every stage of the filter pipeline.

An ImageBuffer wraps an interleaved uint8 numpy array together with the
colorspace its values are expressed in. Buffers are read-only: every
conversion or processing stage produces a new buffer.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class ColorSpace(Enum):
    """Representations an ImageBuffer can hold."""

    DEVICE = "device"  # BGR, as delivered by the codec
    HSV = "hsv"
    LAB = "lab"
    PLANE = "plane"  # single channel produced by a split


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """Immutable raster: (H, W, 3) uint8 pixels, or (H, W) for a split plane."""

    pixels: np.ndarray
    color_space: ColorSpace = ColorSpace.DEVICE

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise ValueError("Pixels must be a numpy array")
        if pixels.dtype != np.uint8:
            raise ValueError("Pixels must be uint8")
        if self.color_space is ColorSpace.PLANE:
            if pixels.ndim != 2:
                raise ValueError("A channel plane must be a 2D array")
        elif pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError("Image must have shape (H, W, 3)")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("Image must not be empty")

        # Own a private read-only copy so nobody can mutate the buffer later.
        owned = np.ascontiguousarray(pixels).copy()
        owned.setflags(write=False)
        object.__setattr__(self, "pixels", owned)

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else self.pixels.shape[2]

    @property
    def shape(self) -> tuple[int, ...]:
        return self.pixels.shape

    def clone(self) -> "ImageBuffer":
        return ImageBuffer(self.pixels, self.color_space)

    def copy_pixels(self) -> np.ndarray:
        """Writable copy of the pixel data."""
        return self.pixels.copy()

    def with_pixels(
        self, pixels: np.ndarray, color_space: ColorSpace | None = None
    ) -> "ImageBuffer":
        """New buffer with the given pixels, keeping this buffer's tag by default."""
        return ImageBuffer(pixels, color_space or self.color_space)

    def same_geometry(self, other: "ImageBuffer") -> bool:
        return self.shape == other.shape

    def __repr__(self):
        return (
            f"ImageBuffer({self.width}x{self.height}x{self.channels}, "
            f"{self.color_space.value})"
        )
