"""
Color space transformations for the alienshot filter pipeline.

Buffers arrive from the codec in the device-native BGR order. The filters
work on two other representations:

- HSV: hue/saturation/value, used to scale color intensity without
  touching brightness (OpenCV 8-bit convention, H in [0, 180)).
- LAB: perceptual lightness plus two chrominance channels, used so local
  contrast operations only affect luminance.

Every conversion returns a new ImageBuffer tagged with the target space.
"""

import logging
from abc import ABC, abstractmethod

import cv2
import numpy as np

from .image_buffer import ColorSpace, ImageBuffer

logger = logging.getLogger(__name__)


class AbstractColorspace(ABC):
    """A representation reachable from (and back to) device BGR."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the colorspace."""
        pass

    @property
    @abstractmethod
    def tag(self) -> ColorSpace:
        """ColorSpace tag carried by buffers in this representation."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @abstractmethod
    def to_colorspace(self, bgr_image: np.ndarray) -> np.ndarray:
        pass

    @abstractmethod
    def from_colorspace(self, color_image: np.ndarray) -> np.ndarray:
        pass


class DeviceColorspace(AbstractColorspace):
    @property
    def name(self) -> str:
        return "DEVICE"

    @property
    def tag(self) -> ColorSpace:
        return ColorSpace.DEVICE

    @property
    def description(self) -> str:
        return "Device-native BGR as read by the codec."

    def to_colorspace(self, bgr_image: np.ndarray) -> np.ndarray:
        return bgr_image.copy()

    def from_colorspace(self, color_image: np.ndarray) -> np.ndarray:
        return color_image.copy()


class HSVColorspace(AbstractColorspace):
    @property
    def name(self) -> str:
        return "HSV"

    @property
    def tag(self) -> ColorSpace:
        return ColorSpace.HSV

    @property
    def description(self) -> str:
        return "Hue/saturation/value. Scales saturation independent of brightness."

    def to_colorspace(self, bgr_image: np.ndarray) -> np.ndarray:
        return cv2.cvtColor(bgr_image, cv2.COLOR_BGR2HSV)

    def from_colorspace(self, color_image: np.ndarray) -> np.ndarray:
        return cv2.cvtColor(color_image, cv2.COLOR_HSV2BGR)


class LABColorspace(AbstractColorspace):
    @property
    def name(self) -> str:
        return "LAB"

    @property
    def tag(self) -> ColorSpace:
        return ColorSpace.LAB

    @property
    def description(self) -> str:
        return "CIE LAB (8-bit). Separates lightness from chrominance."

    def to_colorspace(self, bgr_image: np.ndarray) -> np.ndarray:
        return cv2.cvtColor(bgr_image, cv2.COLOR_BGR2Lab)

    def from_colorspace(self, color_image: np.ndarray) -> np.ndarray:
        return cv2.cvtColor(color_image, cv2.COLOR_Lab2BGR)


COLORSPACES: dict[ColorSpace, AbstractColorspace] = {
    ColorSpace.DEVICE: DeviceColorspace(),
    ColorSpace.HSV: HSVColorspace(),
    ColorSpace.LAB: LABColorspace(),
}


class ColorspaceManager:
    """Manager for available colorspaces."""

    def list_available(self):
        """List all available colorspace names."""
        return [cs.name for cs in COLORSPACES.values()]

    def get_colorspace(self, tag: ColorSpace) -> AbstractColorspace:
        """Get a colorspace instance by tag."""
        if tag not in COLORSPACES:
            raise ValueError(f"Unknown colorspace '{tag}'")
        return COLORSPACES[tag]

    def is_available(self, tag) -> bool:
        return tag in COLORSPACES


def convert(buffer: ImageBuffer, target: ColorSpace) -> ImageBuffer:
    """
    Convert a buffer to another representation.

    Conversions between two non-device spaces go through device BGR.

    Raises:
        ValueError: If either side is not a 3-channel colorspace
    """
    if buffer.color_space not in COLORSPACES:
        raise ValueError(f"Cannot convert a {buffer.color_space.value} buffer")
    if target not in COLORSPACES:
        raise ValueError(f"Unknown target colorspace '{target.value}'")
    if buffer.color_space is target:
        return buffer.clone()

    source_cs = COLORSPACES[buffer.color_space]
    target_cs = COLORSPACES[target]

    bgr = source_cs.from_colorspace(buffer.pixels)
    converted = target_cs.to_colorspace(bgr)
    logger.debug(f"Converted {source_cs.name} -> {target_cs.name} ({buffer.shape})")
    return ImageBuffer(converted, target)


def to_hsv(buffer: ImageBuffer) -> ImageBuffer:
    return convert(buffer, ColorSpace.HSV)


def to_lab(buffer: ImageBuffer) -> ImageBuffer:
    return convert(buffer, ColorSpace.LAB)


def to_device(buffer: ImageBuffer) -> ImageBuffer:
    return convert(buffer, ColorSpace.DEVICE)


def split_channels(buffer: ImageBuffer) -> list[ImageBuffer]:
    """Split an N-channel buffer into N single-channel planes, in source order."""
    if buffer.color_space is ColorSpace.PLANE:
        return [buffer.clone()]
    return [ImageBuffer(plane, ColorSpace.PLANE) for plane in cv2.split(buffer.pixels)]


def merge_channels(planes: list[ImageBuffer], color_space: ColorSpace) -> ImageBuffer:
    """
    Exact inverse of split_channels.

    Args:
        planes: Single-channel planes in channel order
        color_space: Tag of the merged buffer

    Returns:
        ImageBuffer with len(planes) channels
    """
    if len(planes) != 3:
        raise ValueError(f"Expected 3 planes, got {len(planes)}")
    if any(p.color_space is not ColorSpace.PLANE for p in planes):
        raise ValueError("Only channel planes can be merged")
    shapes = {p.shape for p in planes}
    if len(shapes) != 1:
        raise ValueError(f"Planes differ in size: {sorted(shapes)}")
    return ImageBuffer(cv2.merge([p.pixels for p in planes]), color_space)
