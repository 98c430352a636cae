"""
Codec boundary: decode a capture into an ImageBuffer and encode results back.

Decoding and encoding go through OpenCV so pixels stay in device BGR
order. Pillow is used to read the header only, for size logging before
the full decode.
"""

import logging
from pathlib import Path

import cv2
import numpy as np
import psutil
from PIL import Image, UnidentifiedImageError

from .image_buffer import ColorSpace, ImageBuffer

logger = logging.getLogger(__name__)


def get_available_memory_mb():
    return psutil.virtual_memory().available / (1024 * 1024)


def probe_image(path: str | Path) -> tuple[int, int] | None:
    """
    Read (width, height) from the file header without decoding pixels.

    Returns None when Pillow cannot identify the file.

    Raises:
        ValueError: If the header declares a decompression bomb
    """
    try:
        with Image.open(path) as img:
            width, height = img.size
    except Image.DecompressionBombError as e:
        raise ValueError(f"Refusing to decode {path}: {e}") from e
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Header probe failed for {path}: {e}")
        return None

    estimated_size_mb = (width * height * 3) / (1024 * 1024)
    logger.info(
        f"Image Size: {width}x{height} (~{estimated_size_mb:.2f} MB), "
        f"available RAM: {get_available_memory_mb():.2f} MB"
    )
    return width, height


class ImageCodec:
    """Reads and writes single raster files."""

    def decode(self, path: str | Path) -> ImageBuffer | None:
        """
        Decode `path` into a device buffer.

        Returns:
            ImageBuffer, or None if the file is not a decodable image

        Raises:
            ValueError: If the header declares an oversized image
        """
        probe_image(path)
        try:
            pixels = cv2.imread(str(path), cv2.IMREAD_COLOR)
        except cv2.error as e:
            logger.error(f"Decoder error for {path}: {e}")
            return None
        if pixels is None or pixels.size == 0:
            return None
        return ImageBuffer(pixels, ColorSpace.DEVICE)

    def encode(self, image: ImageBuffer, path: str | Path) -> bool:
        """
        Encode `image` to `path`; the format follows the file extension.

        Returns:
            True if the file was written
        """
        if image.color_space is not ColorSpace.DEVICE:
            raise ValueError(f"Only device buffers can be encoded, got {image.color_space.value}")
        try:
            return bool(cv2.imwrite(str(path), np.ascontiguousarray(image.pixels)))
        except cv2.error as e:
            logger.error(f"Encoder error for {path}: {e}")
            return False
