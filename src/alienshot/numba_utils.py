"""
Numba-optimized functions for heavy pixel-wise operations.
"""
import math

import numpy as np
from numba import njit, prange


@njit(cache=True)
def vignette_factor(row, col, rows, cols, strength):
    """
    Darkening factor for one pixel.

    1.0 at the image center (cols / 2, rows / 2), falling linearly with the
    Euclidean distance to 1.0 - strength at the distance of a corner.
    """
    center_x = cols / 2.0
    center_y = rows / 2.0
    max_distance = math.sqrt(center_x * center_x + center_y * center_y)
    dx = col - center_x
    dy = row - center_y
    distance = math.sqrt(dx * dx + dy * dy)
    return 1.0 - (distance / max_distance) * strength


@njit(parallel=True, fastmath=False, cache=True)
def apply_vignette(image, strength):
    """
    Multiply every channel of every pixel by its vignette factor.

    Args:
        image: (H, W, C) uint8 array
        strength: Darkening at the corners (0.4 = corners at 60 %)

    Returns:
        New (H, W, C) uint8 array, rounded half to even and clamped to [0, 255]
    """
    rows, cols, channels = image.shape
    result = np.empty((rows, cols, channels), dtype=np.uint8)

    for i in prange(rows):
        for j in range(cols):
            factor = vignette_factor(i, j, rows, cols, strength)
            for c in range(channels):
                value = np.rint(image[i, j, c] * factor)
                if value < 0.0:
                    value = 0.0
                elif value > 255.0:
                    value = 255.0
                result[i, j, c] = np.uint8(value)

    return result
