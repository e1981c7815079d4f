# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Color primitives.

All colors live in plain sRGB byte space (0-255 per channel). Hex strings
are always produced as lowercase "#rrggbb". Similarity is Euclidean RGB
distance expressed as a percentage of the largest possible distance
(black to white, sqrt(3 * 255^2) ≈ 441.67).
"""

from __future__ import annotations

import math
import numbers
import re
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from yarnmap.errors import InvalidArgumentError
from yarnmap.measure.pixels import Pixel, PixelBuffer


RGB = tuple[int, int, int]

# Euclidean distance between black and white
MAX_DISTANCE = math.sqrt(3 * 255 ** 2)

# Pixels with alpha at or below this value count as transparent
DEFAULT_ALPHA_THRESHOLD = 10

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


# =============================================================================
# Hex ↔ RGB
# =============================================================================


def hex_to_rgb(hex_color: str) -> RGB:
    """
    Parse a hex color string.

    Accepts "#rrggbb", "rrggbb" and the 3-digit shorthand "#rgb".

    Raises:
        InvalidArgumentError: If the string is not a hex color
    """
    if not isinstance(hex_color, str):
        raise InvalidArgumentError(f"Expected hex color string, got {type(hex_color)}")
    m = _HEX_RE.match(hex_color.strip())
    if not m:
        raise InvalidArgumentError(f"Invalid hex color: {hex_color!r}")
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    num = int(digits, 16)
    return (num >> 16) & 255, (num >> 8) & 255, num & 255


def rgb_to_hex(rgb: Sequence[float]) -> str:
    """
    Format the first three channels of an RGB(A) sequence as "#rrggbb".

    Channels are rounded to the nearest integer; alpha is ignored.
    """
    channels = []
    for value in rgb[:3]:
        c = int(math.floor(value + 0.5))
        if not 0 <= c <= 255:
            raise InvalidArgumentError(f"RGB channel must be 0-255, got {value}")
        channels.append(c)
    r, g, b = channels
    return f"#{r:02x}{g:02x}{b:02x}"


# =============================================================================
# Transparency, distance, similarity
# =============================================================================


def is_transparent(pixel: Pixel, alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD) -> bool:
    """True if the pixel's alpha is at or below the threshold."""
    return pixel[3] <= alpha_threshold


def rgb_distance(a: Sequence[int], b: Sequence[int]) -> float:
    """Euclidean distance between two RGB triples."""
    dr = a[0] - b[0]
    dg = a[1] - b[1]
    db = a[2] - b[2]
    return math.sqrt(dr * dr + dg * dg + db * db)


def color_distance(hex_a: str, hex_b: str) -> float:
    """
    Euclidean distance between two hex colors in RGB space.

    Returns:
        Distance in [0, MAX_DISTANCE]
    """
    return rgb_distance(hex_to_rgb(hex_a), hex_to_rgb(hex_b))


def validate_threshold(threshold_percent: float) -> None:
    """Raise InvalidArgumentError unless 0 <= threshold_percent <= 100."""
    if isinstance(threshold_percent, bool) or not isinstance(threshold_percent, numbers.Real):
        raise InvalidArgumentError(
            f"Threshold must be a number between 0 and 100, got {threshold_percent!r}"
        )
    if not 0 <= threshold_percent <= 100:
        raise InvalidArgumentError(
            f"Threshold must be between 0 and 100, got {threshold_percent}"
        )


def similarity_radius(threshold_percent: float) -> float:
    """Largest RGB distance still considered similar at a given threshold."""
    validate_threshold(threshold_percent)
    return threshold_percent / 100 * MAX_DISTANCE


def is_similar_rgb(a: Sequence[int], b: Sequence[int], radius: float) -> bool:
    """Distance check against a precomputed similarity radius."""
    return rgb_distance(a, b) <= radius


def is_similar(hex_a: str, hex_b: str, threshold_percent: float) -> bool:
    """
    Check whether two colors are within a similarity threshold.

    Args:
        hex_a, hex_b: Hex colors
        threshold_percent: 0-100, share of the maximum RGB distance

    Raises:
        InvalidArgumentError: If threshold_percent is outside [0, 100]
    """
    radius = similarity_radius(threshold_percent)
    return color_distance(hex_a, hex_b) <= radius


def color_distance_batch(
    rgb: Sequence[int],
    others: NDArray[np.int64],
) -> NDArray[np.float64]:
    """
    Vectorized distance from one color to many.

    Args:
        rgb: Reference RGB triple
        others: Array of shape (N, 3) with RGB values

    Returns:
        Array of shape (N,) with Euclidean distances
    """
    others = np.asarray(others, dtype=np.float64).reshape(-1, 3)
    delta = others - np.asarray(rgb[:3], dtype=np.float64)
    return np.sqrt(np.sum(delta ** 2, axis=-1))


# =============================================================================
# Averages
# =============================================================================


def round_half_up(values: NDArray[np.float64]) -> NDArray[np.int64]:
    """Round to nearest integer, halves going up (not banker's rounding)."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5).astype(np.int64)


def average_rgb(buffer: PixelBuffer, pixels: Iterable[tuple[int, int]]) -> RGB:
    """
    Arithmetic mean of R, G, B over a list of (x, y) coordinates.

    Raises:
        InvalidArgumentError: If the coordinate list is empty
    """
    coords = np.asarray(list(pixels), dtype=np.intp).reshape(-1, 2)
    if len(coords) == 0:
        raise InvalidArgumentError("Cannot average an empty pixel list")
    rgb = buffer.array[coords[:, 1], coords[:, 0], :3].astype(np.int64)
    mean = rgb.sum(axis=0) / len(coords)
    r, g, b = (int(v) for v in round_half_up(mean))
    return r, g, b


def average_color(buffer: PixelBuffer, pixels: Iterable[tuple[int, int]]) -> str:
    """Average color of the given coordinates as a lowercase hex string."""
    return rgb_to_hex(average_rgb(buffer, pixels))
