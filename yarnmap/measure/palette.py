# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Palette matching and swatch sampling.

Two jobs:
1. Matching: rank a caller-supplied palette (name → hex) by RGB distance
   to a region color.
2. Sampling: derive a palette color from a photo of a physical swatch by
   averaging a central band of the photo, ignoring transparent and
   near-white background pixels.
"""

from __future__ import annotations

import logging
import numbers
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

import numpy as np

from yarnmap.errors import InvalidArgumentError
from yarnmap.measure.colorspace import (
    color_distance_batch,
    hex_to_rgb,
    rgb_to_hex,
    round_half_up,
)
from yarnmap.measure.pixels import ImageInput, load_pixel_buffer
from yarnmap.schema import PaletteEntry, PaletteMatch

logger = logging.getLogger(__name__)


Palette = Union[Mapping[str, str], Iterable[PaletteEntry]]

# (x0, y0, x1, y1), half-open
Box = tuple[int, int, int, int]

# Pixels with every channel above this are treated as background
DEFAULT_LIGHT_CUTOFF = 245

# Swatch pixels need alpha above this to be sampled
SWATCH_ALPHA_THRESHOLD = 0


# =============================================================================
# Matching
# =============================================================================


def _palette_entries(palette: Palette) -> list[PaletteEntry]:
    if isinstance(palette, Mapping):
        items = [PaletteEntry(name=str(k), color=v) for k, v in palette.items()]
    else:
        items = []
        for entry in palette:
            if not isinstance(entry, PaletteEntry):
                raise InvalidArgumentError(
                    f"Palette entries must be PaletteEntry, got {type(entry)}"
                )
            items.append(entry)
    return items


def closest_palette_colors(
    color: str,
    palette: Palette,
    count: Optional[int] = None,
) -> tuple[PaletteMatch, ...]:
    """
    Rank palette entries by Euclidean RGB distance to a color.

    Args:
        color: Hex color to match
        palette: Mapping of name → hex, or an iterable of PaletteEntry
        count: Keep only the closest `count` entries (None = all)

    Returns:
        Matches sorted nearest first. Ties keep palette order.

    Raises:
        InvalidArgumentError: If the color or any palette entry is malformed
    """
    if count is not None:
        if isinstance(count, bool) or not isinstance(count, numbers.Integral):
            raise InvalidArgumentError(f"count must be an integer, got {count!r}")
        if count < 0:
            raise InvalidArgumentError(f"count must be >= 0, got {count}")

    target = hex_to_rgb(color)
    entries = _palette_entries(palette)
    if not entries:
        return ()

    try:
        palette_rgb = np.array([hex_to_rgb(e.color) for e in entries], dtype=np.int64)
    except InvalidArgumentError as e:
        raise InvalidArgumentError(f"Invalid palette data: {e}") from e

    distances = color_distance_batch(target, palette_rgb)
    order = np.argsort(distances, kind="stable")
    if count is not None:
        order = order[:count]

    return tuple(
        PaletteMatch(
            name=entries[i].name,
            color=entries[i].color,
            distance=float(distances[i]),
        )
        for i in order
    )


# =============================================================================
# Swatch sampling
# =============================================================================


def default_swatch_box(width: int, height: int) -> Box:
    """
    Sampling band for a swatch photo: the horizontal center ±10% of the
    width, between 20% and 35% of the height.
    """
    x0 = width // 2 - int(width * 0.1)
    x1 = width // 2 + int(width * 0.1)
    y0 = int(height * 0.2)
    y1 = int(height * 0.35)
    return x0, y0, x1, y1


def sample_color(
    image: ImageInput,
    box: Optional[Box] = None,
    *,
    alpha_threshold: int = SWATCH_ALPHA_THRESHOLD,
    light_cutoff: int = DEFAULT_LIGHT_CUTOFF,
) -> Optional[str]:
    """
    Average color of a rectangle, skipping background pixels.

    Args:
        image: Anything load_pixel_buffer accepts
        box: (x0, y0, x1, y1), half-open; clipped to the image.
            Defaults to default_swatch_box().
        alpha_threshold: Pixels with alpha <= this are skipped
        light_cutoff: Pixels with all channels > this are skipped

    Returns:
        Hex color, or None if no pixel in the box qualifies
    """
    buffer = load_pixel_buffer(image)
    if box is None:
        box = default_swatch_box(buffer.width, buffer.height)

    x0, y0, x1, y1 = box
    x0, x1 = max(0, x0), min(buffer.width, x1)
    y0, y1 = max(0, y0), min(buffer.height, y1)
    if x0 >= x1 or y0 >= y1:
        return None

    window = buffer.rgba()[y0:y1, x0:x1].reshape(-1, 4).astype(np.int64)
    opaque = window[:, 3] > alpha_threshold
    light = np.all(window[:, :3] > light_cutoff, axis=1)
    usable = window[opaque & ~light, :3]

    if len(usable) == 0:
        return None

    mean = usable.sum(axis=0) / len(usable)
    return rgb_to_hex(tuple(int(v) for v in round_half_up(mean)))


def sample_palette(
    paths: Iterable[Union[str, Path]],
    box: Optional[Box] = None,
) -> dict[str, str]:
    """
    Build a name → hex palette from swatch photos.

    Each file is keyed by its file name. Files whose sampling band holds
    no usable pixels are skipped with a warning; files that cannot be read
    are logged and skipped.

    Raises:
        InvalidArgumentError: If no paths are given
    """
    paths = list(paths)
    if not paths:
        raise InvalidArgumentError("No file specified")

    result: dict[str, str] = {}
    for path in paths:
        name = Path(path).name
        try:
            buffer = load_pixel_buffer(path)
        except OSError as e:
            logger.error("Error processing %s: %s", name, e)
            continue

        color = sample_color(buffer, box)
        if color is None:
            logger.warning(
                "No valid color found in %s. It might be too light or transparent.",
                name,
            )
            continue
        result[name] = color

    return result
