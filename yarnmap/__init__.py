# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Yarnmap -- color-region segmentation for craft and textile planning.

Splits a picture into contiguous regions of similar color, reports each
region's average color, pixel footprint and a cropped excerpt, and matches
region colors against a palette of physical materials (e.g. yarns).

Quick start::

    from yarnmap import process_image_colors, closest_palette_colors

    regions = process_image_colors("pattern.png", threshold=20)
    for region in regions:
        print(region.color, region.pixel_count)
        closest_palette_colors(region.color, {"red.jpg": "#c0392b"}, count=3)
"""

from __future__ import annotations

__version__ = "1.0.0"

from yarnmap.errors import CancelledError, InvalidArgumentError, YarnmapError
from yarnmap.measure import (
    CancelToken,
    PixelBuffer,
    SegmentationConfig,
    closest_palette_colors,
    load_pixel_buffer,
    plan_image,
    process_image_colors,
    sample_color,
    sample_palette,
)
from yarnmap.schema import (
    ImagePart,
    PaletteEntry,
    PaletteMatch,
    PlannedRegion,
    RegionResult,
)

__all__ = [
    # Core API
    "process_image_colors",
    "closest_palette_colors",
    "plan_image",
    "sample_color",
    "sample_palette",
    # Inputs and options
    "PixelBuffer",
    "load_pixel_buffer",
    "CancelToken",
    "SegmentationConfig",
    # Types (commonly needed)
    "RegionResult",
    "ImagePart",
    "PaletteEntry",
    "PaletteMatch",
    "PlannedRegion",
    # Errors
    "YarnmapError",
    "InvalidArgumentError",
    "CancelledError",
    # Version
    "__version__",
]
