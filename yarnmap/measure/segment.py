# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Main segmentation API.

This is the primary entry point for Yarnmap's measurement core.
"""

from __future__ import annotations

import logging
import numbers
from typing import Iterable, Optional

from yarnmap.errors import InvalidArgumentError
from yarnmap.measure.colorspace import validate_threshold
from yarnmap.measure.crop import PngEncoder, export_region
from yarnmap.measure.pixels import ImageInput, load_pixel_buffer
from yarnmap.measure.progress import CancelToken, ProgressCallback, check_cancelled
from yarnmap.measure.regions import GrownRegion, SegmentationConfig, grow_regions
from yarnmap.schema import RegionResult

logger = logging.getLogger(__name__)

DEFAULT_MIN_AREA = 200


def process_image_colors(
    image: ImageInput,
    threshold: float,
    *,
    min_area: int = DEFAULT_MIN_AREA,
    cancel: Optional[CancelToken] = None,
    progress: Optional[ProgressCallback] = None,
    encoder: Optional[PngEncoder] = None,
    config: Optional[SegmentationConfig] = None,
) -> list[RegionResult]:
    """
    Split an image into regions of similar color.

    Every opaque pixel is visited once. Regions grow by flood fill from the
    first unvisited opaque pixel in reading order, absorbing neighbors
    whose color stays within `threshold` of the region's running average.
    Regions smaller than `min_area` pixels are dropped as noise.

    Args:
        image: One of:
            - PixelBuffer
            - NumPy array of shape (H, W, 3) or (H, W, 4) with uint8 values
            - Pillow image
            - Path to image file (str or Path)
        threshold: Color similarity threshold, 0-100 percent of the largest
            possible RGB distance. 0 merges only identical colors.
        min_area: Minimum region size in pixels (default: 200)
        cancel: Optional token; cancelling it makes the call raise
            CancelledError at the next checkpoint
        progress: Optional callback receiving scan progress as 0-100
        encoder: PNG encoder for region crops (default: Pillow)
        config: Engine constants (uses defaults if None)

    Returns:
        RegionResult list in reading order of each region's first pixel

    Raises:
        InvalidArgumentError: Threshold outside [0, 100] or negative min_area
        CancelledError: The token was cancelled before or during processing

    Example:
        >>> from yarnmap import process_image_colors
        >>> results = process_image_colors("pattern.png", threshold=20, min_area=150)
        >>> results[0].color, results[0].pixel_count
        ('#d23c2a', 5120)
    """
    validate_threshold(threshold)
    _validate_min_area(min_area)
    check_cancelled(cancel)

    buffer = load_pixel_buffer(image)

    regions = grow_regions(
        buffer,
        threshold,
        cancel=cancel,
        progress=progress,
        config=config,
    )

    kept = filter_regions(regions, min_area)
    logger.debug(
        "Kept %d of %d regions with at least %d pixels",
        len(kept), len(regions), min_area,
    )

    return [export_region(buffer, region, encoder) for region in kept]


def filter_regions(
    regions: Iterable[GrownRegion],
    min_area: int = DEFAULT_MIN_AREA,
) -> list[GrownRegion]:
    """Drop regions with fewer than min_area pixels, preserving order."""
    return [r for r in regions if r.pixel_count >= min_area]


def _validate_min_area(min_area: int) -> None:
    if isinstance(min_area, bool) or not isinstance(min_area, numbers.Integral):
        raise InvalidArgumentError(f"min_area must be an integer, got {min_area!r}")
    if min_area < 0:
        raise InvalidArgumentError(f"min_area must be >= 0, got {min_area}")
