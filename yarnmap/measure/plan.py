# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Material planning.

Combines segmentation with palette matching and a physical scale: given
the finished piece's width (or height) in centimeters, each region gets
an area estimate, its share of the image, and the closest palette colors.
"""

from __future__ import annotations

from typing import Mapping, Optional

from yarnmap.errors import InvalidArgumentError
from yarnmap.measure.colorspace import validate_threshold
from yarnmap.measure.palette import Palette, closest_palette_colors
from yarnmap.measure.pixels import ImageInput, load_pixel_buffer
from yarnmap.measure.progress import CancelToken, ProgressCallback
from yarnmap.measure.regions import SegmentationConfig
from yarnmap.measure.segment import DEFAULT_MIN_AREA, process_image_colors
from yarnmap.schema import PlannedRegion

DEFAULT_THRESHOLD = 25
DEFAULT_MAX_MATCHES = 5


def physical_size(
    width: int,
    height: int,
    non_transparent_pixels: int,
    pixels_per_cm: float = 5,
) -> tuple[float, float, float]:
    """
    Convert pixel measurements to centimeters.

    Returns:
        (width_cm, height_cm, area_cm2)
    """
    if pixels_per_cm <= 0:
        raise InvalidArgumentError(f"pixels_per_cm must be > 0, got {pixels_per_cm}")
    return (
        width / pixels_per_cm,
        height / pixels_per_cm,
        non_transparent_pixels / (pixels_per_cm * pixels_per_cm),
    )


def plan_image(
    image: ImageInput,
    *,
    palette: Optional[Palette] = None,
    threshold: float = DEFAULT_THRESHOLD,
    min_area: int = DEFAULT_MIN_AREA,
    max_matches: int = DEFAULT_MAX_MATCHES,
    max_width_cm: Optional[float] = None,
    max_height_cm: Optional[float] = None,
    cancel: Optional[CancelToken] = None,
    progress: Optional[ProgressCallback] = None,
    config: Optional[SegmentationConfig] = None,
) -> list[PlannedRegion]:
    """
    Segment an image and size each region for a physical piece.

    Exactly one of max_width_cm / max_height_cm sets the scale: the image's
    width (or height) in pixels is mapped onto that many centimeters.

    Args:
        image: Anything load_pixel_buffer accepts
        palette: Optional name → hex mapping (or PaletteEntry iterable) to match
        threshold: Similarity threshold, 0-100 (default: 25)
        min_area: Minimum region size in pixels (default: 200)
        max_matches: Palette matches kept per region (default: 5)
        max_width_cm: Physical width of the finished piece
        max_height_cm: Physical height of the finished piece
        cancel, progress, config: Passed to process_image_colors

    Returns:
        PlannedRegion list in the order process_image_colors returns regions.
        Percentages are relative to the pixels of all returned regions.

    Raises:
        InvalidArgumentError: Missing or conflicting scale, or any argument
            process_image_colors rejects
    """
    validate_threshold(threshold)
    if (max_width_cm is None) == (max_height_cm is None):
        raise InvalidArgumentError(
            "Exactly one of max_width_cm or max_height_cm must be provided"
        )
    size_cm = max_width_cm if max_width_cm is not None else max_height_cm
    if size_cm <= 0:
        raise InvalidArgumentError(f"Physical size must be > 0 cm, got {size_cm}")
    if max_matches < 0:
        raise InvalidArgumentError(f"max_matches must be >= 0, got {max_matches}")

    if palette is not None and not isinstance(palette, Mapping):
        palette = list(palette)

    buffer = load_pixel_buffer(image)
    pixels = buffer.width if max_width_cm is not None else buffer.height
    pixels_per_cm = pixels / size_cm

    regions = process_image_colors(
        buffer,
        threshold,
        min_area=min_area,
        cancel=cancel,
        progress=progress,
        config=config,
    )

    total = sum(r.pixel_count for r in regions)
    planned = []
    for region in regions:
        matches = ()
        if palette is not None:
            matches = closest_palette_colors(region.color, palette, count=max_matches)
        _, _, area_cm2 = physical_size(
            buffer.width, buffer.height, region.pixel_count, pixels_per_cm
        )
        planned.append(PlannedRegion(
            region=region,
            area_cm2=area_cm2,
            percentage=region.pixel_count / total * 100,
            matches=matches,
        ))

    return planned
