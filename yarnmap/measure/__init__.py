# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Measurement core for Yarnmap.

This module provides deterministic color-region segmentation of images
and palette matching. All operations are pixel-based.
"""

from yarnmap.measure.palette import closest_palette_colors, sample_color, sample_palette
from yarnmap.measure.pixels import PixelBuffer, load_pixel_buffer
from yarnmap.measure.plan import physical_size, plan_image
from yarnmap.measure.progress import CancelToken
from yarnmap.measure.regions import SegmentationConfig, grow_regions
from yarnmap.measure.segment import process_image_colors

__all__ = [
    "process_image_colors",
    "grow_regions",
    "SegmentationConfig",
    "PixelBuffer",
    "load_pixel_buffer",
    "CancelToken",
    "closest_palette_colors",
    "sample_color",
    "sample_palette",
    "plan_image",
    "physical_size",
]
