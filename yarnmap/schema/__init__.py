# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Schema definitions for segmentation and palette results.

All types in this module are immutable (frozen dataclasses).
"""

from yarnmap.schema.regions import (
    ImagePart,
    PaletteEntry,
    PaletteMatch,
    PlannedRegion,
    RegionResult,
)

__all__ = [
    # Segmentation
    "ImagePart",
    "RegionResult",
    # Palette matching
    "PaletteEntry",
    "PaletteMatch",
    # Planning
    "PlannedRegion",
]
