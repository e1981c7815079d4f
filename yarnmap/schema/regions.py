# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Result types for color-region segmentation and palette matching.

Design principles:
- Immutable: all types are frozen dataclasses
- Deterministic: same image and threshold → same results, same order
- Serializable: to_dict() uses the camelCase wire keys consumers expect
  (pixelCount, imagePart, marginXPercent, ...)

Member pixel lists are an engine-internal artifact and never appear here.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Validation Helpers
# =============================================================================

_HEX_COLOR_RE = re.compile(r"^#[0-9a-f]{6}$")


def _check_hex(value: str, what: str) -> None:
    if not isinstance(value, str) or not _HEX_COLOR_RE.match(value):
        raise ValueError(f"{what} must be a lowercase '#rrggbb' string, got {value!r}")


def _check_percent(value: float, what: str) -> None:
    if not 0.0 <= value <= 100.0:
        raise ValueError(f"{what} must be 0-100, got {value}")


# =============================================================================
# Segmentation Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class ImagePart:
    """
    Cropped excerpt of one region and its placement in the full image.

    Attributes:
        base64: PNG data URL of the crop, "" if encoding failed
        margin_x: Crop offset from the left edge, in pixels
        margin_y: Crop offset from the top edge, in pixels
        margin_x_percent: margin_x as a percentage of image width
        margin_y_percent: margin_y as a percentage of image height
        width_percent: Crop width as a percentage of image width
        height_percent: Crop height as a percentage of image height
    """
    base64: str
    margin_x: int
    margin_y: int
    margin_x_percent: float
    margin_y_percent: float
    width_percent: float
    height_percent: float

    def __post_init__(self) -> None:
        """Validate placement values."""
        if self.margin_x < 0 or self.margin_y < 0:
            raise ValueError(
                f"Margins must be >= 0, got ({self.margin_x}, {self.margin_y})"
            )
        _check_percent(self.margin_x_percent, "margin_x_percent")
        _check_percent(self.margin_y_percent, "margin_y_percent")
        _check_percent(self.width_percent, "width_percent")
        _check_percent(self.height_percent, "height_percent")

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "base64": self.base64,
            "marginX": self.margin_x,
            "marginY": self.margin_y,
            "marginXPercent": self.margin_x_percent,
            "marginYPercent": self.margin_y_percent,
            "widthPercent": self.width_percent,
            "heightPercent": self.height_percent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ImagePart:
        """Deserialize from dictionary."""
        return cls(
            base64=data.get("base64", ""),
            margin_x=data["marginX"],
            margin_y=data["marginY"],
            margin_x_percent=data["marginXPercent"],
            margin_y_percent=data["marginYPercent"],
            width_percent=data["widthPercent"],
            height_percent=data["heightPercent"],
        )


@dataclass(frozen=True, slots=True)
class RegionResult:
    """
    One contiguous region of similar color.

    Attributes:
        color: Average color of the region's pixels ("#rrggbb")
        pixel_count: Number of pixels in the region
        image_part: Cropped excerpt and its placement
    """
    color: str
    pixel_count: int
    image_part: ImagePart

    def __post_init__(self) -> None:
        """Validate region values."""
        _check_hex(self.color, "color")
        if self.pixel_count < 1:
            raise ValueError(f"pixel_count must be >= 1, got {self.pixel_count}")

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "color": self.color,
            "pixelCount": self.pixel_count,
            "imagePart": self.image_part.to_dict(),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> RegionResult:
        """Deserialize from dictionary."""
        return cls(
            color=data["color"],
            pixel_count=data["pixelCount"],
            image_part=ImagePart.from_dict(data["imagePart"]),
        )

    @classmethod
    def from_json(cls, json_str: str) -> RegionResult:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))


# =============================================================================
# Palette Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class PaletteEntry:
    """
    A named reference color, e.g. one yarn.

    Attributes:
        name: Identifier (file name, product code, ...)
        color: Hex color as supplied by the caller
    """
    name: str
    color: str


@dataclass(frozen=True, slots=True)
class PaletteMatch:
    """
    A palette entry ranked against a region color.

    Attributes:
        name: Palette entry identifier
        color: Palette entry color
        distance: Euclidean RGB distance to the region color
    """
    name: str
    color: str
    distance: float

    def __post_init__(self) -> None:
        """Validate distance."""
        if self.distance < 0.0:
            raise ValueError(f"distance must be >= 0, got {self.distance}")

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {"name": self.name, "color": self.color, "distance": self.distance}

    @classmethod
    def from_dict(cls, data: dict) -> PaletteMatch:
        """Deserialize from dictionary."""
        return cls(name=data["name"], color=data["color"], distance=data["distance"])


# =============================================================================
# Planning Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class PlannedRegion:
    """
    A region with its physical footprint and closest palette colors.

    Attributes:
        region: The segmentation result
        area_cm2: Region area at the requested physical scale
        percentage: Share of all reported pixels, 0-100
        matches: Closest palette entries, nearest first
    """
    region: RegionResult
    area_cm2: float
    percentage: float
    matches: tuple[PaletteMatch, ...] = ()

    def __post_init__(self) -> None:
        """Validate planning values."""
        if self.area_cm2 < 0.0:
            raise ValueError(f"area_cm2 must be >= 0, got {self.area_cm2}")
        _check_percent(self.percentage, "percentage")

    @property
    def color(self) -> str:
        return self.region.color

    @property
    def pixel_count(self) -> int:
        return self.region.pixel_count

    def to_dict(self) -> dict:
        """Serialize to dictionary (region fields flattened in)."""
        result = self.region.to_dict()
        result["areaInCm"] = self.area_cm2
        result["percentage"] = self.percentage
        result["matches"] = [m.to_dict() for m in self.matches]
        return result

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> PlannedRegion:
        """Deserialize from dictionary."""
        return cls(
            region=RegionResult.from_dict(data),
            area_cm2=data["areaInCm"],
            percentage=data["percentage"],
            matches=tuple(PaletteMatch.from_dict(m) for m in data.get("matches", [])),
        )
