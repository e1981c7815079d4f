# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Raw pixel buffer and its accessor.

A PixelBuffer is a flat, row-major, channel-interleaved byte array with
3 (RGB) or 4 (RGBA) channels. Three-channel buffers are treated as fully
opaque: alpha is synthesized as 255 at the access layer.

Decoding files into buffers goes through Pillow.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
from numpy.typing import NDArray

from yarnmap.errors import InvalidArgumentError


# (r, g, b, a), each 0-255
Pixel = tuple[int, int, int, int]


@dataclass(frozen=True, slots=True)
class PixelBuffer:
    """
    Immutable image pixels.

    Attributes:
        width: Image width in pixels
        height: Image height in pixels
        channels: 3 (RGB) or 4 (RGBA)
        data: Flat bytes of length width * height * channels
    """
    width: int
    height: int
    channels: int
    data: bytes

    def __post_init__(self) -> None:
        """Validate buffer geometry."""
        if self.channels not in (3, 4):
            raise InvalidArgumentError(
                f"channels must be 3 or 4, got {self.channels}"
            )
        if self.width < 0 or self.height < 0:
            raise InvalidArgumentError(
                f"Image dimensions must be non-negative, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * self.channels
        if len(self.data) != expected:
            raise InvalidArgumentError(
                f"Expected {expected} bytes for {self.width}x{self.height}x"
                f"{self.channels}, got {len(self.data)}"
            )
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    def get_pixel(self, x: int, y: int) -> Pixel:
        """Read one pixel. Coordinates are not bounds-checked."""
        idx = (y * self.width + x) * self.channels
        data = self.data
        if self.channels == 4:
            return data[idx], data[idx + 1], data[idx + 2], data[idx + 3]
        return data[idx], data[idx + 1], data[idx + 2], 255

    @property
    def array(self) -> NDArray[np.uint8]:
        """Read-only (H, W, C) view of the data."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.width, self.channels
        )

    def rgba(self) -> NDArray[np.uint8]:
        """(H, W, 4) copy of the data with alpha synthesized for RGB buffers."""
        arr = self.array
        if self.channels == 4:
            return arr.copy()
        alpha = np.full((self.height, self.width, 1), 255, dtype=np.uint8)
        return np.concatenate([arr, alpha], axis=2)

    @classmethod
    def from_array(cls, pixels: NDArray[np.uint8]) -> PixelBuffer:
        """Build a buffer from an (H, W, 3) or (H, W, 4) uint8 array."""
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise InvalidArgumentError(
                f"Expected (H, W, 3) or (H, W, 4) array, got shape {pixels.shape}"
            )
        if pixels.dtype != np.uint8:
            raise InvalidArgumentError(f"Expected uint8 array, got {pixels.dtype}")
        height, width, channels = pixels.shape
        return cls(
            width=width,
            height=height,
            channels=channels,
            data=np.ascontiguousarray(pixels).tobytes(),
        )

    @classmethod
    def from_image(cls, img) -> PixelBuffer:
        """Build a buffer from a Pillow image, keeping alpha when present."""
        has_alpha = img.mode in ("RGBA", "LA", "PA") or (
            img.mode == "P" and "transparency" in img.info
        )
        mode = "RGBA" if has_alpha else "RGB"
        if img.mode != mode:
            img = img.convert(mode)
        return cls.from_array(np.array(img, dtype=np.uint8))


ImageInput = Union[str, Path, PixelBuffer, NDArray[np.uint8]]


def load_pixel_buffer(image) -> PixelBuffer:
    """
    Turn any supported image input into a PixelBuffer.

    Accepts a PixelBuffer (returned as is), a NumPy array of shape
    (H, W, 3|4), a Pillow image, or a path to an image file.

    Files with an embedded ICC profile are converted to sRGB so that
    measured colors match what color pickers show.
    """
    if isinstance(image, PixelBuffer):
        return image

    if isinstance(image, np.ndarray):
        return PixelBuffer.from_array(image)

    from PIL import Image

    if isinstance(image, Image.Image):
        return PixelBuffer.from_image(image)

    if isinstance(image, (str, Path)):
        with Image.open(image) as img:
            img.load()
            return PixelBuffer.from_image(_to_srgb(img))

    raise TypeError(
        f"Expected file path, PIL image, numpy array or PixelBuffer, got {type(image)}"
    )


def _to_srgb(img):
    """Apply the embedded ICC profile, if any, keeping the alpha channel."""
    if "icc_profile" not in img.info:
        return img

    from PIL import ImageCms

    try:
        embedded_profile = ImageCms.ImageCmsProfile(io.BytesIO(img.info["icc_profile"]))
        srgb_profile = ImageCms.createProfile("sRGB")

        alpha = None
        if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
            img = img.convert("RGBA")
            alpha = img.getchannel("A")
        if img.mode != "RGB":
            img = img.convert("RGB")

        img = ImageCms.profileToProfile(img, embedded_profile, srgb_profile)
        if alpha is not None:
            img = img.convert("RGBA")
            img.putalpha(alpha)
        return img
    except (ImageCms.PyCMSError, OSError, ValueError):
        # Broken profile: fall back to the raw pixel values
        return img
