# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Region crop export.

Cuts a region out of the source image as a bounding-box-sized RGBA image
in which only the region's own pixels are visible, and encodes it as a
PNG data URL. Encoding problems never abort segmentation: the affected
region simply gets an empty image payload.
"""

from __future__ import annotations

import base64
import io
import logging
from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray

from yarnmap.measure.pixels import PixelBuffer
from yarnmap.measure.regions import GrownRegion
from yarnmap.schema import ImagePart, RegionResult

logger = logging.getLogger(__name__)


# Takes an (H, W, 4) uint8 array, returns an encoded image string
PngEncoder = Callable[[NDArray[np.uint8]], str]

PNG_DATA_URL_PREFIX = "data:image/png;base64,"

# Non-member pixels inside the crop: transparent white
_BACKGROUND = (255, 255, 255, 0)


def build_crop(buffer: PixelBuffer, region: GrownRegion) -> NDArray[np.uint8]:
    """
    Build the RGBA crop for a region.

    Returns:
        Array of shape (bbox.height, bbox.width, 4). Member pixels carry
        their source RGBA, everything else is (255, 255, 255, 0).
    """
    bbox = region.bbox
    crop = np.empty((bbox.height, bbox.width, 4), dtype=np.uint8)
    crop[:, :] = _BACKGROUND

    coords = np.asarray(region.pixels, dtype=np.intp).reshape(-1, 2)
    xs, ys = coords[:, 0], coords[:, 1]

    source = buffer.array
    crop[ys - bbox.min_y, xs - bbox.min_x, :3] = source[ys, xs, :3]
    if buffer.channels == 4:
        crop[ys - bbox.min_y, xs - bbox.min_x, 3] = source[ys, xs, 3]
    else:
        crop[ys - bbox.min_y, xs - bbox.min_x, 3] = 255

    return crop


def encode_png(rgba: NDArray[np.uint8]) -> str:
    """Encode an (H, W, 4) uint8 array as a base64 PNG data URL using Pillow."""
    from PIL import Image

    img = Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))
    out = io.BytesIO()
    img.save(out, format="PNG")
    return PNG_DATA_URL_PREFIX + base64.b64encode(out.getvalue()).decode("ascii")


def decode_png(data_url: str) -> NDArray[np.uint8]:
    """Inverse of encode_png: data URL back to an (H, W, 4) array."""
    from PIL import Image

    payload = data_url
    if payload.startswith(PNG_DATA_URL_PREFIX):
        payload = payload[len(PNG_DATA_URL_PREFIX):]
    with Image.open(io.BytesIO(base64.b64decode(payload))) as img:
        return np.array(img.convert("RGBA"), dtype=np.uint8)


def export_region(
    buffer: PixelBuffer,
    region: GrownRegion,
    encoder: Optional[PngEncoder] = None,
) -> RegionResult:
    """
    Turn a grown region into its public result.

    The member list is not carried over. If the encoder raises, the failure
    is logged and the image payload is left empty.
    """
    encode = encoder or encode_png
    crop = build_crop(buffer, region)

    try:
        encoded = encode(crop)
    except Exception as e:
        logger.warning(
            "PNG creation failed for region seeded at %s: %s", region.seed, e
        )
        encoded = ""

    bbox = region.bbox
    width = buffer.width
    height = buffer.height

    return RegionResult(
        color=region.color,
        pixel_count=region.pixel_count,
        image_part=ImagePart(
            base64=encoded,
            margin_x=bbox.min_x,
            margin_y=bbox.min_y,
            margin_x_percent=bbox.min_x / width * 100,
            margin_y_percent=bbox.min_y / height * 100,
            width_percent=bbox.width / width * 100,
            height_percent=bbox.height / height * 100,
        ),
    )
