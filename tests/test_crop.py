# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""Tests for region crop building and PNG export."""

import logging

import numpy as np
import pytest

from yarnmap.measure.crop import (
    PNG_DATA_URL_PREFIX,
    build_crop,
    decode_png,
    encode_png,
    export_region,
)
from yarnmap.measure.pixels import PixelBuffer
from yarnmap.measure.regions import BoundingBox, GrownRegion


RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _buffer(rows):
    return PixelBuffer.from_array(np.array(rows, dtype=np.uint8))


def _region(pixels, color="#ff0000"):
    return GrownRegion(color=color, pixels=tuple(pixels), bbox=BoundingBox.around(pixels))


class TestBuildCrop:

    def test_shape_matches_bbox(self):
        buf = _buffer([[RED, RED, BLUE], [RED, BLUE, BLUE]])
        crop = build_crop(buf, _region([(0, 0), (1, 0), (0, 1)]))
        assert crop.shape == (2, 2, 4)
        assert crop.dtype == np.uint8

    def test_non_members_are_transparent_white(self):
        buf = _buffer([[RED, RED, BLUE], [RED, BLUE, BLUE]])
        crop = build_crop(buf, _region([(0, 0), (1, 0), (0, 1)]))
        assert tuple(crop[1, 1]) == (255, 255, 255, 0)
        assert tuple(crop[0, 0]) == RED
        assert tuple(crop[1, 0]) == RED

    def test_member_alpha_preserved(self):
        buf = _buffer([[(10, 20, 30, 128)]])
        crop = build_crop(buf, _region([(0, 0)], "#0a141e"))
        assert tuple(crop[0, 0]) == (10, 20, 30, 128)

    def test_offset_region(self):
        buf = _buffer([[RED, RED, BLUE], [RED, BLUE, BLUE]])
        crop = build_crop(buf, _region([(2, 0), (2, 1), (1, 1)], "#0000ff"))
        assert crop.shape == (2, 2, 4)
        assert tuple(crop[0, 0]) == (255, 255, 255, 0)
        assert tuple(crop[0, 1]) == BLUE

    def test_rgb_source_gets_opaque_alpha(self):
        arr = np.zeros((1, 2, 3), dtype=np.uint8)
        arr[:, :] = (1, 2, 3)
        crop = build_crop(PixelBuffer.from_array(arr), _region([(1, 0)], "#010203"))
        assert tuple(crop[0, 0]) == (1, 2, 3, 255)


class TestPngEncoding:

    def test_data_url_prefix(self):
        rgba = np.zeros((2, 3, 4), dtype=np.uint8)
        assert encode_png(rgba).startswith(PNG_DATA_URL_PREFIX)

    def test_decode_recovers_pixels(self):
        rgba = np.zeros((2, 3, 4), dtype=np.uint8)
        rgba[0, 1] = (12, 34, 56, 200)
        rgba[1, 2] = (255, 255, 255, 255)
        np.testing.assert_array_equal(decode_png(encode_png(rgba)), rgba)


class TestExportRegion:

    def test_placement_percentages(self):
        buf = _buffer([[RED, RED, BLUE, BLUE], [RED, RED, BLUE, BLUE]])
        result = export_region(buf, _region([(3, 0), (3, 1)], "#0000ff"))
        part = result.image_part
        assert (part.margin_x, part.margin_y) == (3, 0)
        assert part.margin_x_percent == pytest.approx(75.0)
        assert part.margin_y_percent == pytest.approx(0.0)
        assert part.width_percent == pytest.approx(25.0)
        assert part.height_percent == pytest.approx(100.0)

    def test_carries_color_and_count(self):
        buf = _buffer([[RED, RED]])
        result = export_region(buf, _region([(0, 0), (1, 0)]))
        assert result.color == "#ff0000"
        assert result.pixel_count == 2
        assert not hasattr(result, "pixels")

    def test_crop_payload_decodes(self):
        buf = _buffer([[RED, BLUE], [RED, RED]])
        result = export_region(buf, _region([(0, 0), (0, 1), (1, 1)]))
        crop = decode_png(result.image_part.base64)
        assert crop.shape == (2, 2, 4)
        assert tuple(crop[0, 1]) == (255, 255, 255, 0)

    def test_custom_encoder_receives_crop(self):
        seen = []

        def encoder(rgba):
            seen.append(rgba.shape)
            return "custom"

        buf = _buffer([[RED, RED]])
        result = export_region(buf, _region([(0, 0), (1, 0)]), encoder=encoder)
        assert result.image_part.base64 == "custom"
        assert seen == [(1, 2, 4)]

    def test_encoder_failure_leaves_empty_payload(self, caplog):
        def broken(rgba):
            raise RuntimeError("no codec")

        buf = _buffer([[RED]])
        with caplog.at_level(logging.WARNING, logger="yarnmap.measure.crop"):
            result = export_region(buf, _region([(0, 0)]), encoder=broken)
        assert result.image_part.base64 == ""
        assert result.pixel_count == 1
        assert "PNG creation failed" in caplog.text
        assert "no codec" in caplog.text
