# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""Tests for color primitives (hex ↔ RGB, distance, similarity, averages)."""

import numpy as np
import pytest

from yarnmap.errors import InvalidArgumentError
from yarnmap.measure.colorspace import (
    MAX_DISTANCE,
    average_color,
    average_rgb,
    color_distance,
    color_distance_batch,
    hex_to_rgb,
    is_similar,
    is_transparent,
    rgb_to_hex,
    similarity_radius,
)
from yarnmap.measure.pixels import PixelBuffer


def _buffer(rows):
    """Build an RGBA PixelBuffer from nested lists of (r, g, b, a)."""
    return PixelBuffer.from_array(np.array(rows, dtype=np.uint8))


class TestHexParsing:

    def test_six_digit(self):
        assert hex_to_rgb("#ff5733") == (255, 87, 51)

    def test_uppercase(self):
        assert hex_to_rgb("#FF5733") == (255, 87, 51)

    def test_without_hash(self):
        assert hex_to_rgb("00ff00") == (0, 255, 0)

    def test_shorthand(self):
        assert hex_to_rgb("#f0a") == (255, 0, 170)

    @pytest.mark.parametrize("bad", ["#ggg", "#12345", "", "red", "#1234567"])
    def test_malformed_raises(self, bad):
        with pytest.raises(InvalidArgumentError, match="Invalid hex color"):
            hex_to_rgb(bad)

    def test_non_string_raises(self):
        with pytest.raises(InvalidArgumentError):
            hex_to_rgb(0xFF0000)


class TestHexFormatting:

    def test_lowercase_with_hash(self):
        assert rgb_to_hex((255, 0, 170)) == "#ff00aa"

    def test_alpha_ignored(self):
        assert rgb_to_hex((255, 0, 0, 10)) == "#ff0000"

    def test_leading_zeros(self):
        assert rgb_to_hex((1, 2, 3)) == "#010203"

    def test_rounds_half_up(self):
        assert rgb_to_hex((127.5, 0.4, 254.5)) == "#8000ff"

    def test_out_of_range_raises(self):
        with pytest.raises(InvalidArgumentError, match="0-255"):
            rgb_to_hex((256, 0, 0))

    @pytest.mark.parametrize("rgb", [(0, 0, 0), (255, 255, 255), (18, 52, 86), (200, 7, 129)])
    def test_roundtrip(self, rgb):
        assert hex_to_rgb(rgb_to_hex(rgb)) == rgb


class TestTransparency:

    def test_low_alpha_is_transparent(self):
        assert is_transparent((255, 0, 0, 5)) is True

    def test_cutoff_is_inclusive(self):
        assert is_transparent((255, 0, 0, 10)) is True
        assert is_transparent((255, 0, 0, 11)) is False

    def test_opaque(self):
        assert is_transparent((255, 0, 0, 255)) is False

    def test_custom_threshold(self):
        assert is_transparent((0, 0, 0, 100), alpha_threshold=128) is True


class TestDistance:

    def test_identical_is_zero(self):
        assert color_distance("#123456", "#123456") == 0.0

    def test_black_white_is_max(self):
        assert color_distance("#000000", "#ffffff") == pytest.approx(MAX_DISTANCE)
        assert MAX_DISTANCE == pytest.approx(441.67, abs=0.01)

    def test_single_channel(self):
        assert color_distance("#000000", "#0a0000") == pytest.approx(10.0)

    def test_batch_matches_scalar(self):
        others = np.array([[255, 0, 0], [0, 0, 255], [10, 20, 30]])
        batch = color_distance_batch((255, 0, 0), others)
        expected = [color_distance("#ff0000", rgb_to_hex(tuple(o))) for o in others]
        np.testing.assert_allclose(batch, expected)


class TestSimilarity:

    def test_identical_colors_similar_at_zero(self):
        assert is_similar("#ff5733", "#ff5733", 0) is True

    def test_distant_colors_not_similar(self):
        assert is_similar("#ff0000", "#0000ff", 10) is False

    def test_everything_similar_at_100(self):
        assert is_similar("#000000", "#ffffff", 100) is True

    def test_radius_scales_linearly(self):
        assert similarity_radius(50) == pytest.approx(MAX_DISTANCE / 2)

    def test_boundary_inclusive(self):
        # 10 units apart; threshold chosen so radius is just above 10
        threshold = 10.0001 / MAX_DISTANCE * 100
        assert is_similar("#000000", "#0a0000", threshold) is True
        assert is_similar("#000000", "#0b0000", threshold) is False

    @pytest.mark.parametrize("threshold", [-1, 101, 100.5])
    def test_invalid_threshold_raises(self, threshold):
        with pytest.raises(InvalidArgumentError, match="between 0 and 100"):
            is_similar("#ff5733", "#ff5734", threshold)

    def test_non_numeric_threshold_raises(self):
        with pytest.raises(InvalidArgumentError):
            is_similar("#ff5733", "#ff5734", "10")


class TestAverage:

    def test_mean_rounds_half_up(self):
        buf = _buffer([[(0, 0, 0, 255), (255, 255, 255, 255)]])
        assert average_color(buf, [(0, 0), (1, 0)]) == "#808080"

    def test_subset_of_pixels(self):
        buf = _buffer([
            [(10, 20, 30, 255), (200, 200, 200, 255)],
            [(30, 40, 50, 255), (0, 0, 0, 255)],
        ])
        assert average_rgb(buf, [(0, 0), (0, 1)]) == (20, 30, 40)

    def test_alpha_does_not_weight(self):
        buf = _buffer([[(100, 0, 0, 20), (200, 0, 0, 255)]])
        assert average_rgb(buf, [(0, 0), (1, 0)]) == (150, 0, 0)

    def test_empty_raises(self):
        buf = _buffer([[(0, 0, 0, 255)]])
        with pytest.raises(InvalidArgumentError, match="empty"):
            average_color(buf, [])
