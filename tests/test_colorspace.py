# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""Tests for color space conversions (sRGB ↔ XYZ ↔ Lab, sRGB ↔ HSL)."""

import numpy as np
import pytest

from chromasight.measure.colorspace import (
    D65_WHITE,
    hex_to_rgb,
    hsl_to_rgb,
    hsl_to_rgb8,
    hue_distance,
    lab_distance,
    lab_distance_batch,
    lab_to_rgb,
    linear_to_srgb,
    rgb_to_hex,
    rgb_to_hsl,
    rgb_to_hsl_array,
    hsl_to_rgb_array,
    rgb_to_lab,
    rgb_to_xyz,
    signed_hue_delta,
    srgb_to_linear,
)


class TestSRGBLinear:

    def test_roundtrip_channels(self):
        values = np.arange(256, dtype=np.float64)
        recovered = linear_to_srgb(srgb_to_linear(values))
        np.testing.assert_allclose(recovered, values, atol=1e-8)

    def test_gamma_threshold(self):
        """Values below 0.04045 use the linear segment."""
        linear = srgb_to_linear(np.array([5.0]))
        assert float(linear[0]) == pytest.approx((5.0 / 255.0) / 12.92, abs=1e-12)

    def test_endpoints(self):
        np.testing.assert_allclose(srgb_to_linear([0, 255]), [0.0, 1.0], atol=1e-12)


class TestLab:

    def test_white_is_reference_white(self):
        np.testing.assert_allclose(rgb_to_xyz([255, 255, 255]), D65_WHITE, atol=1e-4)
        np.testing.assert_allclose(rgb_to_lab([255, 255, 255]), [100.0, 0.0, 0.0], atol=0.01)

    def test_black(self):
        np.testing.assert_allclose(rgb_to_lab([0, 0, 0]), [0.0, 0.0, 0.0], atol=1e-9)

    def test_red_reference_value(self):
        L, a, b = rgb_to_lab([255, 0, 0])
        assert L == pytest.approx(53.24, abs=0.5)
        assert a == pytest.approx(80.09, abs=0.5)
        assert b == pytest.approx(67.20, abs=0.5)

    def test_roundtrip_grid(self):
        """sRGB → Lab → sRGB stays within one step per channel."""
        axis = np.arange(0, 256, 8)
        grid = np.stack(np.meshgrid(axis, axis, axis, indexing="ij"), axis=-1).reshape(-1, 3)
        recovered = lab_to_rgb(rgb_to_lab(grid))
        assert np.max(np.abs(recovered - grid)) <= 1

    def test_batch_matches_single(self):
        colors = np.array([[12, 200, 90], [250, 10, 180]])
        batch = rgb_to_lab(colors)
        for color, lab in zip(colors, batch):
            np.testing.assert_allclose(rgb_to_lab(color), lab, atol=1e-12)


class TestHSL:

    def test_primaries(self):
        assert rgb_to_hsl(255, 0, 0) == pytest.approx((0.0, 1.0, 0.5))
        assert rgb_to_hsl(0, 255, 0) == pytest.approx((120.0, 1.0, 0.5))
        assert rgb_to_hsl(0, 0, 255) == pytest.approx((240.0, 1.0, 0.5))

    def test_to_rgb8(self):
        assert hsl_to_rgb8(0, 1.0, 0.5) == (255, 0, 0)
        assert hsl_to_rgb8(120, 1.0, 0.5) == (0, 255, 0)
        assert hsl_to_rgb8(32, 0.5, 0.5) == (191, 132, 64)
        assert hsl_to_rgb8(128, 0.5, 0.5) == (64, 191, 81)

    def test_zero_saturation_is_gray(self):
        r, g, b = hsl_to_rgb(200.0, 0.0, 0.4)
        assert r == pytest.approx(0.4 * 255)
        assert g == pytest.approx(0.4 * 255)
        assert b == pytest.approx(0.4 * 255)

    def test_achromatic_has_zero_hue_and_saturation(self):
        h, s, l = rgb_to_hsl(128, 128, 128)
        assert h == 0.0
        assert s == 0.0
        assert l == pytest.approx(128 / 255)

    def test_roundtrip_random(self):
        rgb = np.random.default_rng(42).integers(0, 256, size=(500, 3))
        recovered = hsl_to_rgb_array(rgb_to_hsl_array(rgb))
        np.testing.assert_allclose(recovered, rgb, atol=1e-6)

    def test_hue_wraps(self):
        np.testing.assert_allclose(hsl_to_rgb(370.0, 0.6, 0.5), hsl_to_rgb(10.0, 0.6, 0.5))


class TestHueArithmetic:

    def test_distance_is_circular(self):
        assert hue_distance(350, 10) == pytest.approx(20.0)
        assert hue_distance(0, 180) == pytest.approx(180.0)
        assert hue_distance(90, 90) == 0.0

    def test_distance_array(self):
        d = hue_distance(np.array([0.0, 90.0, 300.0]), 30.0)
        np.testing.assert_allclose(d, [30.0, 60.0, 90.0])

    def test_signed_delta(self):
        assert signed_hue_delta(350, 10) == pytest.approx(20.0)
        assert signed_hue_delta(10, 350) == pytest.approx(-20.0)
        assert signed_hue_delta(0, 180) == pytest.approx(180.0)


class TestHex:

    def test_format(self):
        assert rgb_to_hex(57, 65, 200) == "#3941C8"

    def test_parse(self):
        assert hex_to_rgb("#3941C8") == (57, 65, 200)
        assert hex_to_rgb("3941c8") == (57, 65, 200)
        assert hex_to_rgb("#FFF") == (255, 255, 255)

    @pytest.mark.parametrize("bad", ["", "#12", "#GGGGGG", "#1234567"])
    def test_invalid(self, bad):
        with pytest.raises(ValueError):
            hex_to_rgb(bad)


class TestLabDistance:

    def test_identical_is_zero(self):
        lab = rgb_to_lab([10, 120, 200])
        assert lab_distance(lab, lab) == 0.0

    def test_symmetric(self):
        a, b = rgb_to_lab([255, 0, 0]), rgb_to_lab([0, 0, 255])
        assert lab_distance(a, b) == pytest.approx(lab_distance(b, a))

    def test_batch(self):
        labs = rgb_to_lab(np.array([[0, 0, 0], [255, 255, 255]]))
        d = lab_distance_batch(labs, rgb_to_lab([0, 0, 0]))
        np.testing.assert_allclose(d, [0.0, 100.0], atol=0.01)
