# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""Tests for schema types: validation, equality, serialization."""

import json

import pytest

from chromasight.schema import (
    SCHEMA_VERSION,
    ConfusionPair,
    CVDProfile,
    Palette,
    Severity,
    Swatch,
    WidthMeasurement,
    compute_max_width,
    severity_for_width,
)


def _measurements(max_confused):
    """Width log where every offset up to max_confused is indistinguishable."""
    offsets = (0, 1, -1, 2, -2, 3, -3, 5, -5, 8, -8)
    return tuple(
        WidthMeasurement(offset_degrees=o, can_distinguish=abs(o) > max_confused)
        for o in offsets
    )


class TestSwatch:

    def test_valid(self):
        s = Swatch(rgb=(57, 65, 200), population=10, ratio=0.25, name="blue")
        assert s.hex == "#3941C8"
        assert s.hsl[0] == pytest.approx(236.5, abs=0.5)

    def test_channel_out_of_range(self):
        with pytest.raises(ValueError):
            Swatch(rgb=(256, 0, 0), population=1, ratio=0.5)

    def test_ratio_out_of_range(self):
        with pytest.raises(ValueError):
            Swatch(rgb=(0, 0, 0), population=1, ratio=1.5)

    def test_negative_population(self):
        with pytest.raises(ValueError):
            Swatch(rgb=(0, 0, 0), population=-1, ratio=0.5)

    def test_roundtrip(self):
        s = Swatch(rgb=(10, 20, 30), population=5, ratio=0.5, name="navy")
        assert Swatch.from_dict(s.to_dict()) == s

    def test_from_hex_only(self):
        s = Swatch.from_dict({"hex": "#FF0000", "ratio": 1.0})
        assert s.rgb == (255, 0, 0)
        assert s.population == 0.0


class TestPalette:

    def _swatches(self):
        return (
            Swatch(rgb=(255, 0, 0), population=6, ratio=0.6),
            Swatch(rgb=(0, 0, 255), population=4, ratio=0.4),
        )

    def test_valid(self):
        p = Palette(swatches=self._swatches(), k=3, total_samples=10)
        assert len(p) == 2
        assert p.dominant.rgb == (255, 0, 0)
        assert p.total_ratio == pytest.approx(1.0)
        assert [s.rgb for s in p] == [(255, 0, 0), (0, 0, 255)]
        assert p[1].rgb == (0, 0, 255)

    def test_more_swatches_than_k(self):
        with pytest.raises(ValueError, match="more than k"):
            Palette(swatches=self._swatches(), k=1)

    def test_unsorted(self):
        with pytest.raises(ValueError, match="sorted"):
            Palette(swatches=tuple(reversed(self._swatches())), k=2)

    def test_invalid_k(self):
        with pytest.raises(ValueError):
            Palette(swatches=(), k=0)

    def test_empty(self):
        p = Palette(swatches=(), k=5)
        assert p.is_empty
        assert p.dominant is None
        assert p.total_ratio == 0

    def test_roundtrip(self):
        p = Palette(swatches=self._swatches(), k=5, total_samples=10)
        restored = Palette.from_dict(json.loads(json.dumps(p.to_dict())))
        assert restored == p


class TestConfusionPair:

    def test_symmetric_equality(self):
        assert ConfusionPair(30, 130) == ConfusionPair(130, 30)
        assert hash(ConfusionPair(30, 130)) == hash(ConfusionPair(130, 30))
        assert len({ConfusionPair(30, 130), ConfusionPair(130, 30)}) == 1

    def test_different_stimulus_not_equal(self):
        assert ConfusionPair(30, 130, saturation=0.5) != ConfusionPair(30, 130)

    @pytest.mark.parametrize("kwargs", [
        {"hue_a": 360, "hue_b": 10},
        {"hue_a": -1, "hue_b": 10},
        {"hue_a": 0, "hue_b": 10, "saturation": 1.2},
        {"hue_a": 0, "hue_b": 10, "lightness": -0.1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ConfusionPair(**kwargs)

    def test_colors(self):
        pair = ConfusionPair(0, 120, saturation=1.0, lightness=0.5)
        assert pair.color_a == (255, 0, 0)
        assert pair.color_b == (0, 255, 0)

    def test_separation_and_midpoint(self):
        pair = ConfusionPair(350, 50)
        assert pair.separation == pytest.approx(60.0)
        assert pair.midpoint_hue == pytest.approx(20.0)
        assert ConfusionPair(30, 130).midpoint_hue == pytest.approx(80.0)

    def test_shifted_wraps(self):
        shifted = ConfusionPair(0, 100).shifted(-5)
        assert shifted.hue_a == pytest.approx(355.0)
        assert shifted.hue_b == pytest.approx(95.0)

    def test_from_dict_percentages(self):
        pair = ConfusionPair.from_dict({"hueA": 30, "hueB": 130, "saturation": 70, "lightness": 50})
        assert pair.saturation == pytest.approx(0.7)
        assert pair.lightness == pytest.approx(0.5)


class TestSeverity:

    @pytest.mark.parametrize("width,expected", [
        (0, Severity.AXIS_ONLY),
        (1, Severity.MILD),
        (2, Severity.MILD_MODERATE),
        (3, Severity.MODERATE),
        (5, Severity.MODERATE_SEVERE),
        (8, Severity.SEVERE),
    ])
    def test_bands(self, width, expected):
        assert severity_for_width(width) is expected

    def test_monotonic(self):
        order = list(Severity)
        widths = [w / 4 for w in range(0, 60)]
        ranks = [order.index(severity_for_width(w)) for w in widths]
        assert ranks == sorted(ranks)

    def test_custom_thresholds(self):
        assert severity_for_width(3, (5, 10, 15, 20)) is Severity.MILD

    def test_invalid_thresholds(self):
        with pytest.raises(ValueError):
            severity_for_width(3, (5, 1, 15, 20))
        with pytest.raises(ValueError):
            severity_for_width(3, (1, 2, 3))


class TestMaxWidth:

    @pytest.mark.parametrize("n", [0, 1, 2, 3, 5, 8])
    def test_widest_indistinguishable_offset(self, n):
        assert compute_max_width(_measurements(n)) == n

    def test_all_distinguishable(self):
        log = [WidthMeasurement(o, True) for o in (0, 1, -1)]
        assert compute_max_width(log) == 0.0

    def test_uses_magnitude(self):
        log = [WidthMeasurement(0, False), WidthMeasurement(-5, False), WidthMeasurement(3, True)]
        assert compute_max_width(log) == 5.0


class TestCVDProfile:

    def _profile(self):
        return CVDProfile.from_measurements(
            ConfusionPair(40, 115),
            _measurements(3),
            timestamp="2026-01-01T00:00:00+00:00",
        )

    def test_from_measurements(self):
        p = self._profile()
        assert p.max_width == 3.0
        assert p.severity is Severity.MODERATE
        assert p.severity_label == "moderate"
        assert len(p.width_measurements) == 11

    def test_max_width_must_match_log(self):
        with pytest.raises(ValueError, match="does not match"):
            CVDProfile(
                confusion_pair=ConfusionPair(40, 115),
                max_width=5.0,
                severity=Severity.MODERATE_SEVERE,
                width_measurements=_measurements(3),
            )

    def test_negative_width(self):
        with pytest.raises(ValueError):
            CVDProfile(ConfusionPair(40, 115), max_width=-1.0, severity=Severity.MILD)

    def test_severity_must_fit_width(self):
        with pytest.raises(ValueError, match="does not fit"):
            CVDProfile(ConfusionPair(40, 115), max_width=8.0, severity=Severity.MILD)

    def test_severity_checked_against_own_thresholds(self):
        thresholds = (5.0, 10.0, 15.0, 20.0)
        p = CVDProfile(
            ConfusionPair(40, 115),
            max_width=8.0,
            severity=Severity.MILD_MODERATE,
            severity_thresholds=thresholds,
        )
        assert p.severity_thresholds == thresholds
        with pytest.raises(ValueError, match="does not fit"):
            CVDProfile(ConfusionPair(40, 115), max_width=8.0, severity=Severity.MILD_MODERATE)

    def test_stored_label_must_fit_width(self):
        data = self._profile().to_dict()
        data["severityLabel"] = "mild"
        with pytest.raises(ValueError, match="does not fit"):
            CVDProfile.from_dict(data)

    def test_json_roundtrip(self):
        p = self._profile()
        assert CVDProfile.from_json(p.to_json()) == p

    def test_json_roundtrip_custom_thresholds(self):
        p = CVDProfile.from_measurements(
            ConfusionPair(40, 115),
            _measurements(3),
            thresholds=(2.0, 4.0, 6.0, 8.0),
            timestamp="2026-01-01T00:00:00+00:00",
        )
        assert p.severity is Severity.MILD_MODERATE
        restored = CVDProfile.from_json(p.to_json())
        assert restored == p
        assert restored.severity_thresholds == (2.0, 4.0, 6.0, 8.0)

    def test_json_shape(self):
        data = json.loads(self._profile().to_json())
        assert data["version"] == SCHEMA_VERSION
        assert data["confusionPair"]["hueA"] == 40
        assert data["maxWidth"] == 3.0
        assert data["severityLabel"] == "moderate"
        assert data["widthMeasurements"][0] == {"offset": 0, "canDistinguish": False}

    def test_unknown_label_rederived(self):
        data = self._profile().to_dict()
        data["severityLabel"] = "Moderate (legacy)"
        assert CVDProfile.from_dict(data).severity is Severity.MODERATE

    def test_timestamp_defaults_to_now(self):
        p = CVDProfile(ConfusionPair(40, 115), max_width=0.0, severity=Severity.AXIS_ONLY)
        assert p.timestamp.endswith("+00:00")
