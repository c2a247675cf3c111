# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
CVD profile schema: the outcome of a calibration session.

A CVDProfile records the hue pair a viewer confuses most, how wide the
confusion zone around that pair is, and every width measurement that led
to it. Profiles are immutable: re-calibrating produces a new profile.

JSON shape (camelCase keys, shared with the stored browser record)::

    {
      "version": "1.0",
      "confusionPair": {"hueA": 40, "hueB": 115, "saturation": 0.7, "lightness": 0.5},
      "maxWidth": 3,
      "severityLabel": "moderate",
      "widthMeasurements": [{"offset": 0, "canDistinguish": false}, ...],
      "timestamp": "2026-01-01T00:00:00+00:00"
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Sequence


SCHEMA_VERSION = "1.0"

# Upper bounds (degrees) for mild, mild-moderate, moderate, moderate-severe
DEFAULT_SEVERITY_THRESHOLDS: tuple[float, float, float, float] = (1.0, 2.0, 3.0, 5.0)


# =============================================================================
# Confusion Pair
# =============================================================================


@dataclass(frozen=True, slots=True, eq=False)
class ConfusionPair:
    """
    Two hues a viewer cannot tell apart at a fixed saturation/lightness.

    Equality is symmetric: ConfusionPair(30, 130) == ConfusionPair(130, 30).

    Attributes:
        hue_a: First hue in degrees [0, 360)
        hue_b: Second hue in degrees [0, 360)
        saturation: HSL saturation the stimuli were shown at (0-1)
        lightness: HSL lightness the stimuli were shown at (0-1)
    """
    hue_a: float
    hue_b: float
    saturation: float = 0.7
    lightness: float = 0.5

    def __post_init__(self) -> None:
        """Validate hue and HSL ranges."""
        for hue in (self.hue_a, self.hue_b):
            if not 0.0 <= hue < 360.0:
                raise ValueError(f"Hue must be 0-360, got {hue}")
        if not 0.0 <= self.saturation <= 1.0:
            raise ValueError(f"Saturation must be 0-1, got {self.saturation}")
        if not 0.0 <= self.lightness <= 1.0:
            raise ValueError(f"Lightness must be 0-1, got {self.lightness}")

    def _key(self) -> tuple:
        lo, hi = sorted((round(self.hue_a, 6), round(self.hue_b, 6)))
        return lo, hi, round(self.saturation, 6), round(self.lightness, 6)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfusionPair):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @property
    def color_a(self) -> tuple[int, int, int]:
        """8-bit RGB of hue_a at the pair's saturation/lightness."""
        from chromasight.measure.colorspace import hsl_to_rgb8
        return hsl_to_rgb8(self.hue_a, self.saturation, self.lightness)

    @property
    def color_b(self) -> tuple[int, int, int]:
        """8-bit RGB of hue_b at the pair's saturation/lightness."""
        from chromasight.measure.colorspace import hsl_to_rgb8
        return hsl_to_rgb8(self.hue_b, self.saturation, self.lightness)

    @property
    def separation(self) -> float:
        """Shortest angular distance between the two hues."""
        d = abs(self.hue_a - self.hue_b) % 360.0
        return min(d, 360.0 - d)

    @property
    def midpoint_hue(self) -> float:
        """Hue halfway along the shorter arc from hue_a to hue_b."""
        delta = (self.hue_b - self.hue_a) % 360.0
        if delta > 180.0:
            delta -= 360.0
        return (self.hue_a + delta / 2.0) % 360.0

    def shifted(self, offset: float) -> ConfusionPair:
        """Rotate both hues by the same offset (degrees)."""
        return ConfusionPair(
            hue_a=(self.hue_a + offset) % 360.0,
            hue_b=(self.hue_b + offset) % 360.0,
            saturation=self.saturation,
            lightness=self.lightness,
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "hueA": self.hue_a,
            "hueB": self.hue_b,
            "saturation": self.saturation,
            "lightness": self.lightness,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ConfusionPair:
        """
        Deserialize from dictionary.

        Saturation/lightness stored as percentages (> 1) are rescaled.
        """
        saturation = float(data.get("saturation", 0.7))
        lightness = float(data.get("lightness", 0.5))
        if saturation > 1.0:
            saturation /= 100.0
        if lightness > 1.0:
            lightness /= 100.0
        return cls(
            hue_a=float(data["hueA"]) % 360.0,
            hue_b=float(data["hueB"]) % 360.0,
            saturation=saturation,
            lightness=lightness,
        )


# =============================================================================
# Width Measurements and Severity
# =============================================================================


@dataclass(frozen=True, slots=True)
class WidthMeasurement:
    """One answer of the width stage: could the viewer tell the shifted pair apart."""
    offset_degrees: float
    can_distinguish: bool

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {"offset": self.offset_degrees, "canDistinguish": self.can_distinguish}

    @classmethod
    def from_dict(cls, data: dict) -> WidthMeasurement:
        """Deserialize from dictionary."""
        return cls(
            offset_degrees=float(data["offset"]),
            can_distinguish=bool(data["canDistinguish"]),
        )


class Severity(Enum):
    """
    Severity bands derived from the confusion zone width.

    Ordered from narrowest to widest zone.
    """
    AXIS_ONLY = "mild (axis only)"
    MILD = "mild"
    MILD_MODERATE = "mild-moderate"
    MODERATE = "moderate"
    MODERATE_SEVERE = "moderate-severe"
    SEVERE = "severe"


def compute_max_width(measurements: Iterable[WidthMeasurement]) -> float:
    """
    Widest offset the viewer could not distinguish.

    Returns 0.0 when every offset was distinguishable (only the exact
    confusion axis is assumed indistinguishable).
    """
    confused = [abs(m.offset_degrees) for m in measurements if not m.can_distinguish]
    return float(max(confused)) if confused else 0.0


def severity_for_width(
    max_width: float,
    thresholds: Sequence[float] = DEFAULT_SEVERITY_THRESHOLDS,
) -> Severity:
    """
    Map a confusion zone width to a severity band.

    Monotonic: a wider zone never yields a milder label.

    Args:
        max_width: Confusion half-width in degrees
        thresholds: Inclusive upper bounds for MILD, MILD_MODERATE,
            MODERATE and MODERATE_SEVERE (ascending)
    """
    if len(thresholds) != 4 or list(thresholds) != sorted(thresholds):
        raise ValueError(f"Expected 4 ascending thresholds, got {thresholds!r}")
    if max_width <= 0:
        return Severity.AXIS_ONLY
    bands = (Severity.MILD, Severity.MILD_MODERATE, Severity.MODERATE, Severity.MODERATE_SEVERE)
    for bound, band in zip(thresholds, bands):
        if max_width <= bound:
            return band
    return Severity.SEVERE


# =============================================================================
# Profile
# =============================================================================


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True, slots=True)
class CVDProfile:
    """
    Personal color-vision profile produced by a calibration session.

    Attributes:
        confusion_pair: The hue pair the viewer confuses most
        max_width: Widest indistinguishable offset in degrees
        severity: Severity band for max_width
        width_measurements: Every width answer, in the order asked
        timestamp: ISO-8601 creation time (UTC)
        severity_thresholds: Band bounds severity was derived with
    """
    confusion_pair: ConfusionPair
    max_width: float
    severity: Severity
    width_measurements: tuple[WidthMeasurement, ...] = ()
    timestamp: str = field(default_factory=_utc_now)
    severity_thresholds: tuple[float, ...] = DEFAULT_SEVERITY_THRESHOLDS

    def __post_init__(self) -> None:
        """Validate max_width against the measurement log and severity against max_width."""
        if self.max_width < 0:
            raise ValueError(f"max_width must be >= 0, got {self.max_width}")
        expected = compute_max_width(self.width_measurements)
        if self.width_measurements and abs(expected - self.max_width) > 1e-9:
            raise ValueError(
                f"max_width {self.max_width} does not match measurements ({expected})"
            )
        expected_severity = severity_for_width(self.max_width, self.severity_thresholds)
        if self.severity is not expected_severity:
            raise ValueError(
                f"severity {self.severity.value!r} does not fit max_width {self.max_width} "
                f"(expected {expected_severity.value!r})"
            )

    @classmethod
    def from_measurements(
        cls,
        confusion_pair: ConfusionPair,
        measurements: Sequence[WidthMeasurement],
        *,
        thresholds: Sequence[float] = DEFAULT_SEVERITY_THRESHOLDS,
        timestamp: Optional[str] = None,
    ) -> CVDProfile:
        """Build a profile, deriving max_width and severity from the measurements."""
        max_width = compute_max_width(measurements)
        return cls(
            confusion_pair=confusion_pair,
            max_width=max_width,
            severity=severity_for_width(max_width, thresholds),
            width_measurements=tuple(measurements),
            timestamp=timestamp or _utc_now(),
            severity_thresholds=tuple(thresholds),
        )

    @property
    def severity_label(self) -> str:
        """Human-readable severity, e.g. "moderate"."""
        return self.severity.value

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "version": SCHEMA_VERSION,
            "confusionPair": self.confusion_pair.to_dict(),
            "maxWidth": self.max_width,
            "severityLabel": self.severity_label,
            "widthMeasurements": [m.to_dict() for m in self.width_measurements],
            "timestamp": self.timestamp,
            "severityThresholds": list(self.severity_thresholds),
        }

    @classmethod
    def from_dict(cls, data: dict) -> CVDProfile:
        """
        Deserialize from dictionary.

        Unknown severity labels are re-derived from maxWidth with the
        stored thresholds (the defaults when none are stored).
        """
        measurements = tuple(
            WidthMeasurement.from_dict(m) for m in data.get("widthMeasurements", ())
        )
        max_width = float(data["maxWidth"])
        thresholds = tuple(data.get("severityThresholds") or DEFAULT_SEVERITY_THRESHOLDS)
        label = data.get("severityLabel")
        try:
            severity = Severity(label)
        except ValueError:
            severity = severity_for_width(max_width, thresholds)
        return cls(
            confusion_pair=ConfusionPair.from_dict(data["confusionPair"]),
            max_width=max_width,
            severity=severity,
            width_measurements=measurements,
            timestamp=data.get("timestamp") or _utc_now(),
            severity_thresholds=thresholds,
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> CVDProfile:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))
