# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Schema definitions for palettes and color-vision profiles.

All types in this module are immutable (frozen dataclasses).
A profile is superseded by re-calibrating, never mutated.
"""

from chromasight.schema.palette import Palette, Swatch
from chromasight.schema.cvd_profile import (
    DEFAULT_SEVERITY_THRESHOLDS,
    SCHEMA_VERSION,
    ConfusionPair,
    CVDProfile,
    Severity,
    WidthMeasurement,
    compute_max_width,
    severity_for_width,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Palette types
    "Swatch",
    "Palette",
    # Color-vision types
    "ConfusionPair",
    "WidthMeasurement",
    "Severity",
    "CVDProfile",
    "DEFAULT_SEVERITY_THRESHOLDS",
    # Derivations
    "compute_max_width",
    "severity_for_width",
]
