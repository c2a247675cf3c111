# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Chromasight -- palette extraction and personal color-vision calibration.

Extracts dominant colors from images, measures which hues a viewer
confuses, and uses that profile to flag confusable palette entries and
re-render images so those colors separate.

Quick start::

    from chromasight import extract_palette, CVDCalibrator, compensate_image

    palette = extract_palette("image.png", k=5, seed=0)
    cal = CVDCalibrator(seed=0)
    ...                          # run a session
    profile = cal.finalize()
    fixed = compensate_image(pixels, profile)
"""

from __future__ import annotations

__version__ = "1.0.0"

from chromasight.measure import ExtractionConfig, extract_palette
from chromasight.schema import (
    ConfusionPair,
    CVDProfile,
    Palette,
    Severity,
    Swatch,
    WidthMeasurement,
)
from chromasight.cvd import (
    CVDCalibrator,
    SimulationMode,
    compensate,
    compensate_image,
    find_confused_pairs,
    is_confused,
    simulate,
)
from chromasight.render import render_frame

__all__ = [
    # Core API
    "extract_palette",
    "ExtractionConfig",
    "CVDCalibrator",
    "compensate",
    "compensate_image",
    "find_confused_pairs",
    "is_confused",
    "simulate",
    "render_frame",
    # Types (commonly needed)
    "Swatch",
    "Palette",
    "ConfusionPair",
    "WidthMeasurement",
    "Severity",
    "CVDProfile",
    "SimulationMode",
    # Version
    "__version__",
]
