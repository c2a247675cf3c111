# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Color-vision tooling: calibration, compensation, confusion checks, simulation.

The calibrator measures a viewer's confusion axis and produces a
CVDProfile. The other modules consume that profile.
"""

from chromasight.cvd.calibrator import (
    CalibrationConfig,
    CalibrationState,
    CVDCalibrator,
    InvalidTransition,
    Stage,
    transition,
)
from chromasight.cvd.compensation import CompensationConfig, compensate, compensate_image
from chromasight.cvd.confusion import (
    ConfusedPair,
    ConfusionConfig,
    find_confused_pairs,
    is_confused,
)
from chromasight.cvd.simulation import SimulationMode, simulate, simulate_color
from chromasight.cvd.stimulus import CircleMask, DigitMask, Stimulus, render_plate

__all__ = [
    # Calibration
    "CVDCalibrator",
    "CalibrationConfig",
    "CalibrationState",
    "Stage",
    "InvalidTransition",
    "transition",
    # Stimuli
    "DigitMask",
    "CircleMask",
    "Stimulus",
    "render_plate",
    # Compensation
    "CompensationConfig",
    "compensate",
    "compensate_image",
    # Confusion
    "ConfusionConfig",
    "ConfusedPair",
    "is_confused",
    "find_confused_pairs",
    # Simulation
    "SimulationMode",
    "simulate",
    "simulate_color",
]
