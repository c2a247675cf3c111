# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Hue-pair grids for the calibration search.

Each grid stage lists candidate (hue_a, hue_b) pairs at a fixed
saturation and lightness. The first stage spans the whole hue circle;
later stages only cover a window around the previous choice.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from chromasight.schema import ConfusionPair
from chromasight.measure.colorspace import hue_distance


def _axis_values(step: float, center: Optional[float], window: Optional[float]) -> list[float]:
    """Hue values for one axis of the grid, normalized to [0, 360)."""
    if center is None or window is None:
        count = int(np.ceil(360.0 / step))
        raw = [i * step for i in range(count)]
    else:
        half_steps = int(np.floor((window / 2.0) / step + 1e-9))
        raw = [center + i * step for i in range(-half_steps, half_steps + 1)]
    return [round(h % 360.0, 6) % 360.0 for h in raw]


def generate_pairs(
    step: float,
    center_a: Optional[float] = None,
    center_b: Optional[float] = None,
    window: Optional[float] = None,
    *,
    min_separation: float = 60.0,
    max_separation: float = 300.0,
    saturation: float = 0.7,
    lightness: float = 0.5,
) -> list[ConfusionPair]:
    """
    Candidate hue pairs on a grid.

    Args:
        step: Grid spacing in degrees
        center_a: Center of the hue_a window (None for the full circle)
        center_b: Center of the hue_b window (None for the full circle)
        window: Total window width in degrees (e.g. 90 for ±45°)
        min_separation: Smallest allowed angular difference between hues
        max_separation: Largest allowed angular difference between hues
        saturation: HSL saturation of the stimuli (0-1)
        lightness: HSL lightness of the stimuli (0-1)

    Returns:
        Pairs in grid order (hue_a major), with symmetric duplicates removed
    """
    if step <= 0:
        raise ValueError(f"step must be > 0, got {step}")

    a_values = _axis_values(step, center_a, window)
    b_values = _axis_values(step, center_b, window)

    seen: set[tuple[float, float]] = set()
    pairs: list[ConfusionPair] = []

    for hue_a in a_values:
        for hue_b in b_values:
            diff = hue_distance(hue_a, hue_b)
            if not min_separation <= diff <= max_separation:
                continue

            key = (min(hue_a, hue_b), max(hue_a, hue_b))
            if key in seen:
                continue
            seen.add(key)

            pairs.append(ConfusionPair(
                hue_a=hue_a,
                hue_b=hue_b,
                saturation=saturation,
                lightness=lightness,
            ))

    return pairs


def paginate(pairs: list[ConfusionPair], page: int, page_size: int) -> list[ConfusionPair]:
    """One page of tiles (0-indexed)."""
    start = page * page_size
    return pairs[start:start + page_size]


def page_count(n_items: int, page_size: int) -> int:
    """Number of pages needed for n_items."""
    return max(1, -(-n_items // page_size))
