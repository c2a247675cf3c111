# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Confused swatch pairs within a palette.

Two colors are flagged for a viewer when they sit on opposite ends of
the viewer's confusion axis (one near hue A, the other near hue B), have
similar lightness and real saturation, and are far enough apart in Lab
that a typical viewer would see two different colors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from chromasight.schema import CVDProfile, Palette, Swatch
from chromasight.measure.colorspace import hue_distance, lab_distance, rgb_to_hsl, rgb_to_lab


@dataclass(frozen=True)
class ConfusionConfig:
    """Configuration for confused-pair detection."""

    # Zone half-width = base_width + max_width * width_scale (degrees)
    base_width: float = 35.0
    width_scale: float = 3.0

    # HSL lightness difference above which lightness alone separates the pair
    max_lightness_diff: float = 0.4

    # Both colors need at least this HSL saturation
    min_saturation: float = 0.15

    # Pairs closer than this Lab ΔE are the same color, not a confusion
    min_lab_distance: float = 12.0


@dataclass(frozen=True)
class ConfusedPair:
    """Two palette entries the viewer is likely to confuse."""
    index_a: int
    index_b: int
    swatch_a: Swatch
    swatch_b: Swatch
    lab_distance: float


def _near(hue: float, center: float, half_width: float) -> bool:
    return hue_distance(hue, center) <= half_width


def is_confused(
    rgb_x: Sequence[int],
    rgb_y: Sequence[int],
    profile: CVDProfile,
    config: Optional[ConfusionConfig] = None,
) -> bool:
    """
    Whether two colors are confusable for this viewer.

    Symmetric: is_confused(x, y) == is_confused(y, x), since both
    assignments of the colors to the axis ends are checked.
    """
    cfg = config or ConfusionConfig()

    hx, sx, lx = rgb_to_hsl(*rgb_x)
    hy, sy, ly = rgb_to_hsl(*rgb_y)

    if sx < cfg.min_saturation or sy < cfg.min_saturation:
        return False
    if abs(lx - ly) > cfg.max_lightness_diff:
        return False
    if lab_distance(rgb_to_lab(rgb_x), rgb_to_lab(rgb_y)) < cfg.min_lab_distance:
        return False

    pair = profile.confusion_pair
    half_width = cfg.base_width + profile.max_width * cfg.width_scale
    a, b = pair.hue_a, pair.hue_b

    x_a_y_b = _near(hx, a, half_width) and _near(hy, b, half_width)
    x_b_y_a = _near(hx, b, half_width) and _near(hy, a, half_width)
    return x_a_y_b or x_b_y_a


def find_confused_pairs(
    palette: Palette | Sequence[Swatch],
    profile: CVDProfile,
    config: Optional[ConfusionConfig] = None,
) -> list[ConfusedPair]:
    """
    All confusable swatch pairs in a palette.

    Returns:
        Pairs with index_a < index_b, in palette order
    """
    swatches = list(palette)
    found: list[ConfusedPair] = []
    for i in range(len(swatches)):
        for j in range(i + 1, len(swatches)):
            sa, sb = swatches[i], swatches[j]
            if is_confused(sa.rgb, sb.rgb, profile, config):
                found.append(ConfusedPair(
                    index_a=i,
                    index_b=j,
                    swatch_a=sa,
                    swatch_b=sb,
                    lab_distance=lab_distance(sa.lab, sb.lab),
                ))
    return found
