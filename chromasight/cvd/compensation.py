# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Personal CVD compensation filter.

Pixels whose hue lies near the viewer's confusion axis are rotated toward
the axis perpendicular to it, which moves confusable colors apart.

Zone geometry for a profile with pair (A, B) and width w:
- Attractor hues: A, B, A+180, B+180
- Zone half-width: base_width + w * width_scale
- Target hues: midpoint(A, B) ± 90, whichever is closer to the pixel

Shift strength falls linearly from max_shift at an attractor to zero at
the zone edge, so there is no visible seam where the zone ends.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from chromasight.schema import ConfusionPair, CVDProfile
from chromasight.measure.colorspace import (
    hsl_to_rgb,
    hsl_to_rgb_array,
    hue_distance,
    rgb_to_hsl,
    rgb_to_hsl_array,
    signed_hue_delta,
)


@dataclass(frozen=True)
class CompensationConfig:
    """Configuration for the compensation filter."""

    # Pixels below this saturation carry no usable hue
    min_saturation: float = 0.08

    # Near-black / near-white pixels are left alone
    min_lightness: float = 0.05
    max_lightness: float = 0.95

    # Zone half-width = base_width + max_width * width_scale (degrees)
    base_width: float = 35.0
    width_scale: float = 3.0

    # Largest hue rotation, applied at an attractor hue (degrees)
    max_shift: float = 60.0

    # Saturation multiplier at full strength (1.0 disables), capped at 1.0
    saturation_boost: float = 1.2


def zone_half_width(max_width: float, config: Optional[CompensationConfig] = None) -> float:
    """Half-width of each confusion zone, in degrees."""
    cfg = config or CompensationConfig()
    return cfg.base_width + max_width * cfg.width_scale


def attractor_hues(pair: ConfusionPair) -> tuple[float, float, float, float]:
    """The confusion axis endpoints and their opposite hues."""
    a, b = pair.hue_a, pair.hue_b
    return a, b, (a + 180.0) % 360.0, (b + 180.0) % 360.0


def target_hue(hue: float, pair: ConfusionPair) -> float:
    """Point of the perpendicular axis closest to hue."""
    mid = pair.midpoint_hue
    candidates = ((mid + 90.0) % 360.0, (mid - 90.0) % 360.0)
    return min(candidates, key=lambda t: hue_distance(hue, t))


def _rotate_toward(hue: float, target: float, amount: float) -> float:
    """Rotate hue toward target along the shorter arc, never past it."""
    delta = signed_hue_delta(hue, target)
    step = min(amount, abs(delta))
    return (hue + np.copysign(step, delta)) % 360.0


def compensate(
    r: int,
    g: int,
    b: int,
    profile: CVDProfile,
    config: Optional[CompensationConfig] = None,
) -> tuple[int, int, int]:
    """
    Compensate one pixel for a viewer's confusion axis.

    Args:
        r, g, b: 8-bit sRGB input
        profile: The viewer's calibrated profile
        config: Filter settings (uses defaults if None)

    Returns:
        Corrected 8-bit (r, g, b); the input unchanged for pixels outside
        every confusion zone, low-saturation pixels, and extreme lightness
    """
    cfg = config or CompensationConfig()
    original = (int(r), int(g), int(b))

    h, s, l = rgb_to_hsl(r, g, b)
    if s < cfg.min_saturation or l < cfg.min_lightness or l > cfg.max_lightness:
        return original

    pair = profile.confusion_pair
    half_width = zone_half_width(profile.max_width, cfg)
    distance = min(hue_distance(h, a) for a in attractor_hues(pair))
    if half_width <= 0 or distance >= half_width:
        return original

    strength = 1.0 - distance / half_width
    new_h = _rotate_toward(h, target_hue(h, pair), cfg.max_shift * strength)
    new_s = min(1.0, s * (1.0 + (cfg.saturation_boost - 1.0) * strength))

    rgb = np.array(hsl_to_rgb(new_h, new_s, l))
    if not np.all(np.isfinite(rgb)):
        return original

    out = np.clip(np.rint(rgb), 0, 255).astype(int)
    return int(out[0]), int(out[1]), int(out[2])


def compensate_image(
    pixels: NDArray[np.uint8],
    profile: CVDProfile,
    config: Optional[CompensationConfig] = None,
) -> NDArray[np.uint8]:
    """
    Vectorized compensate() over an image.

    Args:
        pixels: Array of shape (..., 3) RGB or (..., 4) RGBA, uint8
        profile: The viewer's calibrated profile
        config: Filter settings (uses defaults if None)

    Returns:
        New uint8 array of the same shape; alpha is passed through
    """
    cfg = config or CompensationConfig()
    pixels = np.asarray(pixels)
    if pixels.shape[-1] not in (3, 4):
        raise ValueError(f"Expected (..., 3) or (..., 4) array, got shape {pixels.shape}")

    out = pixels.astype(np.uint8, copy=True)
    rgb = pixels[..., :3].astype(np.float64)

    hsl = rgb_to_hsl_array(rgb)
    h, s, l = hsl[..., 0], hsl[..., 1], hsl[..., 2]

    pair = profile.confusion_pair
    half_width = zone_half_width(profile.max_width, cfg)
    if half_width <= 0:
        return out

    distance = np.min(
        np.stack([hue_distance(h, a) for a in attractor_hues(pair)], axis=-1),
        axis=-1,
    )

    active = (
        (s >= cfg.min_saturation)
        & (l >= cfg.min_lightness)
        & (l <= cfg.max_lightness)
        & (distance < half_width)
    )
    if not np.any(active):
        return out

    h_act, s_act, l_act = h[active], s[active], l[active]
    strength = 1.0 - distance[active] / half_width

    # Nearest perpendicular point per pixel
    mid = pair.midpoint_hue
    t1, t2 = (mid + 90.0) % 360.0, (mid - 90.0) % 360.0
    target = np.where(hue_distance(h_act, t1) <= hue_distance(h_act, t2), t1, t2)

    delta = np.mod(target - h_act, 360.0)
    delta = np.where(delta > 180.0, delta - 360.0, delta)
    step = np.minimum(cfg.max_shift * strength, np.abs(delta))
    new_h = np.mod(h_act + np.copysign(step, delta), 360.0)
    new_s = np.minimum(1.0, s_act * (1.0 + (cfg.saturation_boost - 1.0) * strength))

    new_rgb = hsl_to_rgb_array(np.stack([new_h, new_s, l_act], axis=-1))
    finite = np.all(np.isfinite(new_rgb), axis=-1)
    new_rgb = np.where(finite[:, np.newaxis], new_rgb, rgb[active])

    out_rgb = out[..., :3]
    out_rgb[active] = np.clip(np.rint(new_rgb), 0, 255).astype(np.uint8)
    return out
