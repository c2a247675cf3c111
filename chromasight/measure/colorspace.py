# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Color space conversions.

Conversion chain: sRGB [0,255] → Linear RGB → CIE XYZ (D65) → CIE L*a*b*
Cylindrical side-chain: sRGB [0,255] ↔ HSL

References:
- sRGB transfer curve: IEC 61966-2-1
- L*a*b*: CIE 1976, D65 reference white

Array functions accept shapes (..., 3) and are pure NumPy so that the
same code serves single colors and whole images.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray


# =============================================================================
# sRGB ↔ Linear RGB
# =============================================================================


def srgb_to_linear(rgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB channel values [0,255] to linear light [0,1].

    sRGB uses a piecewise gamma curve on the normalized value v:
    - For v <= 0.04045: v / 12.92
    - For v > 0.04045: ((v + 0.055) / 1.055) ^ 2.4
    """
    v = np.asarray(rgb, dtype=np.float64) / 255.0
    return np.where(
        v <= 0.04045,
        v / 12.92,
        np.power((np.maximum(v, 0.04045) + 0.055) / 1.055, 2.4),
    )


def linear_to_srgb(linear: ArrayLike) -> NDArray[np.float64]:
    """
    Convert linear light [0,1] to sRGB channel values [0,255].

    Inverse of srgb_to_linear. Output is clipped but not rounded.
    """
    linear = np.asarray(linear, dtype=np.float64)
    # Clip negative values to avoid NaN in power function
    linear_safe = np.maximum(linear, 0.0)
    v = np.where(
        linear_safe <= 0.0031308,
        linear_safe * 12.92,
        1.055 * np.power(linear_safe, 1.0 / 2.4) - 0.055,
    )
    return np.clip(v * 255.0, 0.0, 255.0)


def srgb_channel_to_linear(c: float) -> float:
    """Gamma-decode a single 8-bit channel value."""
    return float(srgb_to_linear(c))


def linear_to_srgb_channel(value: float) -> int:
    """Gamma-encode a single linear value to a rounded, clamped 8-bit channel."""
    return int(np.rint(linear_to_srgb(value)))


# =============================================================================
# Linear RGB ↔ XYZ
# =============================================================================

# sRGB primaries, D65 white
_RGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float64)

_XYZ_TO_RGB = np.linalg.inv(_RGB_TO_XYZ)

D65_WHITE = np.array([0.95047, 1.0, 1.08883], dtype=np.float64)

_DELTA = 6.0 / 29.0


def rgb_to_xyz(rgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB [0,255] to CIE XYZ (D65, Y of white = 1.0).

    Args:
        rgb: Array of shape (..., 3) with sRGB channel values

    Returns:
        Array of shape (..., 3) with X, Y, Z
    """
    linear = srgb_to_linear(rgb)
    return np.einsum('...j,ij->...i', linear, _RGB_TO_XYZ)


def xyz_to_rgb(xyz: ArrayLike) -> NDArray[np.float64]:
    """
    Convert CIE XYZ to sRGB [0,255].

    Out-of-gamut results are clipped to the sRGB cube. Values are not
    rounded; use lab_to_rgb or np.rint for 8-bit output.
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    linear = np.einsum('...j,ij->...i', xyz, _XYZ_TO_RGB)
    return linear_to_srgb(linear)


# =============================================================================
# XYZ ↔ L*a*b*
# =============================================================================


def _lab_f(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(
        t > _DELTA ** 3,
        np.cbrt(t),
        t / (3.0 * _DELTA ** 2) + 4.0 / 29.0,
    )


def _lab_f_inv(f: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(
        f > _DELTA,
        f ** 3,
        3.0 * _DELTA ** 2 * (f - 4.0 / 29.0),
    )


def xyz_to_lab(xyz: ArrayLike) -> NDArray[np.float64]:
    """
    Convert CIE XYZ to L*a*b* relative to the D65 white point.

    Returns:
        Array of shape (..., 3) with (L, a, b); L in [0, 100]
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    f = _lab_f(xyz / D65_WHITE)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

    L = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)

    return np.stack([L, a, b], axis=-1)


def lab_to_xyz(lab: ArrayLike) -> NDArray[np.float64]:
    """Convert L*a*b* (D65) to CIE XYZ. Exact inverse of xyz_to_lab."""
    lab = np.asarray(lab, dtype=np.float64)
    L, a, b = lab[..., 0], lab[..., 1], lab[..., 2]

    fy = (L + 16.0) / 116.0
    fx = fy + a / 500.0
    fz = fy - b / 200.0

    xyz = _lab_f_inv(np.stack([fx, fy, fz], axis=-1))
    return xyz * D65_WHITE


# =============================================================================
# Convenience: sRGB ↔ L*a*b* (full chain)
# =============================================================================


def rgb_to_lab(rgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB [0,255] to L*a*b*.

    Full chain: sRGB → Linear RGB → XYZ → Lab

    Example:
        >>> rgb_to_lab([255, 0, 0]).round(1)
        array([53.2, 80.1, 67.2])
    """
    return xyz_to_lab(rgb_to_xyz(rgb))


def lab_to_rgb(lab: ArrayLike) -> NDArray[np.int64]:
    """
    Convert L*a*b* to 8-bit sRGB.

    Full chain: Lab → XYZ → Linear RGB → sRGB, rounded and clamped.
    """
    rgb = xyz_to_rgb(lab_to_xyz(lab))
    return np.rint(rgb).astype(np.int64)


# =============================================================================
# sRGB ↔ HSL
# =============================================================================


def rgb_to_hsl_array(rgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB [0,255] to HSL.

    Args:
        rgb: Array of shape (..., 3)

    Returns:
        Array of shape (..., 3) with H in degrees [0, 360), S and L in [0, 1].
        Achromatic colors (max == min) get H = 0 and S = 0.
    """
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    mx = np.max(rgb, axis=-1)
    mn = np.min(rgb, axis=-1)
    d = mx - mn
    L = (mx + mn) / 2.0

    chromatic = d > 0
    d_safe = np.where(chromatic, d, 1.0)

    denom = np.where(L > 0.5, 2.0 - mx - mn, mx + mn)
    S = np.where(chromatic, d / np.where(chromatic, denom, 1.0), 0.0)

    h_r = np.mod((g - b) / d_safe, 6.0)
    h_g = (b - r) / d_safe + 2.0
    h_b = (r - g) / d_safe + 4.0
    H = np.select([mx == r, mx == g], [h_r, h_g], default=h_b) * 60.0
    H = np.where(chromatic, np.mod(H, 360.0), 0.0)

    return np.stack([H, S, L], axis=-1)


def hsl_to_rgb_array(hsl: ArrayLike) -> NDArray[np.float64]:
    """
    Convert HSL to sRGB [0,255].

    Args:
        hsl: Array of shape (..., 3) with H in degrees, S and L in [0, 1]

    Returns:
        Array of shape (..., 3) with unrounded channel values.
        S == 0 yields a gray of value L * 255 on every channel.
    """
    hsl = np.asarray(hsl, dtype=np.float64)
    H = np.mod(hsl[..., 0], 360.0)
    S = hsl[..., 1]
    L = hsl[..., 2]

    a = S * np.minimum(L, 1.0 - L)

    def channel(n: float) -> NDArray[np.float64]:
        k = np.mod(n + H / 30.0, 12.0)
        return L - a * np.maximum(-1.0, np.minimum(np.minimum(k - 3.0, 9.0 - k), 1.0))

    return np.stack([channel(0.0), channel(8.0), channel(4.0)], axis=-1) * 255.0


def rgb_to_hsl(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Convert one sRGB color to (h, s, l)."""
    h, s, l = rgb_to_hsl_array([r, g, b])
    return float(h), float(s), float(l)


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[float, float, float]:
    """Convert one HSL color to unrounded (r, g, b) in [0, 255]."""
    r, g, b = hsl_to_rgb_array([h, s, l])
    return float(r), float(g), float(b)


def hsl_to_rgb8(h: float, s: float, l: float) -> tuple[int, int, int]:
    """Convert one HSL color to rounded, clamped 8-bit (r, g, b)."""
    rgb = np.clip(np.rint(hsl_to_rgb_array([h, s, l])), 0, 255).astype(int)
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def hue_distance(h1: ArrayLike, h2: ArrayLike) -> NDArray[np.float64] | float:
    """Shortest angular distance between hues, in degrees [0, 180]."""
    d = np.mod(np.abs(np.asarray(h1, dtype=np.float64) - h2), 360.0)
    result = np.minimum(d, 360.0 - d)
    if np.ndim(result) == 0:
        return float(result)
    return result


def signed_hue_delta(from_hue: float, to_hue: float) -> float:
    """Signed shortest rotation from one hue to another, in (-180, 180]."""
    delta = (to_hue - from_hue) % 360.0
    return delta - 360.0 if delta > 180.0 else delta


# =============================================================================
# Hex helpers
# =============================================================================


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """
    Convert 8-bit RGB to a hex color string.

    Returns:
        Hex string like "#3941C8"
    """
    r, g, b = (int(np.clip(round(v), 0, 255)) for v in (r, g, b))
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """
    Parse a hex color string.

    Args:
        hex_color: Hex string like "#3941C8", "3941C8" or "#FFF"
    """
    value = hex_color.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError as e:
        raise ValueError(f"Invalid hex color: {hex_color!r}") from e


# =============================================================================
# ΔE Distance (Perceptual Color Difference)
# =============================================================================


def lab_distance(lab1: ArrayLike, lab2: ArrayLike) -> float:
    """
    Euclidean distance between two L*a*b* colors (CIE76 ΔE).

    Reference thresholds (0-100 scale):
    - ΔE ≈ 2.3: just noticeable difference
    - ΔE ≈ 10: clearly different at a glance
    - ΔE ≈ 15+: different colors
    """
    delta = np.asarray(lab1, dtype=np.float64) - np.asarray(lab2, dtype=np.float64)
    return float(np.sqrt(np.sum(delta ** 2)))


def lab_distance_batch(
    labs1: NDArray[np.float64],
    labs2: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Vectorized ΔE for broadcastable arrays of Lab colors.

    Returns:
        Array of distances over the leading dimensions
    """
    delta = np.asarray(labs1, dtype=np.float64) - np.asarray(labs2, dtype=np.float64)
    return np.sqrt(np.sum(delta ** 2, axis=-1))
