# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Approximate dichromacy simulation.

Applies a fixed 3×3 mixing matrix to gamma-encoded RGB. These are the
lightweight preview matrices used by the viewer UI, not a physiological
model (see Brettel / Viénot / Machado for that).
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

import numpy as np
from numpy.typing import NDArray


class SimulationMode(Enum):
    NONE = "none"
    PROTAN = "protan"
    DEUTAN = "deutan"
    TRITAN = "tritan"


_MATRICES = {
    SimulationMode.PROTAN: np.array([
        [0.566, 0.433, 0.0],
        [0.558, 0.442, 0.0],
        [0.0, 0.242, 0.758],
    ], dtype=np.float64),
    SimulationMode.DEUTAN: np.array([
        [0.625, 0.375, 0.0],
        [0.7, 0.3, 0.0],
        [0.0, 0.3, 0.7],
    ], dtype=np.float64),
    SimulationMode.TRITAN: np.array([
        [0.95, 0.05, 0.0],
        [0.0, 0.433, 0.567],
        [0.0, 0.475, 0.525],
    ], dtype=np.float64),
}


def simulate(
    pixels: NDArray[np.uint8],
    mode: SimulationMode | str = SimulationMode.NONE,
) -> NDArray[np.uint8]:
    """
    Simulate a color-vision deficiency on an image.

    Args:
        pixels: Array of shape (..., 3) RGB or (..., 4) RGBA, uint8
        mode: Deficiency to simulate

    Returns:
        New uint8 array of the same shape; alpha is passed through
    """
    mode = SimulationMode(mode)
    pixels = np.asarray(pixels)
    out = pixels.astype(np.uint8, copy=True)
    if mode is SimulationMode.NONE:
        return out

    rgb = pixels[..., :3].astype(np.float64)
    mixed = np.einsum('...j,ij->...i', rgb, _MATRICES[mode])
    out[..., :3] = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)
    return out


def simulate_color(
    rgb: Sequence[int],
    mode: SimulationMode | str = SimulationMode.NONE,
) -> tuple[int, int, int]:
    """simulate() for a single color."""
    r, g, b = simulate(np.array(rgb, dtype=np.uint8), mode)
    return int(r), int(g), int(b)
