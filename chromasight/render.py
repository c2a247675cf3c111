# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Frame rendering for palette inspection.

render_frame() is a pure function of the image and the viewer's choices:
which swatch is highlighted, which simulation or personal filter is on,
and whether cluster outlines are drawn. It never keeps state between
calls.

Order of operations:
1. Cluster map from the unfiltered pixels (nearest swatch in Lab)
2. Deficiency simulation
3. Personal compensation filter
4. Gray-out of pixels outside the selected swatch
5. Black outline where the 8-neighborhood crosses a cluster boundary
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from chromasight.schema import CVDProfile, Palette
from chromasight.measure.colorspace import lab_distance_batch, rgb_to_lab
from chromasight.cvd.compensation import CompensationConfig, compensate_image
from chromasight.cvd.simulation import SimulationMode, simulate


# Rec. 709 luma weights
_LUMA = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)

_NEIGHBORS = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]


def cluster_map(
    pixels: NDArray[np.uint8],
    palette: Palette,
) -> NDArray[np.int64]:
    """
    Index of the nearest palette swatch (Lab ΔE) for every pixel.

    Args:
        pixels: Array of shape (H, W, 3) or (H, W, 4), uint8
        palette: Non-empty palette

    Returns:
        (H, W) array of swatch indices
    """
    if palette.is_empty:
        raise ValueError("Cannot build a cluster map from an empty palette")

    h, w = pixels.shape[:2]
    pixel_lab = rgb_to_lab(pixels[..., :3].reshape(-1, 3))
    swatch_lab = rgb_to_lab(np.array([s.rgb for s in palette], dtype=np.float64))

    dists = lab_distance_batch(
        pixel_lab[:, np.newaxis, :], swatch_lab[np.newaxis, :, :]
    )
    return np.argmin(dists, axis=1).reshape(h, w)


def outline_mask(clusters: NDArray[np.int64]) -> NDArray[np.bool_]:
    """Interior pixels with at least one 8-neighbor in another cluster."""
    h, w = clusters.shape
    mask = np.zeros((h, w), dtype=bool)
    if h < 3 or w < 3:
        return mask

    center = clusters[1:-1, 1:-1]
    edge = np.zeros_like(center, dtype=bool)
    for dy, dx in _NEIGHBORS:
        edge |= clusters[1 + dy:h - 1 + dy, 1 + dx:w - 1 + dx] != center
    mask[1:-1, 1:-1] = edge
    return mask


def render_frame(
    image: NDArray[np.uint8],
    palette: Palette,
    *,
    selected: Optional[int] = None,
    simulation: SimulationMode | str = SimulationMode.NONE,
    profile: Optional[CVDProfile] = None,
    outline: bool = False,
    compensation_config: Optional[CompensationConfig] = None,
    outline_color: tuple[int, int, int] = (0, 0, 0),
) -> NDArray[np.uint8]:
    """
    Render an image with the viewer's current palette inspection settings.

    Args:
        image: Array of shape (H, W, 3) or (H, W, 4), uint8
        palette: Palette extracted from the image
        selected: Swatch index to highlight; other clusters turn gray
        simulation: Deficiency simulation to apply
        profile: If given, apply the personal compensation filter
        outline: Draw cluster boundaries
        compensation_config: Settings for the compensation filter
        outline_color: RGB used for boundaries

    Returns:
        New (H, W, 3) uint8 RGB array
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected (H, W, 3) or (H, W, 4) array, got shape {image.shape}")
    if selected is not None and not 0 <= selected < len(palette):
        raise ValueError(f"selected must index the palette (0-{len(palette) - 1}), got {selected}")

    rgb = image[..., :3].astype(np.uint8)
    needs_clusters = not palette.is_empty and (selected is not None or outline)
    clusters = cluster_map(rgb, palette) if needs_clusters else None

    frame = simulate(rgb, simulation)

    if profile is not None:
        frame = compensate_image(frame, profile, compensation_config)

    if clusters is not None and selected is not None:
        others = clusters != selected
        gray = np.rint(frame[others].astype(np.float64) @ _LUMA)
        frame[others] = np.clip(gray, 0, 255).astype(np.uint8)[:, np.newaxis]

    if clusters is not None and outline:
        frame[outline_mask(clusters)] = outline_color

    return frame
