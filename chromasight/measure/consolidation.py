# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Swatch consolidation layer.

Post-clustering processing that merges near-duplicate clusters and drops
noise-level swatches. k-means sometimes splits one visual color into two
centroids a few ΔE apart; merging collapses them back.

This is applied AFTER clustering, BEFORE the Palette is built.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from chromasight.schema import Swatch
from chromasight.measure.colorspace import lab_distance_batch, rgb_to_lab
from chromasight.measure.names import ColorNameTable


logger = logging.getLogger(__name__)


def _merge_pair(a: Swatch, b: Swatch, names: Optional[ColorNameTable]) -> Swatch:
    """Population-weighted RGB average of two swatches, ratios summed."""
    population = a.population + b.population
    if population > 0:
        weights = np.array([a.population, b.population]) / population
    else:
        weights = np.array([0.5, 0.5])
    mean = weights @ np.array([a.rgb, b.rgb], dtype=np.float64)
    r, g, b_ = (int(v) for v in np.clip(np.rint(mean), 0, 255))
    return Swatch(
        rgb=(r, g, b_),
        population=population,
        ratio=min(1.0, a.ratio + b.ratio),
        name=names.nearest((r, g, b_)) if names is not None else None,
    )


def merge_similar_swatches(
    swatches: Sequence[Swatch],
    threshold: float = 15.0,
    names: Optional[ColorNameTable] = None,
) -> list[Swatch]:
    """
    Merge swatches closer than threshold in Lab space.

    The closest pair is merged first, then distances are recomputed; this
    repeats until no pair is below the threshold.

    Args:
        swatches: Input swatches (any order)
        threshold: Lab ΔE below which two swatches merge
        names: Table used to rename merged swatches

    Returns:
        Merged swatches sorted by ratio descending
    """
    result = list(swatches)

    while len(result) > 1:
        labs = rgb_to_lab(np.array([s.rgb for s in result], dtype=np.float64))
        dists = lab_distance_batch(labs[:, np.newaxis, :], labs[np.newaxis, :, :])
        np.fill_diagonal(dists, np.inf)

        i, j = np.unravel_index(np.argmin(dists), dists.shape)
        if dists[i, j] >= threshold:
            break

        i, j = sorted((int(i), int(j)))
        logger.debug(
            "Merging %s and %s (ΔE %.2f)", result[i].hex, result[j].hex, dists[i, j]
        )
        merged = _merge_pair(result[i], result[j], names)
        del result[j]
        result[i] = merged

    result.sort(key=lambda s: s.ratio, reverse=True)
    return result


def apply_ratio_floor(
    swatches: Sequence[Swatch],
    min_ratio: float,
) -> list[Swatch]:
    """
    Drop swatches below min_ratio and renormalize the rest to sum to 1.0.

    If every swatch is below the floor, the most dominant one is kept.
    """
    if not swatches or min_ratio <= 0:
        return list(swatches)

    ordered = sorted(swatches, key=lambda s: s.ratio, reverse=True)
    kept = [s for s in ordered if s.ratio >= min_ratio] or ordered[:1]

    total = sum(s.ratio for s in kept)
    if total <= 0:
        return kept
    return [
        Swatch(rgb=s.rgb, population=s.population, ratio=s.ratio / total, name=s.name)
        for s in kept
    ]
