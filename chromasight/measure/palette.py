# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Palette extraction using k-means clustering in RGB space.

Stages:
1. Sampling: strided pixel sampling with alpha (and optional extreme) filtering
2. Clustering: k-means with k-means++ or random seeding, fixed iteration count
3. Tally: one final nearest-centroid pass gives each cluster's population

Clustering draws from a caller-supplied numpy Generator. Pass a seed to
extract_palette for reproducible output; the default is unseeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from chromasight.schema import Swatch
from chromasight.measure.colorspace import rgb_to_hsl_array
from chromasight.measure.names import ColorNameTable


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionConfig:
    """Configuration for palette extraction."""

    # Longer image side is reduced to this before sampling
    max_dimension: int = 320

    # Target number of sampled pixels (sets the sampling stride)
    sample_budget: int = 40000

    # Pixels with alpha below this are treated as transparent
    alpha_threshold: int = 128

    # Optionally drop near-gray pixels that are also near-black or near-white
    # so a flat background does not dominate the palette
    skip_extremes: bool = False
    extreme_saturation: float = 0.10
    extreme_lightness_low: float = 0.03
    extreme_lightness_high: float = 0.97

    # k-means
    iterations: int = 10
    init: str = "kmeans++"  # or "random"

    # Lab ΔE below which two swatches are merged (0-100 scale)
    merge: bool = True
    merge_threshold: float = 15.0

    # Swatches below this ratio are dropped (0.0 keeps everything)
    min_ratio: float = 0.0

    # Attach nearest reference color names
    name_lookup: bool = True

    def __post_init__(self) -> None:
        if self.init not in ("kmeans++", "random"):
            raise ValueError(f"init must be 'kmeans++' or 'random', got {self.init!r}")
        if self.iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {self.iterations}")
        if self.max_dimension < 1 or self.sample_budget < 1:
            raise ValueError("max_dimension and sample_budget must be >= 1")


def sample_pixels(
    rgba: NDArray[np.uint8],
    config: Optional[ExtractionConfig] = None,
) -> NDArray[np.uint8]:
    """
    Sample opaque pixels from an RGBA image at a fixed stride.

    Args:
        rgba: Array of shape (H, W, 4)
        config: Extraction settings (uses defaults if None)

    Returns:
        Array of shape (N, 3) with the RGB of surviving samples
    """
    cfg = config or ExtractionConfig()

    flat = rgba.reshape(-1, 4)
    step = max(1, len(flat) // cfg.sample_budget)
    sampled = flat[::step]

    opaque = sampled[sampled[:, 3] >= cfg.alpha_threshold, :3]

    if cfg.skip_extremes and len(opaque):
        hsl = rgb_to_hsl_array(opaque)
        s, l = hsl[:, 1], hsl[:, 2]
        extreme = (s < cfg.extreme_saturation) & (
            (l < cfg.extreme_lightness_low) | (l > cfg.extreme_lightness_high)
        )
        opaque = opaque[~extreme]

    logger.debug(
        "Sampled %d of %d pixels (stride %d)", len(opaque), len(flat), step
    )
    return opaque


def _assign(
    data: NDArray[np.float64],
    centroids: NDArray[np.float64],
) -> NDArray[np.int64]:
    """Nearest centroid per sample by squared Euclidean distance."""
    dists = np.sum(
        (data[:, np.newaxis, :] - centroids[np.newaxis, :, :]) ** 2,
        axis=2,
    )
    return np.argmin(dists, axis=1)


def _init_plus_plus(
    data: NDArray[np.float64],
    k: int,
    rng: np.random.Generator,
) -> NDArray[np.float64]:
    """k-means++ seeding: each new centroid drawn with probability ∝ distance²."""
    n, d = data.shape
    centroids = np.empty((k, d), dtype=np.float64)

    # First centroid: random sample
    centroids[0] = data[rng.integers(n)]

    # Remaining centroids: weighted by distance squared
    for i in range(1, k):
        dists_to_centroids = np.sum(
            (data[:, np.newaxis, :] - centroids[np.newaxis, :i, :]) ** 2,
            axis=2,
        )
        dists = np.min(dists_to_centroids, axis=1)

        # Handle case where all distances are zero
        total = dists.sum()
        if total == 0:
            centroids[i] = data[rng.integers(n)]
        else:
            centroids[i] = data[rng.choice(n, p=dists / total)]

    return centroids


def kmeans(
    samples: NDArray[np.uint8],
    k: int,
    iterations: int = 10,
    init: str = "kmeans++",
    rng: Optional[np.random.Generator] = None,
) -> tuple[NDArray[np.float64], NDArray[np.int64]]:
    """
    Vectorized k-means over RGB samples.

    Runs a fixed number of rounds (no convergence early exit). A centroid
    that receives no samples in a round is reseeded from a random sample,
    so k larger than the number of distinct colors never fails.

    Args:
        samples: Array of shape (N, 3), N >= 1
        k: Number of clusters (>= 1)
        iterations: Assignment/update rounds
        init: "kmeans++" or "random"
        rng: Random generator (fresh unseeded generator if None)

    Returns:
        (centroids, labels) where:
        - centroids: (k, 3) float array of cluster means
        - labels: (N,) final assignment of each sample
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    if len(samples) == 0:
        raise ValueError("No samples for clustering")

    rng = rng if rng is not None else np.random.default_rng()
    data = np.asarray(samples, dtype=np.float64)
    n = len(data)

    if init == "kmeans++":
        centroids = _init_plus_plus(data, k, rng)
    else:
        centroids = data[rng.integers(n, size=k)].copy()

    for _ in range(iterations):
        labels = _assign(data, centroids)

        # Update centroids
        for j in range(k):
            mask = labels == j
            if np.any(mask):
                centroids[j] = data[mask].mean(axis=0)
            else:
                centroids[j] = data[rng.integers(n)]
                logger.debug("Reseeded empty cluster %d", j)

    # Final tally against the last centroids
    labels = _assign(data, centroids)
    return centroids, labels


def build_swatches(
    centroids: NDArray[np.float64],
    labels: NDArray[np.int64],
    names: Optional[ColorNameTable] = None,
) -> list[Swatch]:
    """
    Turn cluster results into swatches, most populated first.

    Clusters that end up with no samples are dropped. Ratios are
    population / number of samples.
    """
    total = len(labels)
    counts = np.bincount(labels, minlength=len(centroids))

    swatches = []
    for centroid, count in zip(centroids, counts):
        if count == 0:
            continue
        r, g, b = (int(v) for v in np.clip(np.rint(centroid), 0, 255))
        swatches.append(Swatch(
            rgb=(r, g, b),
            population=float(count),
            ratio=float(count) / total,
            name=names.nearest((r, g, b)) if names is not None else None,
        ))

    # Sort by ratio descending
    swatches.sort(key=lambda s: s.ratio, reverse=True)
    return swatches
