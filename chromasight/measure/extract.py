# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Main palette extraction API.

This is the primary entry point for Chromasight's measurement core.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from chromasight.schema import Palette
from chromasight.measure.consolidation import apply_ratio_floor, merge_similar_swatches
from chromasight.measure.names import ColorNameTable, resolve_names
from chromasight.measure.palette import (
    ExtractionConfig,
    build_swatches,
    kmeans,
    sample_pixels,
)


logger = logging.getLogger(__name__)

ImageInput = Union[str, Path, NDArray[np.uint8], bytes, bytearray, Sequence[int]]


def extract_palette(
    image: ImageInput,
    k: int = 5,
    *,
    width: Optional[int] = None,
    height: Optional[int] = None,
    config: Optional[ExtractionConfig] = None,
    seed: Optional[int] = None,
    names: Union[ColorNameTable, Iterable[tuple[str, str]], None] = None,
) -> Palette:
    """
    Extract a palette of k dominant colors from an image.

    Steps: downsample → sample → k-means → tally → swatches → merge →
    sort/floor.

    Args:
        image: One of:
            - NumPy array of shape (H, W, 4) RGBA or (H, W, 3) RGB, uint8
            - Flat RGBA byte buffer (bytes or int sequence) with width/height
            - Path to an image file, decoded with Pillow
        k: Requested number of colors (the palette may be shorter)
        width: Width of a flat buffer (ignored for arrays and paths)
        height: Height of a flat buffer (ignored for arrays and paths)
        config: Extraction settings (uses defaults if None)
        seed: Seed for centroid initialization. None draws fresh entropy,
            so results vary between runs.
        names: Color-name table or (name, hex) pairs. None uses the
            packaged table when config.name_lookup is set.

    Returns:
        Palette sorted by ratio descending. Empty if no pixel survives
        sampling (e.g. a fully transparent image).

    Example:
        >>> from chromasight import extract_palette
        >>> palette = extract_palette("photo.png", k=5, seed=7)
        >>> palette[0].hex, round(palette[0].ratio, 2)
        ('#3A5F8C', 0.41)
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")

    cfg = config or ExtractionConfig()

    rgba = _load_image(image, width=width, height=height)
    rgba = _downsample(rgba, cfg.max_dimension)

    samples = sample_pixels(rgba, cfg)
    if len(samples) == 0:
        logger.debug("No pixels survived sampling; returning empty palette")
        return Palette(swatches=(), k=k, total_samples=0)

    table = resolve_names(names, use_default=cfg.name_lookup)

    rng = np.random.default_rng(seed)
    centroids, labels = kmeans(
        samples,
        k=k,
        iterations=cfg.iterations,
        init=cfg.init,
        rng=rng,
    )
    swatches = build_swatches(centroids, labels, names=table)

    if cfg.merge:
        swatches = merge_similar_swatches(swatches, cfg.merge_threshold, names=table)

    swatches = apply_ratio_floor(swatches, cfg.min_ratio)

    logger.debug("Extracted %d swatches from %d samples", len(swatches), len(samples))
    return Palette(swatches=tuple(swatches), k=k, total_samples=len(samples))


def _load_image(
    image: ImageInput,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> NDArray[np.uint8]:
    """
    Load image from file, array, or flat buffer.

    Returns:
        RGBA pixels with shape (H, W, 4)
    """
    if isinstance(image, (str, Path)):
        with Image.open(image) as img:
            return np.array(img.convert("RGBA"), dtype=np.uint8)

    if isinstance(image, np.ndarray):
        pixels = image

        if pixels.ndim == 1:
            return _from_flat(pixels, width, height)

        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError(
                f"Expected (H, W, 3) or (H, W, 4) array, got shape {pixels.shape}"
            )

        if pixels.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 array, got {pixels.dtype}"
            )

        if pixels.shape[2] == 3:
            alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels, alpha], axis=2)

        return pixels

    if isinstance(image, (bytes, bytearray)):
        return _from_flat(np.frombuffer(bytes(image), dtype=np.uint8), width, height)

    if isinstance(image, (list, tuple)):
        return _from_flat(np.asarray(image), width, height)

    raise TypeError(
        f"Expected file path, numpy array, or RGBA buffer, got {type(image)}"
    )


def _from_flat(
    buffer: NDArray,
    width: Optional[int],
    height: Optional[int],
) -> NDArray[np.uint8]:
    """Reshape a flat width × height × 4 RGBA buffer."""
    if width is None or height is None:
        raise ValueError("width and height are required for a flat RGBA buffer")
    if buffer.size != width * height * 4:
        raise ValueError(
            f"Buffer has {buffer.size} values, expected {width}x{height}x4"
        )
    if buffer.size and (buffer.min() < 0 or buffer.max() > 255):
        raise ValueError("RGBA buffer values must be 0-255")
    return buffer.astype(np.uint8).reshape(height, width, 4)


def _downsample(
    rgba: NDArray[np.uint8],
    max_dimension: int,
) -> NDArray[np.uint8]:
    """Shrink so the longer side is at most max_dimension (Lanczos)."""
    h, w = rgba.shape[:2]
    longest = max(h, w)
    if longest <= max_dimension:
        return rgba

    scale = max_dimension / longest
    new_width = max(1, round(w * scale))
    new_height = max(1, round(h * scale))
    logger.debug("Downsampling %dx%d -> %dx%d", w, h, new_width, new_height)

    img = Image.fromarray(rgba)
    img = img.resize((new_width, new_height), Image.Resampling.LANCZOS)
    return np.array(img, dtype=np.uint8)
