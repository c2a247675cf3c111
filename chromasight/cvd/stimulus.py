# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Pseudoisochromatic plate stimuli.

A plate is a field of randomly placed dots. Dots whose center falls
inside a shape mask take the figure color, the rest take the ground
color. Dot positions and radii are drawn independently of the mask, so
only the hue difference reveals the shape.

Masks are plain callables on normalized coordinates: (x, y) in [0, 1]
→ bool. DigitMask renders digits from seven rectangular segments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageDraw

from chromasight.schema import ConfusionPair


PLATE_BACKGROUND = (245, 245, 245)

RGB = tuple[int, int, int]


class ShapeMask(Protocol):
    """Anything that answers whether a normalized point is inside the figure."""

    def __call__(self, x: float, y: float) -> bool: ...


# =============================================================================
# Masks
# =============================================================================

# Segment rectangles as (x0, x1, y0, y1) in units of the glyph size,
# relative to the glyph center. Letters follow seven-segment naming.
_SEGMENTS = {
    "a": (-1.0, 1.0, -1.1, -0.8),   # top
    "b": (0.6, 1.0, -1.1, -0.1),    # upper right
    "c": (0.6, 1.0, 0.1, 1.1),      # lower right
    "d": (-1.0, 1.0, 0.8, 1.1),     # bottom
    "e": (-1.0, -0.6, 0.1, 1.1),    # lower left
    "f": (-1.0, -0.6, -1.1, -0.1),  # upper left
    "g": (-1.0, 1.0, -0.15, 0.15),  # middle
}

_DIGIT_SEGMENTS = {
    "0": "abcdef",
    "1": "bc",
    "2": "abged",
    "3": "abgcd",
    "4": "fgbc",
    "5": "afgcd",
    "6": "afgedc",
    "7": "abc",
    "8": "abcdefg",
    "9": "abcdfg",
}


@dataclass(frozen=True)
class DigitMask:
    """
    A single digit drawn with seven rectangular segments.

    Attributes:
        digit: "0"-"9"
        center: Glyph center in normalized coordinates
        size: Half-width of the glyph in normalized units
    """
    digit: str = "5"
    center: tuple[float, float] = (0.5, 0.5)
    size: float = 0.22

    def __post_init__(self) -> None:
        if self.digit not in _DIGIT_SEGMENTS:
            raise ValueError(f"digit must be 0-9, got {self.digit!r}")

    def __call__(self, x: float, y: float) -> bool:
        cx, cy = self.center
        u = (x - cx) / self.size
        v = (y - cy) / self.size
        for seg in _DIGIT_SEGMENTS[self.digit]:
            x0, x1, y0, y1 = _SEGMENTS[seg]
            if x0 < u < x1 and y0 < v < y1:
                return True
        return False


@dataclass(frozen=True)
class CircleMask:
    """A filled disc."""
    center: tuple[float, float] = (0.5, 0.5)
    radius: float = 0.25

    def __call__(self, x: float, y: float) -> bool:
        cx, cy = self.center
        return (x - cx) ** 2 + (y - cy) ** 2 < self.radius ** 2


def mask_to_array(mask: ShapeMask, size: int) -> NDArray[np.bool_]:
    """Sample a mask at pixel centers of a size × size grid."""
    coords = (np.arange(size) + 0.5) / size
    return np.array([[mask(x, y) for x in coords] for y in coords], dtype=bool)


# =============================================================================
# Dots
# =============================================================================


@dataclass(frozen=True, slots=True)
class Dot:
    x: float
    y: float
    r: float


def generate_dots(
    width: int,
    height: int,
    count: int,
    rng: Optional[np.random.Generator] = None,
    min_radius: float = 2.0,
    max_radius: float = 4.5,
) -> tuple[Dot, ...]:
    """Uniformly scattered dots with uniformly random radii."""
    rng = rng if rng is not None else np.random.default_rng()
    xs = rng.uniform(0, width, count)
    ys = rng.uniform(0, height, count)
    rs = rng.uniform(min_radius, max_radius, count)
    return tuple(Dot(float(x), float(y), float(r)) for x, y, r in zip(xs, ys, rs))


# =============================================================================
# Rendering
# =============================================================================


def render_plate(
    figure: RGB,
    ground: RGB,
    mask: ShapeMask,
    size: int = 300,
    dots: Optional[Sequence[Dot]] = None,
    rng: Optional[np.random.Generator] = None,
    dot_count: int = 2500,
    background: RGB = PLATE_BACKGROUND,
) -> Image.Image:
    """
    Draw a plate as a Pillow image.

    Args:
        figure: RGB for dots inside the mask
        ground: RGB for dots outside the mask
        mask: Shape mask on normalized coordinates
        size: Canvas side in pixels
        dots: Pre-generated dots (reuse to keep a layout stable while
            colors change); generated from rng when None
        rng: Random generator for dot layout
        dot_count: Number of dots when generating
        background: Canvas color behind the dots
    """
    if dots is None:
        dots = generate_dots(size, size, dot_count, rng)

    img = Image.new("RGB", (size, size), tuple(background))
    draw = ImageDraw.Draw(img)

    for dot in dots:
        color = figure if mask(dot.x / size, dot.y / size) else ground
        draw.ellipse(
            [dot.x - dot.r, dot.y - dot.r, dot.x + dot.r, dot.y + dot.r],
            fill=tuple(int(c) for c in color),
        )

    return img


def plate_array(*args, **kwargs) -> NDArray[np.uint8]:
    """render_plate as an (H, W, 3) uint8 array."""
    return np.asarray(render_plate(*args, **kwargs), dtype=np.uint8)


@dataclass(frozen=True)
class Stimulus:
    """
    One plate to show: a hue pair, an optional offset, and which color is ground.

    Grid tiles use hue_a as ground and hue_b as figure. The width stage
    lets the viewer toggle the ground color; the figure is always the other.
    """
    pair: ConfusionPair
    offset: float = 0.0
    show_color_a: bool = True

    @property
    def shown_pair(self) -> ConfusionPair:
        return self.pair.shifted(self.offset) if self.offset else self.pair

    @property
    def ground(self) -> RGB:
        shown = self.shown_pair
        return shown.color_a if self.show_color_a else shown.color_b

    @property
    def figure(self) -> RGB:
        shown = self.shown_pair
        return shown.color_b if self.show_color_a else shown.color_a

    def render(
        self,
        mask: ShapeMask,
        size: int = 300,
        dots: Optional[Sequence[Dot]] = None,
        rng: Optional[np.random.Generator] = None,
        dot_count: int = 2500,
    ) -> Image.Image:
        return render_plate(
            self.figure, self.ground, mask,
            size=size, dots=dots, rng=rng, dot_count=dot_count,
        )
