# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Palette schema: swatches produced by palette extraction.

Design principles:
- Immutable: All types are frozen dataclasses
- Validated: Out-of-range values raise ValueError at construction
- Serializable: JSON-ready via to_dict / from_dict

A Swatch's rgb is a cluster centroid, not necessarily a pixel that occurs
verbatim in the image. Ratios across one Palette sum to ~1.0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional


# Tolerance for floating point accumulation in ratio sums
_RATIO_EPS = 1e-9


@dataclass(frozen=True, slots=True)
class Swatch:
    """
    One representative color of an extracted palette.

    Attributes:
        rgb: 8-bit sRGB centroid (r, g, b)
        population: Number of sampled pixels assigned to this color
        ratio: Share of sampled pixels (0.0-1.0)
        name: Nearest reference color name, None if no table was used
    """
    rgb: tuple[int, int, int]
    population: float
    ratio: float
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate channel, population and ratio ranges."""
        if len(self.rgb) != 3:
            raise ValueError(f"rgb must have 3 channels, got {self.rgb!r}")
        for channel in self.rgb:
            if not 0 <= channel <= 255:
                raise ValueError(f"RGB channels must be 0-255, got {self.rgb!r}")
        if self.population < 0:
            raise ValueError(f"Population must be >= 0, got {self.population}")
        if not 0.0 <= self.ratio <= 1.0 + _RATIO_EPS:
            raise ValueError(f"Ratio must be 0-1, got {self.ratio}")

    @property
    def hex(self) -> str:
        """Hex string like "#3941C8"."""
        from chromasight.measure.colorspace import rgb_to_hex
        return rgb_to_hex(*self.rgb)

    @property
    def lab(self) -> tuple[float, float, float]:
        """CIE L*a*b* of the centroid."""
        from chromasight.measure.colorspace import rgb_to_lab
        L, a, b = rgb_to_lab(self.rgb)
        return float(L), float(a), float(b)

    @property
    def hsl(self) -> tuple[float, float, float]:
        """HSL of the centroid (h in degrees, s and l in 0-1)."""
        from chromasight.measure.colorspace import rgb_to_hsl
        return rgb_to_hsl(*self.rgb)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "rgb": list(self.rgb),
            "hex": self.hex,
            "population": self.population,
            "ratio": self.ratio,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Swatch:
        """Deserialize from dictionary. Accepts "hex" when "rgb" is absent."""
        if "rgb" in data:
            r, g, b = data["rgb"]
        else:
            from chromasight.measure.colorspace import hex_to_rgb
            r, g, b = hex_to_rgb(data["hex"])
        return cls(
            rgb=(int(r), int(g), int(b)),
            population=float(data.get("population", 0.0)),
            ratio=float(data["ratio"]),
            name=data.get("name"),
        )


@dataclass(frozen=True, slots=True)
class Palette:
    """
    Ordered swatches of an image, most dominant first.

    Attributes:
        swatches: Swatches sorted by ratio descending
        k: Requested cluster count (len(swatches) <= k)
        total_samples: Number of sampled pixels the ratios refer to
    """
    swatches: tuple[Swatch, ...]
    k: int
    total_samples: int = 0

    def __post_init__(self) -> None:
        """Validate size and ordering."""
        if self.k < 1:
            raise ValueError(f"k must be >= 1, got {self.k}")
        if len(self.swatches) > self.k:
            raise ValueError(
                f"Palette has {len(self.swatches)} swatches, more than k={self.k}"
            )
        for prev, cur in zip(self.swatches, self.swatches[1:]):
            if cur.ratio > prev.ratio:
                raise ValueError("Palette swatches must be sorted by ratio descending")

    def __len__(self) -> int:
        return len(self.swatches)

    def __iter__(self) -> Iterator[Swatch]:
        return iter(self.swatches)

    def __getitem__(self, index: int) -> Swatch:
        return self.swatches[index]

    @property
    def is_empty(self) -> bool:
        """True when no pixels survived sampling."""
        return not self.swatches

    @property
    def total_ratio(self) -> float:
        """Sum of swatch ratios (~1.0 for a non-empty palette)."""
        return sum(s.ratio for s in self.swatches)

    @property
    def dominant(self) -> Optional[Swatch]:
        """The most prominent swatch, None for an empty palette."""
        return self.swatches[0] if self.swatches else None

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "k": self.k,
            "total_samples": self.total_samples,
            "swatches": [s.to_dict() for s in self.swatches],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Palette:
        """Deserialize from dictionary."""
        return cls(
            swatches=tuple(Swatch.from_dict(s) for s in data["swatches"]),
            k=data["k"],
            total_samples=data.get("total_samples", 0),
        )
