# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Nearest color-name lookup.

Names come from a fixed reference table (XKCD color survey names by
default). The nearest entry is chosen by L*a*b* Euclidean distance.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from chromasight.measure.colorspace import hex_to_rgb, lab_distance_batch, rgb_to_lab


_DEFAULT_TABLE = Path(__file__).parent / "data" / "color_names.json"


class ColorNameTable:
    """
    Reference table of named colors with precomputed Lab values.

    Args:
        entries: (name, hex) pairs
    """

    def __init__(self, entries: Iterable[tuple[str, str]]) -> None:
        entries = list(entries)
        self._names: tuple[str, ...] = tuple(name for name, _ in entries)
        rgb = np.array(
            [hex_to_rgb(code) for _, code in entries], dtype=np.float64
        ).reshape(-1, 3)
        self._lab: NDArray[np.float64] = rgb_to_lab(rgb)

    def __len__(self) -> int:
        return len(self._names)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def nearest(self, rgb: Sequence[float]) -> Optional[str]:
        """
        Name of the table entry closest to rgb.

        Returns:
            The name, or None if the table is empty
        """
        if not self._names:
            return None
        distances = lab_distance_batch(self._lab, rgb_to_lab(rgb))
        return self._names[int(np.argmin(distances))]

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> ColorNameTable:
        """
        Load a table from a JSON list.

        Each item is {"name": ..., "hex": ...}. The XKCD export keys
        {"english": ..., "code": ...} are accepted as well.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        entries = []
        for item in data:
            name = item.get("name", item.get("english")) if isinstance(item, dict) else None
            code = item.get("hex", item.get("code")) if isinstance(item, dict) else None
            if not isinstance(name, str) or not isinstance(code, str):
                raise ValueError(f"Color name entry needs a name and a hex code, got {item!r}")
            entries.append((name, code))
        return cls(entries)


@lru_cache(maxsize=1)
def load_default_names() -> ColorNameTable:
    """The packaged reference table (loaded once)."""
    return ColorNameTable.from_json(_DEFAULT_TABLE)


def resolve_names(
    names: Union[ColorNameTable, Iterable[tuple[str, str]], None],
    use_default: bool = True,
) -> Optional[ColorNameTable]:
    """Normalize a names argument to a table (or None when lookup is off)."""
    if isinstance(names, ColorNameTable):
        return names
    if names is not None:
        return ColorNameTable(names)
    return load_default_names() if use_default else None
