# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Measurement core for Chromasight.

This module provides palette extraction from decoded images.
All operations are pixel-based and stateless apart from an explicit RNG.
"""

from chromasight.measure.extract import extract_palette
from chromasight.measure.palette import ExtractionConfig

__all__ = ["extract_palette", "ExtractionConfig"]
