# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""Tests for hue-pair grid generation and pagination."""

import pytest

from chromasight.schema import ConfusionPair
from chromasight.cvd.pairs import generate_pairs, page_count, paginate
from chromasight.measure.colorspace import hue_distance


class TestFullCircle:

    def test_coarse_grid_count(self):
        """12 hues, each with 9 partners at >= 60°, counted once per pair."""
        assert len(generate_pairs(30)) == 54

    def test_no_symmetric_duplicates(self):
        pairs = generate_pairs(30)
        assert len(set(pairs)) == len(pairs)

    def test_separation_bounds(self):
        for pair in generate_pairs(30):
            assert 60 <= pair.separation <= 180

    def test_stimulus_fields(self):
        pairs = generate_pairs(30, saturation=0.6, lightness=0.4)
        assert all(p.saturation == 0.6 and p.lightness == 0.4 for p in pairs)

    def test_grid_order(self):
        pairs = generate_pairs(30)
        assert (pairs[0].hue_a, pairs[0].hue_b) == (0, 60)

    def test_max_separation(self):
        pairs = generate_pairs(30, max_separation=90)
        assert pairs
        assert all(p.separation <= 90 for p in pairs)

    def test_invalid_step(self):
        with pytest.raises(ValueError):
            generate_pairs(0)


class TestWindowed:

    def test_window_bounds(self):
        pairs = generate_pairs(15, center_a=30, center_b=150, window=90)
        assert pairs
        for p in pairs:
            assert hue_distance(p.hue_a, 30) <= 45
            assert hue_distance(p.hue_b, 150) <= 45

    def test_window_includes_both_ends(self):
        pairs = generate_pairs(15, center_a=30, center_b=150, window=90)
        hues_a = {p.hue_a for p in pairs}
        assert 345.0 in hues_a
        assert 75.0 in hues_a

    def test_window_wraps_zero(self):
        pairs = generate_pairs(5, center_a=0, center_b=120, window=30)
        hues_a = {p.hue_a for p in pairs}
        assert hues_a == {345.0, 350.0, 355.0, 0.0, 5.0, 10.0, 15.0}
        assert all(0 <= p.hue_a < 360 for p in pairs)

    def test_previous_pick_offered_again(self):
        pairs = generate_pairs(5, center_a=40, center_b=115, window=30)
        assert ConfusionPair(40, 115) in pairs

    def test_fine_grid_size(self):
        # 7 x 7 candidates minus the six closer than 60°
        assert len(generate_pairs(5, center_a=40, center_b=115, window=30)) == 43


class TestPagination:

    def test_pages(self):
        items = generate_pairs(30)
        assert page_count(len(items), 4) == 14
        assert paginate(items, 0, 4) == items[:4]
        assert len(paginate(items, 13, 4)) == 2
        assert paginate(items, 14, 4) == []

    def test_empty_has_one_page(self):
        assert page_count(0, 4) == 1
