# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""Tests for nearest color-name lookup."""

import json

import pytest

from chromasight.measure.names import ColorNameTable, load_default_names, resolve_names


class TestColorNameTable:

    def test_nearest(self):
        table = ColorNameTable([("red", "#FF0000"), ("green", "#00FF00"), ("blue", "#0000FF")])
        assert table.nearest((250, 10, 10)) == "red"
        assert table.nearest((10, 10, 240)) == "blue"
        assert len(table) == 3

    def test_empty_table(self):
        assert ColorNameTable([]).nearest((1, 2, 3)) is None

    def test_from_json(self, tmp_path):
        path = tmp_path / "names.json"
        path.write_text(json.dumps([
            {"name": "ink", "hex": "#101030"},
            {"english": "paper", "code": "#FAFAF0"},
        ]))
        table = ColorNameTable.from_json(path)
        assert table.names == ("ink", "paper")
        assert table.nearest((250, 250, 250)) == "paper"

    def test_from_json_rejects_incomplete_entry(self, tmp_path):
        path = tmp_path / "names.json"
        path.write_text(json.dumps([{"name": "ink", "hex": "#101030"}, {"label": "x"}]))
        with pytest.raises(ValueError, match="label"):
            ColorNameTable.from_json(path)


class TestDefaultNames:

    def test_packaged_table(self):
        table = load_default_names()
        assert len(table) == 949
        assert {"red", "cloudy blue", "macaroni and cheese"} <= set(table.names)
        assert table.nearest((0, 0, 0)) == "black"
        assert table.nearest((255, 255, 255)) == "white"

    @pytest.mark.parametrize("rgb, name", [
        ((126, 30, 156), "purple"),
        ((5, 4, 170), "royal blue"),
        ((173, 129, 80), "light brown"),
        ((172, 194, 217), "cloudy blue"),
    ])
    def test_survey_colors_name_themselves(self, rgb, name):
        assert load_default_names().nearest(rgb) == name

    def test_loaded_once(self):
        assert load_default_names() is load_default_names()


class TestResolveNames:

    def test_passthrough(self):
        table = ColorNameTable([("x", "#000000")])
        assert resolve_names(table) is table

    def test_pairs(self):
        assert resolve_names([("x", "#000000")]).names == ("x",)

    def test_default_and_disabled(self):
        assert resolve_names(None) is load_default_names()
        assert resolve_names(None, use_default=False) is None
