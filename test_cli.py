"""Tests for the command line entry point."""

import json
import runpy
import sys

import pytest

from roofgrid.cli import main
from roofgrid.io.persistence import load_store


def _write_polygon(path, ring):
    feature = {
        "type": "Feature",
        "properties": {},
        "geometry": {"type": "Polygon", "coordinates": [[list(p) for p in ring]]},
    }
    path.write_text(json.dumps({"type": "FeatureCollection", "features": [feature]}), encoding="utf-8")


def test_layout_summary_and_outputs(tmp_path, capsys, square_10m):
    src = tmp_path / "roof.geojson"
    out = tmp_path / "layout.geojson"
    state = tmp_path / "state.json"
    _write_polygon(src, square_10m)

    assert main([str(src), "--out", str(out), "--save", str(state)]) == 0

    text = capsys.readouterr().out
    assert "Panels:        50" in text
    assert out.exists()
    store = load_store(state)
    assert store.regions[0].panel_count == 50


def test_rotation_option(tmp_path, square_10m):
    src = tmp_path / "roof.geojson"
    state = tmp_path / "state.json"
    _write_polygon(src, square_10m)
    assert main([str(src), "--rotation", "45", "--save", str(state)]) == 0
    assert load_store(state).regions[0].rotation == 45.0


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.geojson")]) == 1
    assert "error" in capsys.readouterr().err


def test_load_saved_store_adds_region(tmp_path, capsys, square_10m, l_shape):
    first = tmp_path / "first.geojson"
    second = tmp_path / "second.geojson"
    state = tmp_path / "state.json"
    _write_polygon(first, square_10m)
    _write_polygon(second, l_shape)
    assert main([str(first), "--save", str(state)]) == 0

    assert main([str(second), "--load", str(state), "--save", str(state)]) == 0
    store = load_store(state)
    assert [r.id for r in store.regions] == [1, 2]
    ids = [p.id for r in store.regions for p in r.panels]
    assert len(ids) == len(set(ids))


def test_load_bad_store(tmp_path, capsys, square_10m):
    src = tmp_path / "roof.geojson"
    state = tmp_path / "state.json"
    _write_polygon(src, square_10m)
    state.write_text(json.dumps({"version": 99}), encoding="utf-8")
    assert main([str(src), "--load", str(state)]) == 1
    assert "error:" in capsys.readouterr().err


def test_run_as_module(tmp_path, capsys, monkeypatch, square_10m):
    src = tmp_path / "roof.geojson"
    _write_polygon(src, square_10m)
    monkeypatch.setattr(sys, "argv", ["roofgrid", str(src)])
    with pytest.raises(SystemExit) as exc:
        runpy.run_module("roofgrid", run_name="__main__")
    assert exc.value.code == 0
    assert "Panels:        50" in capsys.readouterr().out
