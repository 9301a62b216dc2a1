"""Tests for JSON persistence of regions and stores."""

import json

import pytest

from roofgrid.config import LayoutConfig
from roofgrid.io.persistence import (
    load_store,
    panel_from_dict,
    region_from_dict,
    region_to_dict,
    save_store,
    store_from_dict,
    store_to_dict,
)
from roofgrid.layout.obstruction import toggle_obstruction
from roofgrid.layout.store import RegionStore, create_region, get_region, set_rotation


@pytest.fixture
def populated(square_10m, l_shape):
    store = RegionStore.empty(LayoutConfig(spacing_m=0.1, module_power_kw=0.45))
    store, first = create_region(store, square_10m)
    store, _ = create_region(store, l_shape)
    store = set_rotation(store, 2, 33.0)
    store = toggle_obstruction(store, 1, first.panels[4].id)
    return store


class TestRoundTrip:
    def test_store_round_trip_is_lossless(self, populated):
        assert store_from_dict(store_to_dict(populated)) == populated

    def test_through_json_text(self, populated):
        text = json.dumps(store_to_dict(populated))
        assert store_from_dict(json.loads(text)) == populated

    def test_file_round_trip(self, populated, tmp_path):
        path = tmp_path / "nested" / "layout.json"
        save_store(populated, path)
        assert load_store(path) == populated

    def test_region_round_trip(self, populated):
        region = get_region(populated, 1)
        data = region_to_dict(region)
        assert data["obstructed_panel_ids"] == [region.panels[4].id]
        assert region_from_dict(data) == region

    def test_restored_store_keeps_counting(self, populated, triangle):
        restored = store_from_dict(store_to_dict(populated))
        _, region = create_region(restored, triangle)
        assert region.id == 3


class TestRegionFromDict:
    def test_obstructed_ids_override_flags(self, populated):
        region = get_region(populated, 1)
        data = region_to_dict(region)
        data["obstructed_panel_ids"] = [region.panels[0].id]
        restored = region_from_dict(data)
        assert [p.id for p in restored.panels if p.obstructed] == [region.panels[0].id]

    def test_flags_used_without_id_list(self, populated):
        data = region_to_dict(get_region(populated, 1))
        del data["obstructed_panel_ids"]
        assert region_from_dict(data) == get_region(populated, 1)

    def test_bad_rotation(self, populated):
        data = region_to_dict(get_region(populated, 1))
        data["rotation"] = "nan"
        with pytest.raises(ValueError):
            region_from_dict(data)

    def test_bad_panel(self, populated):
        data = region_to_dict(get_region(populated, 1))
        data["panels"][0]["corners"] = data["panels"][0]["corners"][:3]
        with pytest.raises(ValueError):
            region_from_dict(data)

    def test_missing_polygon(self):
        with pytest.raises(ValueError):
            region_from_dict({"id": 1})


class TestStoreFromDict:
    def test_unknown_version(self, populated):
        data = store_to_dict(populated)
        data["version"] = 99
        with pytest.raises(ValueError):
            store_from_dict(data)

    def test_dangling_selection_cleared(self, populated):
        data = store_to_dict(populated)
        data["selected_region_id"] = 42
        assert store_from_dict(data).selected_region_id is None

    def test_next_id_never_behind_regions(self, populated):
        data = store_to_dict(populated)
        data["next_region_id"] = 1
        assert store_from_dict(data).next_region_id == 3

    def test_duplicate_regions(self, populated):
        data = store_to_dict(populated)
        data["regions"].append(data["regions"][0])
        with pytest.raises(ValueError):
            store_from_dict(data)

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            store_from_dict([])

    def test_null_counters_fall_back(self, populated):
        data = store_to_dict(populated)
        data["next_region_id"] = None
        data["next_generation"] = None
        store = store_from_dict(data)
        assert store.next_region_id == 3
        assert store.next_generation == populated.next_generation

    def test_non_numeric_counter(self, populated):
        data = store_to_dict(populated)
        data["next_region_id"] = "x"
        with pytest.raises(ValueError):
            store_from_dict(data)

    def test_stale_generation_counter_advanced(self, populated):
        data = store_to_dict(populated)
        data["next_generation"] = 1
        store = store_from_dict(data)
        assert store.next_generation == populated.next_generation
        store = set_rotation(store, 1, 10.0)
        ids = [p.id for r in store.regions for p in r.panels]
        assert len(ids) == len(set(ids))


class TestPanelFromDict:
    def test_missing_id(self):
        with pytest.raises(ValueError):
            panel_from_dict({"corners": [[0, 0], [1, 0], [1, 1], [0, 1]]})

    def test_bad_corner(self):
        with pytest.raises(ValueError):
            panel_from_dict({"id": "p", "corners": [[0, 0], [1, 0], [1], [0, 1]]})

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            panel_from_dict(["p"])
