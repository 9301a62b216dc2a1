"""Plain-data (JSON) persistence for regions and stores.

The round trip is lossless: polygon, rotation, every panel (id, grid cell,
corners, obstructed flag), selection, id counters and the layout config.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from ..config import LayoutConfig
from ..geo.polygon import normalize_ring
from ..layout.store import RegionStore, next_generation_after, parse_rotation
from ..layout.types import Panel, Region

FORMAT_VERSION = 1


def panel_to_dict(panel: Panel) -> Dict[str, Any]:
    return {
        "id": panel.id,
        "row": panel.row,
        "col": panel.col,
        "corners": [[float(x), float(y)] for x, y in panel.corners],
        "obstructed": bool(panel.obstructed),
    }


def panel_from_dict(data: Dict[str, Any]) -> Panel:
    if not isinstance(data, dict):
        raise ValueError("panel must be a mapping")
    corners = data.get("corners") or []
    if not isinstance(corners, (list, tuple)) or len(corners) != 4:
        raise ValueError(f"panel {data.get('id')!r} must have 4 corners")
    try:
        return Panel(
            id=str(data["id"]),
            corners=tuple((float(c[0]), float(c[1])) for c in corners),
            row=int(data.get("row", 0)),
            col=int(data.get("col", 0)),
            obstructed=bool(data.get("obstructed", False)),
        )
    except (KeyError, TypeError, IndexError) as exc:
        raise ValueError(f"invalid panel document: {exc!r}") from exc


def region_to_dict(region: Region) -> Dict[str, Any]:
    return {
        "id": region.id,
        "polygon": [[float(x), float(y)] for x, y in region.polygon],
        "rotation": float(region.rotation),
        "panels": [panel_to_dict(p) for p in region.panels],
        "obstructed_panel_ids": sorted(p.id for p in region.panels if p.obstructed),
    }


def region_from_dict(data: Dict[str, Any]) -> Region:
    """Rebuild a Region.

    When ``obstructed_panel_ids`` is present it decides which panels are
    obstructed, overriding the per-panel flags.
    """

    if not isinstance(data, dict):
        raise ValueError("region must be a mapping")
    try:
        region_id = int(data["id"])
        polygon = normalize_ring(data["polygon"])
    except (KeyError, TypeError) as exc:
        raise ValueError(f"invalid region document: {exc}") from exc

    rotation = parse_rotation(data.get("rotation", 0.0))
    if rotation is None:
        raise ValueError(f"region {region_id}: invalid rotation {data.get('rotation')!r}")

    panels = tuple(panel_from_dict(p) for p in data.get("panels") or [])
    if "obstructed_panel_ids" in data:
        obstructed = set(data["obstructed_panel_ids"] or [])
        panels = tuple(p.with_obstructed(p.id in obstructed) for p in panels)

    return Region(id=region_id, polygon=polygon, rotation=rotation, panels=panels)


def store_to_dict(store: RegionStore) -> Dict[str, Any]:
    return {
        "version": FORMAT_VERSION,
        "config": store.config.to_dict(),
        "regions": [region_to_dict(r) for r in store.regions],
        "selected_region_id": store.selected_region_id,
        "next_region_id": store.next_region_id,
        "next_generation": store.next_generation,
        "default_rotation": float(store.default_rotation),
    }


def store_from_dict(data: Dict[str, Any]) -> RegionStore:
    if not isinstance(data, dict):
        raise ValueError("store document must be a mapping")
    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ValueError(f"unsupported store format version: {version!r}")

    config = LayoutConfig.from_dict(data.get("config") or {})
    regions: List[Region] = [region_from_dict(r) for r in data.get("regions") or []]
    ids = [r.id for r in regions]
    if len(set(ids)) != len(ids):
        raise ValueError(f"duplicate region ids: {ids}")

    selected = data.get("selected_region_id")
    if selected not in ids:
        selected = None

    try:
        saved_next_id = int(data.get("next_region_id") or 1)
        saved_next_gen = int(data.get("next_generation") or 1)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid store counters: {exc}") from exc

    next_region_id = max([saved_next_id] + [i + 1 for i in ids])
    default_rotation = parse_rotation(data.get("default_rotation", config.default_rotation))
    if default_rotation is None:
        default_rotation = config.default_rotation

    return RegionStore(
        regions=tuple(regions),
        selected_region_id=selected,
        next_region_id=next_region_id,
        next_generation=next_generation_after(regions, floor=saved_next_gen),
        default_rotation=default_rotation,
        config=config,
    )


def save_store(store: RegionStore, path: Union[str, Path]) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(store_to_dict(store), f, indent=2)


def load_store(path: Union[str, Path]) -> RegionStore:
    with open(path, "r", encoding="utf-8") as f:
        return store_from_dict(json.load(f))
