"""GeoJSON export helpers.

Writes a layout as a GeoJSON FeatureCollection in EPSG:4326 (lng, lat): one
Polygon feature per panel and, optionally, one per region outline.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

from shapely.geometry import Polygon, mapping

from ..geo.polygon import Ring, ring_from_geojson
from ..layout.store import RegionStore

COORD_PRECISION = 7


def _rounded_polygon(ring: Sequence[Tuple[float, float]]) -> Polygon:
    return Polygon([(round(x, COORD_PRECISION), round(y, COORD_PRECISION)) for x, y in ring])


def layout_feature_collection(store: RegionStore, include_regions: bool = True) -> Dict[str, Any]:
    """Build a FeatureCollection for every region and panel in ``store``."""

    features: List[Dict[str, Any]] = []
    for region in store.regions:
        if include_regions and len(set(region.polygon)) >= 3:
            features.append(
                {
                    "type": "Feature",
                    "properties": {
                        "kind": "region",
                        "region_id": region.id,
                        "rotation": float(region.rotation),
                        "panel_count": region.panel_count,
                        "selected": region.id == store.selected_region_id,
                    },
                    "geometry": mapping(_rounded_polygon(region.polygon)),
                }
            )
        for panel in region.panels:
            features.append(
                {
                    "type": "Feature",
                    "properties": {
                        "kind": "panel",
                        "id": panel.id,
                        "region_id": region.id,
                        "row": panel.row,
                        "col": panel.col,
                        "isObstructed": bool(panel.obstructed),
                    },
                    "geometry": mapping(_rounded_polygon(panel.closed_ring())),
                }
            )

    return {"type": "FeatureCollection", "features": features}


def export_geojson(store: RegionStore, out_path: Union[str, Path], include_regions: bool = True) -> None:
    """Write the layout of ``store`` as GeoJSON.

    Args:
        store: regions and panels to export.
        out_path: Where to write the GeoJSON.
        include_regions: also emit the region outlines.
    """

    fc = layout_feature_collection(store, include_regions=include_regions)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(fc, f)


def load_polygon_geojson(path: Union[str, Path]) -> Ring:
    """Read the outer ring of the first polygon in a GeoJSON file."""

    with open(path, "r", encoding="utf-8") as f:
        gj = json.load(f)
    return ring_from_geojson(gj)
