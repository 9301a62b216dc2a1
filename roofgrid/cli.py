"""Lay out panels on a roof polygon from the command line.

Example:
    python -m roofgrid roof.geojson --rotation 15 --out layout.geojson --plot
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_CONFIG, load_config
from .export.export_geojson import export_geojson, load_polygon_geojson
from .io.persistence import load_store, save_store
from .layout.aggregate import layout_stats, region_summaries
from .layout.controller import LayoutController
from .layout.store import RegionStore
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def summary(store: RegionStore) -> None:
    stats = layout_stats(store)
    for s in region_summaries(store):
        print(
            f"Region {s.region_id}: {s.panel_count} panels "
            f"({s.active_panels} active) at {s.rotation:.1f} deg, {s.area_m2:.1f} m2"
        )
    print(f"Regions:       {stats.region_count}")
    print(f"Panels:        {stats.total_panels}")
    print(f"Active panels: {stats.total_active_panels}")
    print(f"DC capacity:   {stats.dc_capacity_kw:.2f} kW")


def visualize(store: RegionStore) -> None:
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots()
    for region in store.regions:
        xs = [p[0] for p in region.polygon]
        ys = [p[1] for p in region.polygon]
        ax.plot(xs, ys, color="black")
        for panel in region.panels:
            ring = panel.closed_ring()
            px = [p[0] for p in ring]
            py = [p[1] for p in ring]
            if panel.obstructed:
                ax.plot(px, py, color="red", linewidth=0.5)
            else:
                ax.fill(px, py, alpha=0.6)

    ax.set_aspect("equal", "datalim")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title("Manual panel layout")
    plt.show()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tile a roof polygon with solar panels")
    parser.add_argument("polygon", type=str, help="GeoJSON file holding the roof polygon")
    parser.add_argument("--rotation", type=float, default=None, help="Panel rotation in degrees (clockwise)")
    parser.add_argument("--config", type=str, default=None, help="JSON layout config")
    parser.add_argument("--load", type=str, default=None, help="Start from a saved store JSON")
    parser.add_argument("--out", type=str, default=None, help="Write the layout as GeoJSON")
    parser.add_argument("--save", type=str, default=None, help="Write the store state as JSON")
    parser.add_argument("--plot", action="store_true", help="Show a matplotlib preview")
    parser.add_argument("--log-level", type=str, default="WARNING")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, str(args.log_level).upper(), logging.WARNING))

    try:
        config = load_config(args.config) if args.config else DEFAULT_CONFIG
        ring = load_polygon_geojson(args.polygon)
        saved = load_store(args.load) if args.load else None
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    controller = LayoutController(config)
    if saved is not None:
        controller.replace_store(saved)
    if args.rotation is not None:
        controller.set_default_rotation(args.rotation)
    if controller.create_region(ring) is None:
        print("error: polygon could not be used", file=sys.stderr)
        return 1

    summary(controller.store)

    if args.out:
        export_geojson(controller.store, args.out)
        logger.info("Wrote layout to %s", args.out)
    if args.save:
        save_store(controller.store, args.save)
        logger.info("Wrote store to %s", args.save)
    if args.plot:
        visualize(controller.store)
    return 0


if __name__ == "__main__":
    sys.exit(main())
