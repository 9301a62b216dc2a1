"""Region store and its pure transition functions.

``RegionStore`` is an immutable value. Every transition returns a new store,
or the very same object when the command was rejected, so callers can test
for a no-op with ``is``. Nothing here raises on bad user input: unknown ids,
NaN angles and unparseable polygons are logged and ignored.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Tuple

from ..config import DEFAULT_CONFIG, LayoutConfig
from ..geo.polygon import normalize_ring
from .grid import generate_panels
from .types import Region

logger = logging.getLogger(__name__)

_GENERATION_ID = re.compile(r"^panel-(\d+)-\d+$")


@dataclass(frozen=True)
class RegionStore:
    regions: Tuple[Region, ...] = ()
    selected_region_id: Optional[int] = None
    next_region_id: int = 1
    next_generation: int = 1
    default_rotation: float = 0.0
    config: LayoutConfig = DEFAULT_CONFIG

    @classmethod
    def empty(cls, config: LayoutConfig = DEFAULT_CONFIG) -> "RegionStore":
        return cls(default_rotation=config.default_rotation, config=config)

    @property
    def region_ids(self) -> Tuple[int, ...]:
        return tuple(r.id for r in self.regions)


def parse_rotation(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None if it is not one."""

    if value is None or isinstance(value, bool):
        return None
    try:
        angle = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(angle):
        return None
    return angle


def region_index(store: RegionStore, region_id: Any) -> Optional[int]:
    for i, region in enumerate(store.regions):
        if region.id == region_id:
            return i
    return None


def get_region(store: RegionStore, region_id: Any) -> Optional[Region]:
    idx = region_index(store, region_id)
    return None if idx is None else store.regions[idx]


def selected_region(store: RegionStore) -> Optional[Region]:
    if store.selected_region_id is None:
        return None
    return get_region(store, store.selected_region_id)


def replace_region(store: RegionStore, region: Region) -> RegionStore:
    """Swap in ``region`` for the stored region with the same id."""

    regions = tuple(region if r.id == region.id else r for r in store.regions)
    return replace(store, regions=regions)


def create_region(store: RegionStore, polygon: Iterable[Any]) -> Tuple[RegionStore, Optional[Region]]:
    """Add a region for a finished polygon, lay out its panels and select it.

    Returns:
        (new_store, region); (store, None) when the polygon cannot be parsed.
    """

    try:
        ring = normalize_ring(polygon)
    except (TypeError, ValueError) as exc:
        logger.warning("Rejected polygon: %s", exc)
        return store, None

    region_id = store.next_region_id
    rotation = store.default_rotation
    panels = generate_panels(
        ring,
        rotation,
        store.config,
        region_id=region_id,
        generation=store.next_generation,
    )
    region = Region(id=region_id, polygon=ring, rotation=rotation, panels=panels)

    new_store = replace(
        store,
        regions=store.regions + (region,),
        selected_region_id=region_id,
        next_region_id=region_id + 1,
        next_generation=store.next_generation + 1,
    )
    logger.info("Created region %d with %d panels", region_id, len(panels))
    return new_store, region


def delete_region(store: RegionStore, region_id: Any) -> RegionStore:
    idx = region_index(store, region_id)
    if idx is None:
        logger.debug("delete_region: unknown region %r", region_id)
        return store

    remaining = store.regions[:idx] + store.regions[idx + 1:]
    selected = store.selected_region_id
    if not remaining:
        selected = None
    elif selected == region_id:
        # first region deleted -> its successor, otherwise the first region
        selected = store.regions[1].id if idx == 0 else store.regions[0].id

    logger.info("Deleted region %d", region_id)
    return replace(store, regions=remaining, selected_region_id=selected)


def set_rotation(store: RegionStore, region_id: Any, new_rotation: Any) -> RegionStore:
    """Regenerate a region's panels at a new angle.

    The whole panel set is replaced. Obstruction flags survive only when the
    config uses stable (grid-cell) panel ids and the id reappears.
    """

    angle = parse_rotation(new_rotation)
    if angle is None:
        logger.warning("set_rotation: invalid rotation %r ignored", new_rotation)
        return store

    region = get_region(store, region_id)
    if region is None:
        logger.debug("set_rotation: unknown region %r", region_id)
        return store

    panels = generate_panels(
        region.polygon,
        angle,
        store.config,
        region_id=region.id,
        generation=store.next_generation,
    )
    if store.config.stable_panel_ids:
        obstructed = {p.id for p in region.panels if p.obstructed}
        panels = tuple(p.with_obstructed(p.id in obstructed) for p in panels)

    updated = replace(region, rotation=angle, panels=panels)
    new_store = replace_region(store, updated)
    logger.info("Region %d rotated to %.2f deg: %d panels", region.id, angle, len(panels))
    return replace(new_store, next_generation=store.next_generation + 1, default_rotation=angle)


def select_region(store: RegionStore, region_id: Any) -> RegionStore:
    """Select a region and adopt its rotation as the store default."""

    region = get_region(store, region_id)
    if region is None:
        logger.debug("select_region: unknown region %r", region_id)
        return store
    if store.selected_region_id == region.id and store.default_rotation == region.rotation:
        return store
    return replace(store, selected_region_id=region.id, default_rotation=region.rotation)


def set_default_rotation(store: RegionStore, rotation: Any) -> RegionStore:
    angle = parse_rotation(rotation)
    if angle is None:
        logger.warning("set_default_rotation: invalid rotation %r ignored", rotation)
        return store
    if angle == store.default_rotation:
        return store
    return replace(store, default_rotation=angle)


def next_generation_after(regions: Iterable[Region], floor: int = 1) -> int:
    """First generation number no ``panel-<g>-<i>`` id in ``regions`` uses."""

    highest = floor - 1
    for region in regions:
        for panel in region.panels:
            match = _GENERATION_ID.match(panel.id)
            if match:
                highest = max(highest, int(match.group(1)))
    return highest + 1


def restore_regions(
    store: RegionStore,
    regions: Iterable[Region],
    selected_region_id: Optional[int] = None,
) -> RegionStore:
    """Replace the store's regions with previously saved ones.

    The region id and generation counters move past everything restored so
    neither region ids nor panel ids are reused. A selection that does not
    name a restored region is dropped. Duplicate region ids reject the restore.
    """

    regions = tuple(regions)
    ids = [r.id for r in regions]
    if len(set(ids)) != len(ids):
        logger.warning("restore_regions: duplicate region ids %s; restore ignored", ids)
        return store

    next_id = max([store.next_region_id] + [i + 1 for i in ids])
    next_gen = next_generation_after(regions, floor=store.next_generation)
    selected = selected_region_id if selected_region_id in ids else None
    if selected is None and selected_region_id is not None:
        logger.warning("Restored selection %r does not exist; cleared", selected_region_id)

    return replace(
        store,
        regions=regions,
        selected_region_id=selected,
        next_region_id=next_id,
        next_generation=next_gen,
    )
