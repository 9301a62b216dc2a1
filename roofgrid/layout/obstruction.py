"""Per-panel obstruction flags.

An obstructed panel stays in its region (so it can be un-obstructed) but is
excluded from active panel counts.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import AbstractSet, Any, FrozenSet

from .store import RegionStore, get_region, replace_region

logger = logging.getLogger(__name__)


def toggle_obstruction(store: RegionStore, region_id: Any, panel_id: Any) -> RegionStore:
    """Flip the obstructed flag of one panel; unknown ids are a no-op."""

    region = get_region(store, region_id)
    if region is None:
        logger.debug("toggle_obstruction: unknown region %r", region_id)
        return store

    panel = region.find_panel(panel_id)
    if panel is None:
        logger.debug("toggle_obstruction: unknown panel %r in region %d", panel_id, region.id)
        return store

    flipped = panel.with_obstructed(not panel.obstructed)
    panels = tuple(flipped if p.id == panel.id else p for p in region.panels)
    logger.debug("Panel %s obstructed=%s", panel.id, flipped.obstructed)
    return replace_region(store, replace(region, panels=panels))


def obstructed_panel_ids(store: RegionStore) -> FrozenSet[str]:
    return frozenset(p.id for r in store.regions for p in r.panels if p.obstructed)


def apply_obstructions(store: RegionStore, panel_ids: AbstractSet[str]) -> RegionStore:
    """Mark exactly the panels in ``panel_ids`` as obstructed."""

    wanted = set(panel_ids)
    changed = False
    regions = []
    for region in store.regions:
        panels = tuple(p.with_obstructed(p.id in wanted) for p in region.panels)
        if any(a is not b for a, b in zip(panels, region.panels)):
            changed = True
            region = replace(region, panels=panels)
        regions.append(region)

    if not changed:
        return store
    return replace(store, regions=tuple(regions))
