"""Derived panel counts.

Nothing here is stored; counts are recomputed from the regions on demand.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List

from ..geo.polygon import polygon_area_m2
from .store import RegionStore
from .types import Region


@dataclass(frozen=True)
class RegionSummary:
    region_id: int
    panel_count: int
    active_panels: int
    obstructed_panels: int
    rotation: float
    area_m2: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LayoutStats:
    region_count: int
    total_panels: int
    total_active_panels: int
    total_obstructed_panels: int
    dc_capacity_kw: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def total_active_panels(regions: Iterable[Region]) -> int:
    """Number of non-obstructed panels across ``regions``."""

    return sum(1 for r in regions for p in r.panels if not p.obstructed)


def region_summary(region: Region) -> RegionSummary:
    active = region.active_panel_count
    return RegionSummary(
        region_id=region.id,
        panel_count=region.panel_count,
        active_panels=active,
        obstructed_panels=region.panel_count - active,
        rotation=float(region.rotation),
        area_m2=polygon_area_m2(region.polygon),
    )


def region_summaries(store: RegionStore) -> List[RegionSummary]:
    return [region_summary(r) for r in store.regions]


def layout_stats(store: RegionStore) -> LayoutStats:
    total = sum(r.panel_count for r in store.regions)
    active = total_active_panels(store.regions)
    return LayoutStats(
        region_count=len(store.regions),
        total_panels=total,
        total_active_panels=active,
        total_obstructed_panels=total - active,
        dc_capacity_kw=float(active * store.config.module_power_kw),
    )
