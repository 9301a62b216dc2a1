"""Layout value types: panels and regions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

Point = Tuple[float, float]
Ring = Tuple[Point, ...]


@dataclass(frozen=True)
class Panel:
    """One rectangular module footprint.

    ``corners`` are four (lng, lat) points in ring order, not closed.
    ``row``/``col`` index the unrotated candidate grid cell the panel came from.
    """

    id: str
    corners: Tuple[Point, Point, Point, Point]
    row: int
    col: int
    obstructed: bool = False

    @property
    def center(self) -> Point:
        xs = [c[0] for c in self.corners]
        ys = [c[1] for c in self.corners]
        return sum(xs) / 4.0, sum(ys) / 4.0

    def closed_ring(self) -> Tuple[Point, ...]:
        return tuple(self.corners) + (self.corners[0],)

    def with_obstructed(self, obstructed: bool) -> "Panel":
        if obstructed == self.obstructed:
            return self
        return replace(self, obstructed=obstructed)


@dataclass(frozen=True)
class Region:
    id: int
    polygon: Ring
    rotation: float
    panels: Tuple[Panel, ...] = field(default_factory=tuple)

    @property
    def panel_count(self) -> int:
        return len(self.panels)

    @property
    def active_panel_count(self) -> int:
        return sum(1 for p in self.panels if not p.obstructed)

    def find_panel(self, panel_id: str) -> Optional[Panel]:
        for p in self.panels:
            if p.id == panel_id:
                return p
        return None
