"""Single owner of the current RegionStore.

Hosts (map widgets, tools, tests) talk to a ``LayoutController`` instead of
holding store state themselves. Every effective change is published to the
subscribed callbacks; rejected commands publish nothing.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..config import DEFAULT_CONFIG, LayoutConfig
from . import obstruction, store as transitions
from .aggregate import LayoutStats, layout_stats, total_active_panels
from .store import RegionStore, parse_rotation
from .types import Region

logger = logging.getLogger(__name__)

Listener = Callable[[RegionStore], None]


class LayoutController:
    def __init__(self, config: LayoutConfig = DEFAULT_CONFIG, store: Optional[RegionStore] = None):
        self._store = store if store is not None else RegionStore.empty(config)
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

    # -- state ---------------------------------------------------------

    @property
    def store(self) -> RegionStore:
        return self._store

    @property
    def config(self) -> LayoutConfig:
        return self._store.config

    @property
    def regions(self) -> Tuple[Region, ...]:
        return self._store.regions

    @property
    def selected_region_id(self) -> Optional[int]:
        return self._store.selected_region_id

    @property
    def total_active_panels(self) -> int:
        return total_active_panels(self._store.regions)

    @property
    def stats(self) -> LayoutStats:
        return layout_stats(self._store)

    # -- listeners -----------------------------------------------------

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""

        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _commit(self, new_store: RegionStore) -> bool:
        if new_store is self._store:
            return False
        self._store = new_store
        for callback in list(self._listeners):
            try:
                callback(new_store)
            except Exception:
                logger.exception("Layout listener %r failed", callback)
        return True

    def _apply(self, fn: Callable[..., RegionStore], *args: Any) -> bool:
        with self._lock:
            return self._commit(fn(self._store, *args))

    # -- commands ------------------------------------------------------

    def create_region(self, polygon: Iterable[Any]) -> Optional[Region]:
        with self._lock:
            new_store, region = transitions.create_region(self._store, polygon)
            self._commit(new_store)
            return region

    def delete_region(self, region_id: Any) -> bool:
        return self._apply(transitions.delete_region, region_id)

    def set_rotation(self, region_id: Any, rotation: Any) -> bool:
        return self._apply(transitions.set_rotation, region_id, rotation)

    def rotate_selected(self, rotation: Any) -> bool:
        """Rotate the selected region; no-op when nothing is selected."""

        with self._lock:
            if self._store.selected_region_id is None:
                return False
            return self._commit(
                transitions.set_rotation(self._store, self._store.selected_region_id, rotation)
            )

    def set_default_rotation(self, rotation: Any) -> bool:
        return self._apply(transitions.set_default_rotation, rotation)

    def select_region(self, region_id: Any) -> bool:
        return self._apply(transitions.select_region, region_id)

    def toggle_obstruction(self, region_id: Any, panel_id: Any) -> bool:
        return self._apply(obstruction.toggle_obstruction, region_id, panel_id)

    def apply_obstructions(self, panel_ids: Iterable[str]) -> bool:
        return self._apply(obstruction.apply_obstructions, frozenset(panel_ids))

    def restore(self, regions: Iterable[Region], selected_region_id: Optional[int] = None) -> bool:
        return self._apply(transitions.restore_regions, tuple(regions), selected_region_id)

    def replace_store(self, new_store: RegionStore) -> bool:
        """Adopt a whole store, e.g. one read back by load_store."""

        with self._lock:
            return self._commit(new_store)


class RotationQueue:
    """Coalesces rapid rotation requests.

    Only the latest requested angle per region is kept; ``flush`` applies the
    survivors in first-request order.
    """

    def __init__(self, controller: LayoutController):
        self._controller = controller
        self._pending: "OrderedDict[Any, float]" = OrderedDict()
        self._lock = threading.Lock()

    def request(self, region_id: Any, rotation: Any) -> bool:
        angle = parse_rotation(rotation)
        if angle is None:
            logger.debug("RotationQueue: invalid rotation %r dropped", rotation)
            return False
        with self._lock:
            if region_id in self._pending:
                logger.debug("RotationQueue: region %r %.2f superseded", region_id, self._pending[region_id])
            self._pending[region_id] = angle
        return True

    def pending(self) -> Dict[Any, float]:
        with self._lock:
            return dict(self._pending)

    def discard(self, region_id: Any) -> None:
        with self._lock:
            self._pending.pop(region_id, None)

    def flush(self) -> int:
        """Apply pending rotations; returns how many changed the store."""

        with self._lock:
            batch = list(self._pending.items())
            self._pending.clear()

        applied = 0
        for region_id, angle in batch:
            if self._controller.set_rotation(region_id, angle):
                applied += 1
        return applied
