"""Layout configuration.

Panel dimensions, spacing and the guards used by the grid generator live in one
frozen dataclass so a store, a CLI run and a saved document all agree on them.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union


@dataclass(frozen=True)
class LayoutConfig:
    panel_width_m: float = 0.8
    panel_height_m: float = 1.43
    spacing_m: float = 0.05
    spacing_factor: float = 1.1
    default_rotation: float = 0.0
    stable_panel_ids: bool = False
    max_grid_cells: int = 250_000
    earth_radius_m: float = 6371008.8
    module_power_kw: float = 0.4

    def __post_init__(self) -> None:
        for name in ("panel_width_m", "panel_height_m", "spacing_factor", "earth_radius_m"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive number, got {value!r}")
        if not math.isfinite(self.spacing_m) or self.spacing_m < 0:
            raise ValueError(f"spacing_m must be >= 0, got {self.spacing_m!r}")
        if not math.isfinite(self.default_rotation):
            raise ValueError("default_rotation must be finite")
        if self.max_grid_cells <= 0:
            raise ValueError("max_grid_cells must be positive")
        if not math.isfinite(self.module_power_kw) or self.module_power_kw < 0:
            raise ValueError("module_power_kw must be >= 0")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutConfig":
        """Build a config from plain data. Unknown keys are ignored."""

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("config must be a mapping")

        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            try:
                if f.name == "stable_panel_ids":
                    kwargs[f.name] = bool(raw)
                elif f.name == "max_grid_cells":
                    kwargs[f.name] = int(raw)
                else:
                    kwargs[f.name] = float(raw)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"invalid value for {f.name}: {raw!r}") from exc
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = LayoutConfig()


def load_config(path: Union[str, Path]) -> LayoutConfig:
    """Read a JSON file into a LayoutConfig."""

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return LayoutConfig.from_dict(data)
