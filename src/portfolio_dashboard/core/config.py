"""Portfolio configuration: loaded from config.json at project root."""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional

from .exceptions import PersistenceError
from .interfaces import ConfigStore
from .models import AssetType
from .windowing import TimeFrame

logger = logging.getLogger(__name__)


@dataclass
class Goal:
    title: str
    value: Decimal


@dataclass
class PortfolioConfig:
    base_currency: str = "EUR"
    withdrawal_rate: Decimal = Decimal("0.04")
    goals: list[Goal] = field(default_factory=list)
    target_allocation: dict[AssetType, Decimal] = field(default_factory=dict)  # fractions
    history_time_frame: TimeFrame = TimeFrame.ALL


_DEFAULTS = PortfolioConfig()


def _config_path() -> Path:
    from ..data.database import find_project_root
    return find_project_root() / "config.json"


def _targets_from_dict(raw: dict) -> dict[AssetType, Decimal]:
    # Rebalancing compares broad types, so "stock_fund" counts toward STOCK
    targets: dict[AssetType, Decimal] = {}
    for name, fraction in raw.items():
        broad = AssetType[name.upper()].broad_type
        targets[broad] = targets.get(broad, Decimal("0")) + Decimal(str(fraction))
    return targets


def config_from_dict(data: dict) -> PortfolioConfig:
    return PortfolioConfig(
        base_currency=str(data.get("base_currency", _DEFAULTS.base_currency)).upper(),
        withdrawal_rate=Decimal(str(data.get("withdrawal_rate", _DEFAULTS.withdrawal_rate))),
        goals=[
            Goal(title=g["title"], value=Decimal(str(g["value"])))
            for g in data.get("goals", [])
        ],
        target_allocation=_targets_from_dict(data.get("target_allocation", {})),
        history_time_frame=TimeFrame(data.get("history_time_frame", _DEFAULTS.history_time_frame.value)),
    )


def config_to_dict(cfg: PortfolioConfig) -> dict:
    return {
        "base_currency": cfg.base_currency,
        "withdrawal_rate": float(cfg.withdrawal_rate),
        "goals": [{"title": g.title, "value": float(g.value)} for g in cfg.goals],
        "target_allocation": {
            t.name.lower(): float(fraction) for t, fraction in cfg.target_allocation.items()
        },
        "history_time_frame": cfg.history_time_frame.value,
    }


class JsonConfigStore(ConfigStore):
    def __init__(self, path: Optional[Path] = None):
        self._path = path
        self._cached: Optional[PortfolioConfig] = None

    @property
    def path(self) -> Path:
        return self._path or _config_path()

    def load(self) -> PortfolioConfig:
        if self._cached is not None:
            return self._cached
        path = self.path
        if not path.exists():
            self._cached = PortfolioConfig()
            return self._cached
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            self._cached = config_from_dict(data)
        except (ValueError, KeyError, TypeError, ArithmeticError) as e:
            logger.error("Ignoring unreadable config %s: %s", path, e)
            self._cached = PortfolioConfig()
        return self._cached

    def save(self, cfg: PortfolioConfig) -> None:
        data = json.dumps(config_to_dict(cfg), indent=2, ensure_ascii=False)
        try:
            self.path.write_text(data, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}") from e
        self._cached = cfg
