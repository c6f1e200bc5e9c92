"""Dashboard pipeline: accounts + rates -> totals -> allocations, rebalancing, goals, history.

A refresh computes everything as one unit and only then publishes the new
DashboardSnapshot to subscribers. If accounts cannot be read or a rate is
missing, nothing is published and the previous snapshot stays current.
"""

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from ..core import allocation
from ..core.aggregator import aggregate
from ..core.config import PortfolioConfig
from ..core.currency import CurrencyNormalizer, fetch_rates
from ..core.exceptions import MissingRateError, RepositoryError
from ..core.goals import goal_progress, monthly_spend_limit
from ..core.history import HistoryManager
from ..core.interfaces import AccountRepository, ExchangeRateProvider
from ..core.models import (
    AllocationTotals,
    AssetType,
    GoalProgress,
    HistoryChart,
    HistoryEntry,
    RebalanceStep,
)
from ..core.rebalancer import Rebalancer
from ..core.windowing import TimeFrame, project
from .scheduler import RECOMPUTE_DELAY_SECONDS, RecomputeScheduler

logger = logging.getLogger(__name__)


class ChangeEvent(str, Enum):
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_REMOVED = "account_removed"
    ACCOUNT_UPDATED = "account_updated"
    ASSET_ADDED = "asset_added"
    ASSET_REMOVED = "asset_removed"
    ASSET_UPDATED = "asset_updated"
    CONFIG_UPDATED = "config_updated"


_DATA_EVENTS = frozenset({
    ChangeEvent.ACCOUNT_ADDED,
    ChangeEvent.ACCOUNT_REMOVED,
    ChangeEvent.ACCOUNT_UPDATED,
    ChangeEvent.ASSET_ADDED,
    ChangeEvent.ASSET_REMOVED,
    ChangeEvent.ASSET_UPDATED,
})

# Sub-allocations shown per asset type
CURRENCY_BREAKDOWN_TYPES = (AssetType.STOCK, AssetType.BOND)
REGION_BREAKDOWN_TYPES = (AssetType.STOCK, AssetType.BOND)
HOLDING_BREAKDOWN_TYPES = (AssetType.CRYPTOCURRENCY, AssetType.COMMODITY, AssetType.CASH)

Allocation = list[tuple[str, Decimal]]


@dataclass(frozen=True)
class DashboardSnapshot:
    totals: AllocationTotals
    monthly_spend_limit: Decimal
    asset_allocation: Allocation
    currency_allocation: Allocation
    currency_by_asset: dict[AssetType, Allocation]
    regions_by_asset: dict[AssetType, Allocation]
    holdings_by_asset: dict[AssetType, Allocation]
    rebalancing_setup: bool
    rebalance_steps: list[RebalanceStep]
    goals: list[GoalProgress]
    time_frame: TimeFrame
    history_chart: HistoryChart

    @property
    def base_currency(self) -> str:
        return self.totals.base_currency

    @property
    def total_value(self) -> Decimal:
        return self.totals.total_value


def build_snapshot(
    totals: AllocationTotals,
    config: PortfolioConfig,
    history_chart: HistoryChart,
    include_unheld: bool = False,
) -> DashboardSnapshot:
    """All pure dashboard figures for one set of totals."""
    rebalancer = Rebalancer(totals.by_asset_type, totals.total_value, config.target_allocation)
    return DashboardSnapshot(
        totals=totals,
        monthly_spend_limit=monthly_spend_limit(totals.total_value, config.withdrawal_rate),
        asset_allocation=allocation.asset_allocation(totals),
        currency_allocation=allocation.currency_allocation(totals),
        currency_by_asset={
            t: allocation.asset_currency_allocation(totals, t) for t in CURRENCY_BREAKDOWN_TYPES
        },
        regions_by_asset={
            t: allocation.region_allocation(totals, t) for t in REGION_BREAKDOWN_TYPES
        },
        holdings_by_asset={
            t: allocation.holding_allocation(totals, t) for t in HOLDING_BREAKDOWN_TYPES
        },
        rebalancing_setup=bool(config.target_allocation),
        rebalance_steps=rebalancer.suggest_steps(include_unheld=include_unheld),
        goals=goal_progress(config.goals, totals.total_value),
        time_frame=config.history_time_frame,
        history_chart=history_chart,
    )


class DashboardService:
    def __init__(
        self,
        accounts: AccountRepository,
        rates: ExchangeRateProvider,
        history: HistoryManager,
        config: PortfolioConfig,
        delay: float = RECOMPUTE_DELAY_SECONDS,
        include_unheld: bool = False,
    ):
        self._accounts = accounts
        self._rates = rates
        self.history = history
        self.config = config
        self.include_unheld = include_unheld
        self.snapshot: Optional[DashboardSnapshot] = None
        self.loaded = False
        self._history_loaded = False
        self._subscribers: list[Callable[[DashboardSnapshot], None]] = []
        self.scheduler = RecomputeScheduler(self.refresh, delay)

    def subscribe(self, callback: Callable[[DashboardSnapshot], None]) -> None:
        self._subscribers.append(callback)

    def notify_change(self, event: ChangeEvent) -> None:
        """Called by the data layer on every account/holding change; recomputes once things settle."""
        if event in _DATA_EVENTS:
            self.scheduler.schedule()

    async def refresh(self, today: Optional[date] = None) -> Optional[DashboardSnapshot]:
        """Recompute everything and publish. Returns None if nothing could be published."""
        try:
            accounts = self._accounts.get_accounts()
        except RepositoryError as e:
            logger.error("Could not retrieve accounts: %s", e)
            self.loaded = True
            return None

        base = self.config.base_currency
        try:
            rates = await fetch_rates(self._rates, accounts, base)
            totals = aggregate(accounts, CurrencyNormalizer(rates, base))
        except MissingRateError as e:
            logger.warning("Dashboard not updated: %s", e)
            self.loaded = True
            return None

        await self._ensure_history_loaded()
        self.history.record_daily_snapshot(totals.total_value, totals.by_asset_type, today)

        chart = project(self.history.history, self.config.history_time_frame, today=today)
        snapshot = build_snapshot(totals, self.config, chart, include_unheld=self.include_unheld)
        self._publish(snapshot)
        return snapshot

    async def change_time_frame(self, time_frame: TimeFrame, today: Optional[date] = None) -> HistoryChart:
        await self._ensure_history_loaded()
        self.config.history_time_frame = time_frame
        return self._reproject(today)

    async def add_history_entry(self, entry: HistoryEntry, today: Optional[date] = None) -> HistoryChart:
        """Manual backfill; replaces any entry already stored for that day."""
        await self._ensure_history_loaded()
        self.history.insert_manual_entry(entry)
        return self._reproject(today)

    async def _ensure_history_loaded(self) -> None:
        # Saves replace the whole stored series, so it must be read before any edit
        if not self._history_loaded:
            await self.history.load()
            self._history_loaded = True

    def _reproject(self, today: Optional[date]) -> HistoryChart:
        chart = project(self.history.history, self.config.history_time_frame, today=today)
        if self.snapshot is not None:
            self._publish(dataclasses.replace(
                self.snapshot, time_frame=self.config.history_time_frame, history_chart=chart
            ))
        return chart

    def _publish(self, snapshot: DashboardSnapshot) -> None:
        self.snapshot = snapshot
        self.loaded = True
        for callback in self._subscribers:
            callback(snapshot)
