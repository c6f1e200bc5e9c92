"""Projection of the stored history onto a chartable time window."""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from .models import BROAD_ASSET_TYPES, AssetType, HistoryChart, PortfolioHistory


class TimeFrame(str, Enum):
    ALL = "All"
    YTD = "YTD"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"
    TEN_YEARS = "10Y"


_YEARS_BACK = {
    TimeFrame.ONE_YEAR: 1,
    TimeFrame.FIVE_YEARS: 5,
    TimeFrame.TEN_YEARS: 10,
}


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def min_date(time_frame: TimeFrame, today: Optional[date] = None) -> Optional[date]:
    """First day admitted by the time frame, or None for no lower bound."""
    today = today or date.today()
    if time_frame == TimeFrame.ALL:
        return None
    if time_frame == TimeFrame.YTD:
        return date(today.year, 1, 1)
    return _years_before(today, _YEARS_BACK[time_frame])


def project(
    history: PortfolioHistory,
    time_frame: TimeFrame,
    universe: Sequence[AssetType] = BROAD_ASSET_TYPES,
    today: Optional[date] = None,
) -> HistoryChart:
    """Zero-filled per-asset-type series aligned with the retained entry dates.

    Asset types whose series is all zeros inside the window are dropped.
    """
    start = min_date(time_frame, today)
    entries = [e for e in history.entries if start is None or e.date >= start]

    labels = tuple(e.date.isoformat() for e in entries)
    series: dict[AssetType, tuple[Decimal, ...]] = {}
    for asset_type in universe:
        values = tuple(e.value_for(asset_type) for e in entries)
        if any(v != 0 for v in values):
            series[asset_type] = values
    return HistoryChart(labels=labels, series=series)
