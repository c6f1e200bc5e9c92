"""Tests for history time-frame projection."""

from datetime import date
from decimal import Decimal

import pytest

from portfolio_dashboard.core.models import AssetType, AssetValue, HistoryEntry, PortfolioHistory
from portfolio_dashboard.core.windowing import TimeFrame, min_date, project

TODAY = date(2026, 10, 19)


def _entry(day, **assets):
    values = {AssetType[k.upper()]: Decimal(str(v)) for k, v in assets.items()}
    return HistoryEntry(
        date=date.fromisoformat(day),
        value=sum(values.values(), Decimal("0")),
        assets=tuple(AssetValue(t, v) for t, v in values.items()),
    )


@pytest.fixture
def three_years():
    return PortfolioHistory(entries=[
        _entry("2024-03-01", stock=100, cryptocurrency=10),
        _entry("2025-06-01", stock=150, cryptocurrency=5),
        _entry("2025-12-31", stock=160),
        _entry("2026-01-01", stock=170, bond=20),
        _entry("2026-10-19", stock=200, bond=30),
    ])


class TestMinDate:
    @pytest.mark.parametrize("frame, expected", [
        (TimeFrame.YTD, date(2026, 1, 1)),
        (TimeFrame.ONE_YEAR, date(2025, 10, 19)),
        (TimeFrame.FIVE_YEARS, date(2021, 10, 19)),
        (TimeFrame.TEN_YEARS, date(2016, 10, 19)),
    ])
    def test_window_start(self, frame, expected):
        assert min_date(frame, today=TODAY) == expected

    def test_all_has_no_lower_bound(self):
        assert min_date(TimeFrame.ALL, today=TODAY) is None

    def test_leap_day(self):
        assert min_date(TimeFrame.ONE_YEAR, today=date(2024, 2, 29)) == date(2023, 2, 28)


class TestProject:
    def test_ytd_drops_prior_years_and_their_asset_types(self, three_years):
        chart = project(three_years, TimeFrame.YTD, today=TODAY)
        assert chart.labels == ("2026-01-01", "2026-10-19")
        assert list(chart.series) == [AssetType.STOCK, AssetType.BOND]
        assert AssetType.CRYPTOCURRENCY not in chart.series

    def test_one_year_window_is_inclusive(self):
        history = PortfolioHistory(entries=[_entry("2025-10-18", stock=1), _entry("2025-10-19", stock=2)])
        chart = project(history, TimeFrame.ONE_YEAR, today=TODAY)
        assert chart.labels == ("2025-10-19",)

    def test_all_keeps_everything_zero_filled(self, three_years):
        chart = project(three_years, TimeFrame.ALL, today=TODAY)
        assert len(chart.labels) == 5
        assert chart.series[AssetType.CRYPTOCURRENCY] == (
            Decimal("10"), Decimal("5"), Decimal("0"), Decimal("0"), Decimal("0"),
        )
        assert chart.series[AssetType.BOND][:3] == (Decimal("0"),) * 3

    def test_every_series_aligned_with_labels(self, three_years):
        for frame in TimeFrame:
            chart = project(three_years, frame, today=TODAY)
            assert all(len(values) == len(chart.labels) for values in chart.series.values())

    def test_series_follow_universe_order(self, three_years):
        universe = [AssetType.BOND, AssetType.CRYPTOCURRENCY, AssetType.STOCK]
        chart = project(three_years, TimeFrame.ALL, universe=universe, today=TODAY)
        assert list(chart.series) == universe

    def test_empty_history(self):
        chart = project(PortfolioHistory(), TimeFrame.ALL, today=TODAY)
        assert chart.labels == ()
        assert chart.series == {}
