"""Tests for allocation percentages."""

from decimal import Decimal

import pytest

from portfolio_dashboard.core.aggregator import aggregate
from portfolio_dashboard.core.allocation import (
    asset_allocation,
    asset_currency_allocation,
    currency_allocation,
    holding_allocation,
    percentages_of,
    region_allocation,
    round2,
)
from portfolio_dashboard.core.currency import CurrencyNormalizer
from portfolio_dashboard.core.models import Account, AssetType, Holding, RegionWeight


def _d(x):
    return Decimal(str(x))


class TestPercentagesOf:
    def test_sorted_descending(self):
        result = percentages_of({"a": _d(10), "b": _d(60), "c": _d(30)}, _d(100))
        assert result == [("b", _d("60.00")), ("c", _d("30.00")), ("a", _d("10.00"))]

    def test_ties_keep_input_order(self):
        result = percentages_of({"x": _d(1), "y": _d(2), "z": _d(1)}, _d(4))
        assert [k for k, _ in result] == ["y", "x", "z"]

    def test_zero_denominator(self):
        assert percentages_of({"a": _d(0)}, _d(0)) == []

    def test_rounding_half_up(self):
        assert round2(_d("12.345")) == _d("12.35")
        assert percentages_of({"a": _d(1)}, _d(3)) == [("a", _d("33.33"))]

    @pytest.mark.parametrize("values", [
        [1, 1, 1],
        [1, 2, 3, 4, 5, 6, 7],
        [0.01, 999.99],
        [17.3, 2.9, 44.4, 5.5, 11.1, 0.7],
    ])
    def test_sum_close_to_100(self, values):
        totals = {i: _d(v) for i, v in enumerate(values)}
        result = percentages_of(totals, sum(totals.values()))
        assert abs(sum(p for _, p in result) - 100) <= _d("0.5")


@pytest.fixture
def scenario_totals():
    accounts = [
        Account(name="US", holdings=[Holding(currency="USD", asset_type=AssetType.STOCK,
                                             quantity=_d(1000), symbol="AAPL",
                                             region_weights=(RegionWeight("US", _d(1)),))]),
        Account(name="EU", holdings=[Holding(currency="EUR", asset_type=AssetType.BOND,
                                             quantity=_d(500), description="Bund")]),
    ]
    return aggregate(accounts, CurrencyNormalizer({"EUR": _d("1.1")}, "USD"))


class TestViews:
    def test_asset_allocation(self, scenario_totals):
        assert asset_allocation(scenario_totals) == [
            ("Stocks & Stock ETFs", _d("64.52")),
            ("Bonds & Bond ETFs", _d("35.48")),
        ]

    def test_currency_allocation(self, scenario_totals):
        assert currency_allocation(scenario_totals) == [("USD", _d("64.52")), ("EUR", _d("35.48"))]

    def test_sub_allocations_use_asset_type_total(self, scenario_totals):
        assert asset_currency_allocation(scenario_totals, AssetType.BOND) == [("EUR", _d("100.00"))]
        assert region_allocation(scenario_totals, AssetType.STOCK) == [("North America", _d("100.00"))]
        assert holding_allocation(scenario_totals, AssetType.BOND) == [("Bund", _d("100.00"))]

    def test_missing_asset_type_is_empty(self, scenario_totals):
        assert asset_currency_allocation(scenario_totals, AssetType.CASH) == []
        assert region_allocation(scenario_totals, AssetType.BOND) == []
        assert holding_allocation(scenario_totals, AssetType.CRYPTOCURRENCY) == []
