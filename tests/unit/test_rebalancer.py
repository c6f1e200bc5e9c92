"""Tests for Rebalancer."""

from decimal import Decimal

from portfolio_dashboard.core.models import AssetType
from portfolio_dashboard.core.rebalancer import Rebalancer

_CENT = Decimal("0.01")


def _d(x):
    return Decimal(str(x))


def _rebalancer(totals, targets):
    totals = {AssetType[k.upper()]: _d(v) for k, v in totals.items()}
    targets = {AssetType[k.upper()]: _d(v) for k, v in targets.items()}
    return Rebalancer(totals, sum(totals.values(), Decimal("0")), targets)


class TestSuggestSteps:
    def test_sell_overweight_buy_underweight(self):
        steps = _rebalancer({"stock": 1000, "bond": 500}, {"stock": 0.6, "bond": 0.4}).suggest_steps()

        assert [s.asset_type for s in steps] == [AssetType.STOCK, AssetType.BOND]
        stock, bond = steps
        assert stock.value.quantize(_CENT) == _d("-100.00")
        assert stock.action == "sell"
        assert bond.value.quantize(_CENT) == _d("100.00")
        assert bond.action == "buy"
        assert bond.asset_name == "Bonds & Bond ETFs"
        assert bond.percentage.quantize(_CENT) == _d("0.20")
        assert stock.percentage.quantize(_CENT) == _d("-0.10")

    def test_two_types_conserve_money(self):
        steps = _rebalancer({"stock": 700, "commodity": 300}, {"stock": 0.5, "commodity": 0.5}).suggest_steps()
        assert len(steps) == 2
        assert abs(sum(s.value for s in steps)) < _CENT

    def test_balanced_portfolio_has_no_steps(self):
        steps = _rebalancer({"stock": 500, "bond": 500}, {"stock": 0.5, "bond": 0.5}).suggest_steps()
        assert steps == []

    def test_cash_never_rebalanced(self):
        steps = _rebalancer({"stock": 500, "cash": 500}, {"stock": 0.9, "cash": 0.1}).suggest_steps()
        assert [s.asset_type for s in steps] == [AssetType.STOCK]
        assert steps[0].value.quantize(_CENT) == _d("400.00")

    def test_untargeted_type_sold_entirely(self):
        steps = _rebalancer({"stock": 800, "cryptocurrency": 200}, {"stock": 1}).suggest_steps()
        crypto = next(s for s in steps if s.asset_type == AssetType.CRYPTOCURRENCY)
        assert crypto.value == _d("-200")
        assert crypto.percentage == _d("-1")

    def test_sorted_ascending_by_value(self):
        steps = _rebalancer(
            {"stock": 400, "bond": 100, "commodity": 300, "cryptocurrency": 200},
            {"stock": 0.25, "bond": 0.25, "commodity": 0.25, "cryptocurrency": 0.25},
        ).suggest_steps()
        values = [s.value for s in steps]
        assert values == sorted(values)
        assert steps[0].asset_type == AssetType.STOCK
        assert steps[-1].asset_type == AssetType.BOND

    def test_empty_portfolio(self):
        assert Rebalancer({}, Decimal("0"), {AssetType.STOCK: _d(1)}).suggest_steps() == []


class TestUnheldTargets:
    def test_omitted_by_default(self):
        steps = _rebalancer({"stock": 1000}, {"stock": 0.8, "bond": 0.2}).suggest_steps()
        assert [s.asset_type for s in steps] == [AssetType.STOCK]

    def test_buy_from_zero_when_requested(self):
        steps = _rebalancer({"stock": 1000}, {"stock": 0.8, "bond": 0.2}).suggest_steps(include_unheld=True)
        bond = steps[-1]
        assert bond.asset_type == AssetType.BOND
        assert bond.value == _d("200.0")
        assert bond.percentage is None
        assert abs(sum(s.value for s in steps)) < _CENT

    def test_unheld_cash_target_ignored(self):
        steps = _rebalancer({"stock": 1000}, {"stock": 0.9, "cash": 0.1}).suggest_steps(include_unheld=True)
        assert [s.asset_type for s in steps] == [AssetType.STOCK]


class TestCheckDeviation:
    def test_reports_held_and_targeted_types(self):
        devs = _rebalancer({"stock": 750, "cash": 250}, {"stock": 0.5, "bond": 0.5}).check_deviation()
        assert devs[AssetType.STOCK]["deviation"] == _d("0.25")
        assert devs[AssetType.BOND]["current"] == Decimal("0")
        assert devs[AssetType.BOND]["deviation"] == _d("-0.5")
        assert devs[AssetType.CASH]["rebalanceable"] is False
