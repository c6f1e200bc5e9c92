"""Tests for asset type classification, holding identity and region mapping."""

from decimal import Decimal

import pytest

from portfolio_dashboard.core.models import (
    AssetType,
    AssetValue,
    HistoryEntry,
    Holding,
    Region,
    classify_region,
)


class TestAssetType:
    def test_fine_types_fold_into_broad_types(self):
        assert AssetType.STOCK_FUND.broad_type == AssetType.STOCK
        assert AssetType.BOND_FUND.broad_type == AssetType.BOND
        assert AssetType.COMMODITY_FUND.broad_type == AssetType.COMMODITY
        assert AssetType.CRYPTOCURRENCY.broad_type == AssetType.CRYPTOCURRENCY

    def test_cash_equivalents_are_cash_like(self):
        assert AssetType.CASH.is_cash_like
        assert AssetType.DEPOSIT.is_cash_like
        assert AssetType.MONEY_MARKET.is_cash_like
        assert not AssetType.STOCK.is_cash_like

    def test_parse_by_name_or_code(self):
        assert AssetType.parse("stock_fund") == AssetType.STOCK_FUND
        assert AssetType.parse("Cryptocurrency") == AssetType.CRYPTOCURRENCY
        assert AssetType.parse("3") == AssetType.BOND

    def test_parse_unknown(self):
        with pytest.raises(KeyError):
            AssetType.parse("tulips")


class TestHoldingIdentity:
    def test_tradeable_uses_short_symbol(self):
        h = Holding(currency="EUR", asset_type=AssetType.STOCK_FUND,
                    symbol="xetra:vwce", description="Vanguard FTSE All-World")
        assert h.identity_key == "VWCE"
        assert h.display_name == "Vanguard FTSE All-World"

    def test_without_symbol_uses_description(self):
        h = Holding(currency="EUR", asset_type=AssetType.COMMODITY, description="Gold bar")
        assert h.identity_key == "GOLD BAR"

    def test_cash_ignores_symbol(self):
        h = Holding(currency="USD", asset_type=AssetType.CASH, symbol="X", description="Checking")
        assert h.identity_key == "CHECKING"

    def test_current_value(self):
        priced = Holding(currency="USD", asset_type=AssetType.STOCK,
                         quantity=Decimal("10"), price=Decimal("12.5"))
        cash = Holding(currency="USD", asset_type=AssetType.CASH, quantity=Decimal("300"))
        assert priced.current_value == Decimal("125.0")
        assert cash.current_value == Decimal("300")


class TestClassifyRegion:
    @pytest.mark.parametrize("name, region", [
        ("United States", Region.NORTH_AMERICA),
        ("Developed Europe", Region.EUROPE),
        ("UK", Region.UNITED_KINGDOM),
        ("emerging_markets", Region.EMERGING_MARKETS),
        ("China", Region.EMERGING_MARKETS),
        ("Atlantis", Region.OTHER),
    ])
    def test_mapping(self, name, region):
        assert classify_region(name) == region


def test_history_entry_missing_asset_type_is_zero():
    e = HistoryEntry(date=None, value=Decimal("10"),
                     assets=(AssetValue(AssetType.STOCK, Decimal("10")),))
    assert e.value_for(AssetType.STOCK) == Decimal("10")
    assert e.value_for(AssetType.BOND) == Decimal("0")
