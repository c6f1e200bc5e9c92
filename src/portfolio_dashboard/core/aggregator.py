"""Single-pass grouping of all holdings into base-currency totals.

The pass is pure: accounts and holdings are read, never modified, and a new
AllocationTotals snapshot is returned. Every grouping is keyed by the
holding's broad asset type, so a bond ETF and a government bond both land
in the BOND bucket.
"""

from decimal import Decimal

from .currency import CurrencyNormalizer
from .models import (
    Account,
    AllocationTotals,
    AssetType,
    HoldingValue,
    Region,
    classify_region,
)

_ZERO = Decimal("0")


def aggregate(accounts: list[Account], normalizer: CurrencyNormalizer) -> AllocationTotals:
    """Group every holding by asset type, currency, identity and region.

    Raises MissingRateError if a holding's currency has no rate; nothing is
    returned in that case.
    """
    total = _ZERO
    by_asset_type: dict[AssetType, Decimal] = {}
    by_currency: dict[str, Decimal] = {}
    by_asset_currency: dict[AssetType, dict[str, Decimal]] = {}
    by_holding: dict[AssetType, dict[str, HoldingValue]] = {}
    by_region: dict[AssetType, dict[Region, Decimal]] = {}

    for account in accounts:
        for h in account.holdings:
            currency = h.currency.upper()
            value = normalizer.value_in_base(h.current_value, currency)
            broad = h.asset_type.broad_type

            total += value
            by_currency[currency] = by_currency.get(currency, _ZERO) + value
            by_asset_type[broad] = by_asset_type.get(broad, _ZERO) + value

            currencies = by_asset_currency.setdefault(broad, {})
            currencies[currency] = currencies.get(currency, _ZERO) + value

            # Cash is grouped per currency, whatever the account calls it
            if broad.is_cash_like:
                key, name = currency, currency
            else:
                key, name = h.identity_key, h.display_name
            holdings = by_holding.setdefault(broad, {})
            existing = holdings.get(key)
            if existing is None:
                holdings[key] = HoldingValue(display_name=name, value=value)
            else:
                holdings[key] = HoldingValue(
                    display_name=existing.display_name, value=existing.value + value
                )

            if broad.is_stock_like or broad.is_bond_like:
                regions = by_region.setdefault(broad, {})
                # Weights may cover less than 100%; the rest stays unallocated
                for rw in h.region_weights:
                    region = classify_region(rw.region)
                    regions[region] = regions.get(region, _ZERO) + value * rw.weight

    return AllocationTotals(
        base_currency=normalizer.base_currency,
        total_value=total,
        by_asset_type=by_asset_type,
        by_currency=by_currency,
        by_asset_currency=by_asset_currency,
        by_holding=by_holding,
        by_region=by_region,
    )
