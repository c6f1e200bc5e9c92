"""Allocation percentages for display.

All functions are pure. Ordering is always produced by an explicit sort on
the percentage (descending, ties keep their input order), never by relying
on dict iteration order.
"""

from collections.abc import Hashable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import TypeVar

from .models import ASSET_TYPE_LABELS, REGION_LABELS, AllocationTotals, AssetType

K = TypeVar("K", bound=Hashable)

_CENT = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def to_percentage(value: Decimal, denominator: Decimal) -> Decimal:
    return round2(value / denominator * 100)


def percentages_of(totals: Mapping[K, Decimal], denominator: Decimal) -> list[tuple[K, Decimal]]:
    """Turn grouped totals into (key, percentage) pairs, largest first.

    Returns an empty list when the denominator is zero.
    """
    if denominator == 0:
        return []
    result = [(key, to_percentage(value, denominator)) for key, value in totals.items()]
    # sorted() is stable, so ties keep their original order
    return sorted(result, key=lambda kv: kv[1], reverse=True)


def asset_allocation(totals: AllocationTotals) -> list[tuple[str, Decimal]]:
    """Share of each broad asset type in the whole portfolio."""
    return [
        (ASSET_TYPE_LABELS[asset_type], pct)
        for asset_type, pct in percentages_of(totals.by_asset_type, totals.total_value)
    ]


def currency_allocation(totals: AllocationTotals) -> list[tuple[str, Decimal]]:
    return percentages_of(totals.by_currency, totals.total_value)


def asset_currency_allocation(totals: AllocationTotals, asset_type: AssetType) -> list[tuple[str, Decimal]]:
    """Currency split within one asset type (e.g. stocks held in USD vs EUR)."""
    currencies = totals.by_asset_currency.get(asset_type)
    if not currencies:
        return []
    return percentages_of(currencies, totals.by_asset_type[asset_type])


def region_allocation(totals: AllocationTotals, asset_type: AssetType) -> list[tuple[str, Decimal]]:
    """Geographic split within one asset type.

    Percentages are relative to the asset type's total, so regions only sum
    to 100 when every holding's weights are complete.
    """
    regions = totals.by_region.get(asset_type)
    if not regions:
        return []
    return [
        (REGION_LABELS[region], pct)
        for region, pct in percentages_of(regions, totals.by_asset_type[asset_type])
    ]


def holding_allocation(totals: AllocationTotals, asset_type: AssetType) -> list[tuple[str, Decimal]]:
    """Share of each individual holding within one asset type."""
    holdings = totals.by_holding.get(asset_type)
    if not holdings:
        return []
    values = {key: hv.value for key, hv in holdings.items()}
    return [
        (holdings[key].display_name, pct)
        for key, pct in percentages_of(values, totals.by_asset_type[asset_type])
    ]
