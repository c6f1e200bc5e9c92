"""Data models for the portfolio dashboard."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AssetType(int, Enum):
    # Broad types. The integer codes are persisted in the history series.
    CASH = 1
    STOCK = 2
    BOND = 3
    COMMODITY = 4
    CRYPTOCURRENCY = 5
    REAL_ESTATE = 6
    # Fine-grained types, folded into a broad type for every grouping
    DEPOSIT = 10
    MONEY_MARKET = 11
    STOCK_FUND = 20
    BOND_FUND = 30
    COMMODITY_FUND = 40

    @property
    def broad_type(self) -> "AssetType":
        return _BROAD_TYPES.get(self, self)

    @property
    def is_cash_like(self) -> bool:
        return self.broad_type == AssetType.CASH

    @property
    def is_stock_like(self) -> bool:
        return self.broad_type == AssetType.STOCK

    @property
    def is_bond_like(self) -> bool:
        return self.broad_type == AssetType.BOND

    @property
    def is_tradeable(self) -> bool:
        return not self.is_cash_like

    @classmethod
    def parse(cls, raw: str) -> "AssetType":
        """Accept a member name ("stock_fund") or an integer code ("20")."""
        raw = raw.strip()
        if raw.isdigit():
            return cls(int(raw))
        return cls[raw.upper().replace("-", "_")]


_BROAD_TYPES = {
    AssetType.DEPOSIT: AssetType.CASH,
    AssetType.MONEY_MARKET: AssetType.CASH,
    AssetType.STOCK_FUND: AssetType.STOCK,
    AssetType.BOND_FUND: AssetType.BOND,
    AssetType.COMMODITY_FUND: AssetType.COMMODITY,
}

BROAD_ASSET_TYPES: tuple[AssetType, ...] = (
    AssetType.CASH,
    AssetType.STOCK,
    AssetType.BOND,
    AssetType.COMMODITY,
    AssetType.CRYPTOCURRENCY,
    AssetType.REAL_ESTATE,
)

ASSET_TYPE_LABELS: dict[AssetType, str] = {
    AssetType.CASH: "Cash & Equivalents",
    AssetType.STOCK: "Stocks & Stock ETFs",
    AssetType.BOND: "Bonds & Bond ETFs",
    AssetType.COMMODITY: "Commodities & Commodity ETFs",
    AssetType.CRYPTOCURRENCY: "Cryptocurrencies",
    AssetType.REAL_ESTATE: "Real Estate",
    AssetType.DEPOSIT: "Deposit",
    AssetType.MONEY_MARKET: "Money Market Fund",
    AssetType.STOCK_FUND: "Stock ETF / Fund",
    AssetType.BOND_FUND: "Bond ETF / Fund",
    AssetType.COMMODITY_FUND: "Commodity ETF / Fund",
}


class Region(str, Enum):
    NORTH_AMERICA = "north_america"
    EUROPE = "europe"
    UNITED_KINGDOM = "united_kingdom"
    JAPAN = "japan"
    ASIA_PACIFIC = "asia_pacific"
    EMERGING_MARKETS = "emerging_markets"
    LATIN_AMERICA = "latin_america"
    MIDDLE_EAST_AFRICA = "middle_east_africa"
    OTHER = "other"


REGION_LABELS: dict[Region, str] = {
    Region.NORTH_AMERICA: "North America",
    Region.EUROPE: "Europe",
    Region.UNITED_KINGDOM: "United Kingdom",
    Region.JAPAN: "Japan",
    Region.ASIA_PACIFIC: "Asia Pacific",
    Region.EMERGING_MARKETS: "Emerging Markets",
    Region.LATIN_AMERICA: "Latin America",
    Region.MIDDLE_EAST_AFRICA: "Middle East & Africa",
    Region.OTHER: "Other",
}

# Detailed region / country names as they appear in fund factsheets
_REGION_CLASSIFICATION: dict[str, Region] = {
    "us": Region.NORTH_AMERICA,
    "usa": Region.NORTH_AMERICA,
    "united states": Region.NORTH_AMERICA,
    "canada": Region.NORTH_AMERICA,
    "north america": Region.NORTH_AMERICA,
    "europe": Region.EUROPE,
    "developed europe": Region.EUROPE,
    "eurozone": Region.EUROPE,
    "germany": Region.EUROPE,
    "france": Region.EUROPE,
    "netherlands": Region.EUROPE,
    "switzerland": Region.EUROPE,
    "italy": Region.EUROPE,
    "spain": Region.EUROPE,
    "sweden": Region.EUROPE,
    "denmark": Region.EUROPE,
    "uk": Region.UNITED_KINGDOM,
    "united kingdom": Region.UNITED_KINGDOM,
    "japan": Region.JAPAN,
    "asia pacific": Region.ASIA_PACIFIC,
    "australia": Region.ASIA_PACIFIC,
    "hong kong": Region.ASIA_PACIFIC,
    "singapore": Region.ASIA_PACIFIC,
    "new zealand": Region.ASIA_PACIFIC,
    "emerging markets": Region.EMERGING_MARKETS,
    "china": Region.EMERGING_MARKETS,
    "india": Region.EMERGING_MARKETS,
    "taiwan": Region.EMERGING_MARKETS,
    "south korea": Region.EMERGING_MARKETS,
    "latin america": Region.LATIN_AMERICA,
    "brazil": Region.LATIN_AMERICA,
    "mexico": Region.LATIN_AMERICA,
    "middle east": Region.MIDDLE_EAST_AFRICA,
    "africa": Region.MIDDLE_EAST_AFRICA,
    "south africa": Region.MIDDLE_EAST_AFRICA,
    "saudi arabia": Region.MIDDLE_EAST_AFRICA,
}


def classify_region(name: str) -> Region:
    """Map a detailed region or country name to its classification region."""
    key = name.strip().lower().replace("_", " ")
    try:
        return Region(key.replace(" ", "_"))
    except ValueError:
        return _REGION_CLASSIFICATION.get(key, Region.OTHER)


@dataclass(frozen=True)
class RegionWeight:
    region: str
    weight: Decimal  # fraction of the holding's value, 0..1


@dataclass
class Holding:
    currency: str
    asset_type: AssetType
    quantity: Decimal = Decimal("0")
    price: Optional[Decimal] = None
    description: str = ""
    symbol: str = ""  # e.g. "XETRA:VWCE" or "AAPL"
    region_weights: tuple[RegionWeight, ...] = ()
    account_id: Optional[int] = None
    id: Optional[int] = None

    @property
    def current_value(self) -> Decimal:
        # Unpriced holdings (cash, manually valued assets) carry their amount in quantity
        if self.price is None:
            return self.quantity
        return self.quantity * self.price

    @property
    def short_symbol(self) -> str:
        return self.symbol.split(":")[-1].strip().upper()

    @property
    def identity_key(self) -> str:
        if self.asset_type.is_tradeable and self.symbol:
            return self.short_symbol
        return self.description.upper()

    @property
    def display_name(self) -> str:
        return self.description or self.short_symbol


@dataclass
class Account:
    name: str
    holdings: list[Holding] = field(default_factory=list)
    description: str = ""
    id: Optional[int] = None


@dataclass(frozen=True)
class HoldingValue:
    display_name: str
    value: Decimal


@dataclass(frozen=True)
class AllocationTotals:
    """Everything the dashboard groups by, in base currency."""
    base_currency: str
    total_value: Decimal
    by_asset_type: dict[AssetType, Decimal]
    by_currency: dict[str, Decimal]
    by_asset_currency: dict[AssetType, dict[str, Decimal]]
    by_holding: dict[AssetType, dict[str, HoldingValue]]
    by_region: dict[AssetType, dict[Region, Decimal]]


@dataclass(frozen=True)
class RebalanceStep:
    asset_type: AssetType
    asset_name: str
    value: Decimal  # positive = buy, negative = sell
    percentage: Optional[Decimal]  # fraction of the currently held value, None if not held

    @property
    def action(self) -> str:
        return "buy" if self.value > 0 else "sell"


@dataclass(frozen=True)
class GoalProgress:
    title: str
    target_value: Decimal
    completed_pct: Decimal
    remaining_pct: Decimal


@dataclass(frozen=True)
class AssetValue:
    asset_type: AssetType
    value: Decimal


@dataclass(frozen=True)
class HistoryEntry:
    date: date
    value: Decimal
    assets: tuple[AssetValue, ...] = ()

    def value_for(self, asset_type: AssetType) -> Decimal:
        for a in self.assets:
            if a.asset_type == asset_type:
                return a.value
        return Decimal("0")


@dataclass
class PortfolioHistory:
    entries: list[HistoryEntry] = field(default_factory=list)


@dataclass(frozen=True)
class HistoryChart:
    labels: tuple[str, ...]
    series: dict[AssetType, tuple[Decimal, ...]]
