"""Wiring shared by the CLI commands: stores, rate providers and the dashboard service."""

from decimal import Decimal, InvalidOperation
from typing import Optional

import typer

from ..core.config import JsonConfigStore, PortfolioConfig
from ..core.history import HistoryManager
from ..core.interfaces import ExchangeRateProvider
from ..core.models import AssetType
from ..data.repositories.accounts_repo import AccountsRepository
from ..data.repositories.history_repo import HistoryRepository
from ..external.fx_fetcher import FrankfurterRateProvider, StaticRateProvider, YahooRateProvider
from ..services.dashboard import DashboardService

RATE_SOURCES = ("frankfurter", "yahoo", "static")

config_store = JsonConfigStore()


def parse_decimal(raw: str, what: str) -> Decimal:
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise typer.BadParameter(f"Invalid {what}: {raw!r}")


def parse_asset_type(raw: str) -> AssetType:
    try:
        return AssetType.parse(raw)
    except (KeyError, ValueError):
        choices = ", ".join(t.name.lower() for t in AssetType)
        raise typer.BadParameter(f"Unknown asset type {raw!r}. Choose from: {choices}")


def parse_pairs(pairs: Optional[list[str]], what: str) -> dict[str, Decimal]:
    """Parse repeated KEY=VALUE options."""
    result: dict[str, Decimal] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE for {what}, got {pair!r}")
        result[key.strip()] = parse_decimal(value.strip(), what)
    return result


def rate_provider(source: str, overrides: Optional[list[str]] = None) -> ExchangeRateProvider:
    if source not in RATE_SOURCES:
        raise typer.BadParameter(f"Rate source must be one of: {', '.join(RATE_SOURCES)}")
    fixed = parse_pairs(overrides, "--rate")
    if source == "static":
        return StaticRateProvider(fixed)
    live = YahooRateProvider() if source == "yahoo" else FrankfurterRateProvider()
    return StaticRateProvider(fixed, fallback=live) if fixed else live


def build_service(
    source: str = "frankfurter",
    overrides: Optional[list[str]] = None,
    config: Optional[PortfolioConfig] = None,
    include_unheld: bool = False,
) -> DashboardService:
    return DashboardService(
        accounts=AccountsRepository(),
        rates=rate_provider(source, overrides),
        history=HistoryManager(HistoryRepository()),
        config=config or config_store.load(),
        include_unheld=include_unheld,
    )
