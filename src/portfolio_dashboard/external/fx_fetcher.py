"""Exchange-rate providers: Frankfurter (ECB) API, Yahoo Finance FX pairs, static tables."""

import asyncio
import logging
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Optional

import requests
import yfinance as yf

from ..core.interfaces import ExchangeRateProvider

logger = logging.getLogger(__name__)

FRANKFURTER_API = "https://api.frankfurter.app"


class FrankfurterRateProvider(ExchangeRateProvider):
    """ECB reference rates via frankfurter.app (free, no API key).

    All currencies are resolved in a single request. Currencies the ECB does
    not publish (e.g. crypto) are left out of the result.
    """

    def __init__(self, timeout: float = 10):
        self.timeout = timeout

    async def get_rates(self, currencies: Iterable[str], base: str) -> dict[str, Decimal]:
        wanted = [c.upper() for c in currencies if c.upper() != base.upper()]
        if not wanted:
            return {}
        return await asyncio.to_thread(self._fetch, wanted, base.upper())

    def _fetch(self, currencies: list[str], base: str) -> dict[str, Decimal]:
        try:
            resp = requests.get(
                f"{FRANKFURTER_API}/latest",
                params={"from": base, "to": ",".join(currencies)},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            quoted = resp.json().get("rates", {})
        except (requests.RequestException, ValueError) as e:
            logger.warning("Frankfurter request for %s failed: %s", ",".join(currencies), e)
            return {}

        # The API quotes units of `currency` per 1 base; we need base per 1 currency
        results: dict[str, Decimal] = {}
        for code in currencies:
            raw = quoted.get(code)
            if not raw:
                continue
            results[code] = Decimal("1") / Decimal(str(raw))
        return results


class YahooRateProvider(ExchangeRateProvider):
    """FX rates from Yahoo Finance "{CUR}{BASE}=X" pairs; also covers crypto like BTC."""

    async def get_rates(self, currencies: Iterable[str], base: str) -> dict[str, Decimal]:
        wanted = [c.upper() for c in currencies if c.upper() != base.upper()]
        if not wanted:
            return {}
        return await asyncio.to_thread(self._fetch_batch, wanted, base.upper())

    @staticmethod
    def _pair_symbol(currency: str, base: str) -> str:
        return f"{currency}{base}=X"

    @staticmethod
    def _try_fetch(symbol: str) -> Optional[Decimal]:
        """Last price for one pair, or None when Yahoo has no quote."""
        ticker = yf.Ticker(symbol)
        try:
            price = getattr(ticker.fast_info, "last_price", None)
            if price is not None and price > 0:
                return Decimal(str(price))
        except (KeyError, AttributeError, ValueError, InvalidOperation) as e:
            logger.debug("fast_info unavailable for %s: %s", symbol, e)
        hist = ticker.history(period="5d")
        if not hist.empty:
            return Decimal(str(hist["Close"].iloc[-1]))
        return None

    def _fetch_batch(self, currencies: list[str], base: str) -> dict[str, Decimal]:
        results: dict[str, Decimal] = {}
        for code in currencies:
            symbol = self._pair_symbol(code, base)
            try:
                rate = self._try_fetch(symbol)
            except Exception as e:  # yfinance raises a wide range of errors on network issues
                logger.warning("Could not fetch %s: %s", symbol, e)
                continue
            if rate is not None:
                results[code] = rate
        return results


class StaticRateProvider(ExchangeRateProvider):
    """Rates from a fixed table ({currency: rate to base}), e.g. from command-line overrides."""

    def __init__(self, rates: dict[str, Decimal], fallback: Optional[ExchangeRateProvider] = None):
        self.rates = {k.upper(): v for k, v in rates.items()}
        self.fallback = fallback

    async def get_rates(self, currencies: Iterable[str], base: str) -> dict[str, Decimal]:
        wanted = [c.upper() for c in currencies]
        results = {c: self.rates[c] for c in wanted if c in self.rates}
        missing = [c for c in wanted if c not in results]
        if missing and self.fallback is not None:
            results.update(await self.fallback.get_rates(missing, base))
        return results
