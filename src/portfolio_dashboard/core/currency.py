"""Conversion of holding values into the portfolio's base currency."""

import logging
from decimal import Decimal

from .exceptions import MissingRateError
from .interfaces import ExchangeRateProvider
from .models import Account

logger = logging.getLogger(__name__)


def required_currencies(accounts: list[Account], base_currency: str) -> list[str]:
    """Distinct foreign currencies held across all accounts, in first-seen order."""
    seen: dict[str, None] = {}
    for account in accounts:
        for h in account.holdings:
            code = h.currency.upper()
            if code != base_currency.upper():
                seen.setdefault(code, None)
    return list(seen)


async def fetch_rates(
    provider: ExchangeRateProvider,
    accounts: list[Account],
    base_currency: str,
) -> dict[str, Decimal]:
    """Request a rate for every observed currency in a single provider call.

    Raises MissingRateError for the first currency the provider could not quote.
    """
    base = base_currency.upper()
    currencies = required_currencies(accounts, base)
    rates: dict[str, Decimal] = {base: Decimal("1")}
    if not currencies:
        return rates

    fetched = await provider.get_rates(currencies, base)
    for code in currencies:
        rate = fetched.get(code)
        if rate is None:
            logger.warning("No %s/%s rate from %s", code, base, type(provider).__name__)
            raise MissingRateError(code)
        rates[code] = rate
    return rates


class CurrencyNormalizer:
    def __init__(self, rates: dict[str, Decimal], base_currency: str):
        self.base_currency = base_currency.upper()
        self._rates = {k.upper(): v for k, v in rates.items()}

    def rate(self, currency: str) -> Decimal:
        code = currency.upper()
        if code == self.base_currency:
            return Decimal("1")
        try:
            return self._rates[code]
        except KeyError:
            raise MissingRateError(code) from None

    def value_in_base(self, amount: Decimal, currency: str) -> Decimal:
        return amount * self.rate(currency)
