"""Tests for exchange-rate providers (network calls replaced with fakes)."""

import asyncio
from decimal import Decimal
from types import SimpleNamespace

import requests

from portfolio_dashboard.external import fx_fetcher
from portfolio_dashboard.external.fx_fetcher import (
    FrankfurterRateProvider,
    StaticRateProvider,
    YahooRateProvider,
)


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


class TestFrankfurter:
    def test_single_request_and_inverted_rates(self, monkeypatch):
        calls = []

        def fake_get(url, params=None, timeout=None):
            calls.append((url, params))
            return FakeResponse({"base": "EUR", "rates": {"USD": 1.25, "GBP": 0.8}})

        monkeypatch.setattr(fx_fetcher.requests, "get", fake_get)
        rates = asyncio.run(FrankfurterRateProvider().get_rates(["usd", "GBP", "EUR"], "eur"))

        assert calls == [(f"{fx_fetcher.FRANKFURTER_API}/latest", {"from": "EUR", "to": "USD,GBP"})]
        assert rates == {"USD": Decimal("0.8"), "GBP": Decimal("1.25")}

    def test_unpublished_currency_left_out(self, monkeypatch):
        monkeypatch.setattr(
            fx_fetcher.requests, "get",
            lambda url, params=None, timeout=None: FakeResponse({"rates": {"USD": 2}}),
        )
        rates = asyncio.run(FrankfurterRateProvider().get_rates(["USD", "BTC"], "EUR"))
        assert rates == {"USD": Decimal("0.5")}

    def test_http_error_returns_nothing(self, monkeypatch):
        monkeypatch.setattr(
            fx_fetcher.requests, "get",
            lambda url, params=None, timeout=None: FakeResponse({}, status=503),
        )
        assert asyncio.run(FrankfurterRateProvider().get_rates(["USD"], "EUR")) == {}

    def test_base_only_skips_request(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("no request expected")

        monkeypatch.setattr(fx_fetcher.requests, "get", fail)
        assert asyncio.run(FrankfurterRateProvider().get_rates(["EUR"], "EUR")) == {}


class TestYahoo:
    def test_pair_symbols(self, monkeypatch):
        quotes = {"USDEUR=X": 0.92, "BTCEUR=X": 61000.5}
        requested = []

        def fake_ticker(symbol):
            requested.append(symbol)
            if symbol not in quotes:
                raise ValueError(f"no data for {symbol}")
            return SimpleNamespace(fast_info=SimpleNamespace(last_price=quotes[symbol]))

        monkeypatch.setattr(fx_fetcher.yf, "Ticker", fake_ticker)
        rates = asyncio.run(YahooRateProvider().get_rates(["USD", "BTC", "XYZ"], "EUR"))

        assert requested == ["USDEUR=X", "BTCEUR=X", "XYZEUR=X"]
        assert rates == {"USD": Decimal("0.92"), "BTC": Decimal("61000.5")}


class TestStatic:
    def test_overrides_then_fallback(self):
        fallback = StaticRateProvider({"GBP": Decimal("1.15"), "USD": Decimal("0.5")})
        provider = StaticRateProvider({"usd": Decimal("0.9")}, fallback=fallback)
        rates = asyncio.run(provider.get_rates(["USD", "GBP", "JPY"], "EUR"))
        assert rates == {"USD": Decimal("0.9"), "GBP": Decimal("1.15")}
