from urllib.parse import parse_qs, urlparse

import pytest

from graviex.core.config import GraviexConfig
from graviex.core.models import Market, Precision
from graviex.exchanges.graviex import GraviexAdapter
from graviex.exchanges.registry import MarketRegistry
from graviex.normalize.parsers import parse_markets

NONCE = 1700000000000

TICKERS = {
    "giobtc": {
        "name": "GIO/BTC",
        "base_unit": "gio",
        "quote_unit": "btc",
        "base_min": "0.001",
        "api": True,
        "wstatus": "on",
        "at": 1700000000,
        "buy": "99",
        "sell": "101",
        "low": "95",
        "high": "115",
        "last": "110",
        "open": "100",
        "volume": "1000",
        "volume2": "105000",
    },
    "ethbtc": {
        "name": "ETH/BTC",
        "base_unit": "eth",
        "quote_unit": "btc",
        "base_min": "0.01",
        "api": False,
        "wstatus": "on",
        "at": 1700000000,
        "buy": "0.05",
        "sell": "0.051",
        "last": "0.04",
        "open": "0.05",
        "volume": "10",
        "volume2": "0.5",
    },
}


class FakeTransport:
    """Routes ``(method, path)`` to canned ``(status, body)`` and records calls."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def __call__(self, url, method, body, headers):
        parsed = urlparse(url)
        path = parsed.path.replace("/api/v3/", "", 1)
        query = body if method == "POST" else parsed.query
        params = {k: v[0] for k, v in parse_qs(query or "").items()}
        self.calls.append((method, path, params))
        return self.routes[(method, path)]

    def calls_to(self, method, path):
        return [params for m, p, params in self.calls if (m, p) == (method, path)]


@pytest.fixture
def config():
    return GraviexConfig(api_key="my-key", secret="my-secret")


@pytest.fixture
def registry(config):
    return MarketRegistry(parse_markets(TICKERS, config))


@pytest.fixture
def transport():
    return FakeTransport({("GET", "tickers"): (200, TICKERS)})


@pytest.fixture
def adapter(config, transport):
    return GraviexAdapter(config, transport=transport, nonce=lambda: NONCE)


def make_market(market_id="giobtc", symbol="GIO/BTC", cost_precision=8):
    return Market(
        id=market_id,
        symbol=symbol,
        base=symbol.split("/")[0],
        quote=symbol.split("/")[1],
        base_id=symbol.split("/")[0],
        quote_id=symbol.split("/")[1],
        active=True,
        precision=Precision(amount=8, price=8, cost=cost_precision),
    )
