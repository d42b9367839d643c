"""
Graviex v3 exchange adapter.

Composes the request signer, a transport, the error classifier and the
payload parsers into ccxt-style ``fetch_*`` / ``create_order`` /
``cancel_order`` calls returning canonical records.

Usage::

    from graviex.core.config import load_config
    from graviex.exchanges.graviex import GraviexAdapter

    adapter = GraviexAdapter(load_config("config/graviex_config.json"))
    adapter.load_markets()
    ticker = adapter.fetch_ticker("GIO/BTC")
    balance = adapter.fetch_balance()
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import ccxt
import pandas as pd

from graviex.core.config import (
    PRIVATE_GET_ENDPOINTS,
    PRIVATE_POST_ENDPOINTS,
    PUBLIC_GET_ENDPOINTS,
    GraviexConfig,
)
from graviex.core.models import (
    Balance,
    Currency,
    DepositAddress,
    Market,
    Order,
    OrderBook,
    Ticker,
    Trade,
    Transaction,
)
from graviex.exchanges.base import ExchangeAdapter
from graviex.exchanges.errors import classify_error
from graviex.exchanges.registry import MarketRegistry
from graviex.exchanges.signer import PRIVATE, PUBLIC, RequestSigner, milliseconds
from graviex.exchanges.transport import HttpTransport, Transport
from graviex.helpers.data_helper import ohlcv_to_frame
from graviex.helpers.numeric_helper import amount_to_precision, price_to_precision
from graviex.normalize.parsers import (
    parse_balance,
    parse_currency,
    parse_deposit_address,
    parse_markets,
    parse_ohlcvs,
    parse_order,
    parse_order_book,
    parse_orders,
    parse_tickers,
    parse_trades,
    parse_transactions,
)
from graviex.normalize.status import OrderStatus, order_status_to_native

_ENDPOINTS = {
    (PUBLIC, "GET"): PUBLIC_GET_ENDPOINTS,
    (PRIVATE, "GET"): PRIVATE_GET_ENDPOINTS,
    (PRIVATE, "POST"): PRIVATE_POST_ENDPOINTS,
}


class GraviexAdapter(ExchangeAdapter):
    """
    REST connector for Graviex v3.

    Parameters
    ----------
    config : GraviexConfig, optional
        Venue description and credentials. Defaults describe the public API.
    transport : callable, optional
        ``issue(url, method, body, headers) -> (status, json)``. Defaults to
        :class:`HttpTransport`.
    registry : MarketRegistry, optional
        Shared market/currency tables. A fresh one is created if omitted.
    nonce : callable, optional
        Millisecond clock used for ``tonce``.
    logger : logging.Logger, optional
    """

    def __init__(
        self,
        config: Optional[GraviexConfig] = None,
        transport: Optional[Transport] = None,
        registry: Optional[MarketRegistry] = None,
        nonce: Callable[[], int] = milliseconds,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or GraviexConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.registry = registry or MarketRegistry()
        self.signer = RequestSigner(
            self.config.api_url,
            self.config.version,
            api_key=self.config.api_key,
            secret=self.config.secret,
            nonce=nonce,
        )
        # Only a transport built here is closed by close().
        self._owns_transport = transport is None
        self.transport = transport or HttpTransport(timeout=self.config.request_timeout, logger=self.logger)
        # Orders this adapter created, keyed by id, as last seen.
        self.orders: dict[str, Order] = {}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def request(self, path: str, api: str = PUBLIC, method: str = "GET", params: Optional[dict] = None) -> Any:
        """Sign, send and classify one call. Returns the decoded body."""
        method = method.upper()
        if path not in _ENDPOINTS.get((api, method), ()):
            raise ccxt.NotSupported(f"graviex3 has no {api} {method} endpoint {path}")

        signed = self.signer.sign(path, api, method, params)
        self.logger.debug(f"{api} {method} {path} params={params or {}}")
        status, body = self.transport(signed.url, signed.method, signed.body, signed.headers)

        failure = classify_error(status, body)
        if failure is not None:
            self.logger.warning(f"{method} {path} failed (HTTP {status}): {type(failure).__name__}: {failure}")
            raise failure
        return body

    def public_get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request(path, PUBLIC, "GET", params)

    def private_get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request(path, PRIVATE, "GET", params)

    def private_post(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request(path, PRIVATE, "POST", params)

    def _market_or_none(self, symbol: Optional[str]) -> Optional[Market]:
        return self.registry.market(symbol) if symbol is not None else None

    def _cost_precision(self) -> int:
        return self.config.precision.cost

    # ------------------------------------------------------------------
    # Markets and currencies
    # ------------------------------------------------------------------

    def fetch_markets(self) -> list[Market]:
        # ``tickers`` rather than ``markets``: only it carries the api/wstatus flags.
        response = self.public_get("tickers")
        return parse_markets(response, self.config)

    def load_markets(self, reload: bool = False) -> dict[str, Market]:
        if self.registry.loaded and not reload:
            return self.registry.markets
        markets = self.fetch_markets()
        self.registry.replace_markets(markets)
        active = sum(1 for m in markets if m.active)
        self.logger.info(f"Loaded {len(markets)} graviex3 markets ({active} active).")
        return self.registry.markets

    def fetch_currency(self, code: str) -> Currency:
        self.load_markets()
        currency_id = self.registry.currency_id(code)
        return self.fetch_currency_by_id(currency_id.lower())

    def fetch_currency_by_id(self, currency_id: str) -> Currency:
        response = self.public_get("currency/info", {"currency": currency_id})
        currency = parse_currency(response, self.config)
        self.registry.add_currency(currency)
        return currency

    def withdraw_fees(self) -> dict[str, float]:
        """Static withdrawal fee schedule published by the venue."""
        return dict(self.config.withdraw_fees)

    # ------------------------------------------------------------------
    # Market data
    # ------------------------------------------------------------------

    def fetch_tickers(self, symbols: Optional[list[str]] = None) -> dict[str, Ticker]:
        self.load_markets()
        response = self.public_get("tickers")
        return parse_tickers(response, self.registry, symbols)

    def fetch_ticker(self, symbol: str) -> Ticker:
        self.load_markets()
        market = self.registry.market(symbol)
        tickers = self.fetch_tickers([market.symbol])
        ticker = tickers.get(market.symbol)
        if ticker is None:
            raise ccxt.ExchangeError(f"graviex3 returned no ticker for {market.symbol}")
        return ticker

    def fetch_order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        self.load_markets()
        market = self.registry.market(symbol)
        if limit is None:
            limit = self.config.limits.order_book
        response = self.public_get("depth", {"market": market.id, "limit": limit})
        return parse_order_book(response, market.symbol)

    def fetch_trades(self, symbol: str, since: Optional[int] = None, limit: Optional[int] = None) -> list[Trade]:
        self.load_markets()
        market = self.registry.market(symbol)
        if limit is None:
            limit = self.config.limits.trades
        response = self.public_get("trades", {"market": market.id, "limit": limit})
        return parse_trades(response, self.registry, market, since, limit, self._cost_precision())

    def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "5m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[list]:
        """Candles as ``[timestamp_ms, open, high, low, close, volume]``."""
        self.load_markets()
        market = self.registry.market(symbol)
        period = self.config.timeframes.get(timeframe)
        if period is None:
            raise ccxt.BadRequest(
                f"graviex3 does not support timeframe {timeframe}; "
                f"expected one of {list(self.config.timeframes)}"
            )
        if limit is None:
            limit = self.config.limits.ohlcv
        request = {"market": market.id, "period": period, "limit": limit}
        if since is not None:
            request["timestamp"] = since // 1000
        response = self.public_get("k", request)
        return parse_ohlcvs(response, since, limit)

    def fetch_ohlcv_frame(
        self,
        symbol: str,
        timeframe: str = "5m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> pd.DataFrame:
        return ohlcv_to_frame(self.fetch_ohlcv(symbol, timeframe, since, limit))

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def fetch_balance(self) -> Balance:
        self.load_markets()
        response = self.private_get("members/me")
        return parse_balance(response, self.registry, self.config)

    def fetch_my_trades(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Trade]:
        self.load_markets()
        if limit is None:
            limit = self.config.limits.my_trades
        request: dict[str, Any] = {"limit": limit}
        market = self._market_or_none(symbol)
        if market is not None:
            request["market"] = market.id
        if since is not None:
            request["since"] = since // 1000
        response = self.private_get("trades/my", request)
        return parse_trades(response, self.registry, market, since, limit, self._cost_precision())

    def fetch_deposit_address(self, code: str) -> DepositAddress:
        currency_id = self.registry.currency_id(code)
        response = self.private_get("deposit_address", {"currency": currency_id.lower()})
        return parse_deposit_address(response, code)

    def create_deposit_address(self, code: str) -> DepositAddress:
        # The venue generates an address on first request.
        return self.fetch_deposit_address(code)

    def _transactions(
        self,
        path: str,
        code: Optional[str],
        since: Optional[int],
        limit: Optional[int],
    ) -> list[Transaction]:
        self.load_markets()
        request: dict[str, Any] = {}
        currency = None
        if code is not None:
            currency_id = self.registry.currency_id(code)
            request["currency"] = currency_id.lower()
            currency = self.registry.currency_by_id(currency_id)
        if limit is not None:
            request["limit"] = limit
        response = self.private_get(path, request)
        return parse_transactions(response, self.registry, currency, since, limit, self.config)

    def fetch_deposits(self, code: Optional[str] = None, since: Optional[int] = None, limit: Optional[int] = None) -> list[Transaction]:
        return self._transactions("deposits", code, since, limit)

    def fetch_withdrawals(self, code: Optional[str] = None, since: Optional[int] = None, limit: Optional[int] = None) -> list[Transaction]:
        if code is None:
            raise ccxt.ArgumentsRequired("graviex3 fetch_withdrawals() requires a currency code argument")
        return self._transactions("withdraws", code, since, limit)

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def fetch_order(self, id: str, symbol: Optional[str] = None) -> Order:
        self.load_markets()
        market = self._market_or_none(symbol)
        response = self.private_get("order", {"id": id})
        return parse_order(response, self.registry, market)

    def fetch_orders_by_status(
        self,
        status: str,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Order]:
        self.load_markets()
        if limit is None:
            limit = self.config.limits.orders
        request: dict[str, Any] = {
            "page": 1,
            "limit": limit,
            "state": order_status_to_native(status),
        }
        market = self._market_or_none(symbol)
        if market is not None:
            request["market"] = market.id
        response = self.private_get("orders", request)
        return parse_orders(response, self.registry, market, since, limit)

    def fetch_open_orders(self, symbol: Optional[str] = None, since: Optional[int] = None, limit: Optional[int] = None) -> list[Order]:
        return self.fetch_orders_by_status(OrderStatus.OPEN.value, symbol, since, limit)

    def fetch_closed_orders(self, symbol: Optional[str] = None, since: Optional[int] = None, limit: Optional[int] = None) -> list[Order]:
        return self.fetch_orders_by_status(OrderStatus.CLOSED.value, symbol, since, limit)

    def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: Optional[float] = None,
    ) -> Order:
        self.load_markets()
        market = self.registry.market(symbol)
        request: dict[str, Any] = {
            "market": market.id,
            "volume": amount_to_precision(amount, market.precision.amount),
            "side": side,
        }
        if price is not None:
            request["price"] = price_to_precision(price, market.precision.price)
        if type is not None:
            request["ord_type"] = type
        response = self.private_post("orders", request)
        order = parse_order(response, self.registry, market)
        if order.id is not None:
            self.orders[order.id] = order
        self.logger.info(
            f"[{market.symbol}] order created: id={order.id}, side={side}, "
            f"type={type}, amount={request['volume']}, price={request.get('price')}"
        )
        return order

    def cancel_order(self, id: str, symbol: Optional[str] = None) -> Order:
        self.load_markets()
        self.private_post("order/delete", {"id": id})
        self.logger.info(f"Cancel requested for order {id}")
        order = self.fetch_order(id, symbol)
        if id in self.orders:
            self.orders[id] = order
        return order

    def cancel_all_orders(self, side: Optional[str] = None) -> list[Order]:
        """Cancel every open order, optionally only one side. Returns the cancelled orders."""
        self.load_markets()
        request = {"side": side} if side is not None else {}
        response = self.private_post("orders/clear", request)
        orders = parse_orders(response, self.registry)
        self.logger.info(f"Cancelled {len(orders)} open orders.")
        return orders

    def close(self) -> None:
        """Release the HTTP session if this adapter created it."""
        if self._owns_transport:
            self.transport.close()
