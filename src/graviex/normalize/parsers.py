"""
Graviex payload -> canonical record parsers.

Every parser is a pure function of the raw payload plus, where ids must be
resolved, a :class:`MarketRegistry` and an optional fallback market or
currency. Missing or malformed fields become None; nothing here raises on
incomplete data. Batch parsers handle each record on its own so one bad
entry never costs the rest of the response.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable, Optional, TypeVar

import ccxt

from graviex.core.config import GraviexConfig
from graviex.core.models import (
    Balance,
    BalanceEntry,
    Currency,
    DepositAddress,
    Market,
    Order,
    OrderBook,
    OrderFee,
    Ticker,
    Trade,
    Transaction,
    TransactionFee,
)
from graviex.exchanges.registry import MarketRegistry
from graviex.helpers.numeric_helper import (
    iso8601,
    parse_iso8601,
    round_to_precision,
    safe_float,
    safe_integer,
    safe_string,
    safe_value,
    seconds_to_ms,
    sum_known,
    to_float,
)
from graviex.normalize.status import parse_order_status, parse_transaction_status

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEPOSIT = "deposit"
WITHDRAWAL = "withdrawal"

_DEFAULT_CONFIG = GraviexConfig()


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _timestamp(raw: Any) -> Optional[int]:
    """``at`` (seconds) when present, otherwise ISO-8601 ``created_at``."""
    timestamp = seconds_to_ms(safe_integer(raw, "at"))
    if timestamp is None:
        timestamp = parse_iso8601(safe_value(raw, "created_at"))
    return timestamp


def _upper(value: Optional[str]) -> Optional[str]:
    return value.upper() if value is not None else None


def resolve_market(
    registry: Optional[MarketRegistry],
    market_id: Optional[str],
    fallback: Optional[Market] = None,
) -> Optional[Market]:
    market = registry.market_by_id(market_id) if registry is not None else None
    return market if market is not None else fallback


def _parse_each(items: Any, parse: Callable[[dict], T], kind: str) -> list[T]:
    if not isinstance(items, list):
        logger.warning(f"Expected a list of {kind} records, got {type(items).__name__}")
        return []
    result = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning(f"Skipping malformed {kind} record: {item!r}")
            continue
        result.append(parse(item))
    return result


def _since_limit(items: Iterable[T], stamp: Callable[[T], Optional[int]], since, limit) -> list[T]:
    result = sorted(items, key=lambda item: (stamp(item) is None, stamp(item) or 0))
    if since is not None:
        result = [item for item in result if stamp(item) is not None and stamp(item) >= since]
        if limit is not None:
            result = result[:limit]
    elif limit is not None:
        result = result[-limit:] if limit > 0 else []
    return result


def filter_by_since_limit(
    records: Iterable[T],
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> list[T]:
    """Sort by timestamp, keep records at or after *since*, cap at *limit*.

    Without *since* the most recent *limit* records are kept.
    """
    return _since_limit(records, lambda record: record.timestamp, since, limit)


# ---------------------------------------------------------------------------
# Markets and currencies
# ---------------------------------------------------------------------------

def parse_market(market_id: str, raw: dict, config: GraviexConfig = _DEFAULT_CONFIG) -> Market:
    """Build a market from one entry of the ``tickers`` response.

    The tickers payload is used instead of ``markets`` because it carries the
    ``api``/``wstatus`` flags. A market is active only when ``api`` is true
    and ``wstatus`` is exactly ``"on"``.
    """
    active = safe_value(raw, "api") is True and safe_string(raw, "wstatus") == "on"
    base_id = _upper(safe_string(raw, "base_unit"))
    quote_id = _upper(safe_string(raw, "quote_unit"))
    base = config.common_currency_code(base_id)
    quote = config.common_currency_code(quote_id)
    symbol = safe_string(raw, "name")
    if symbol is None and base is not None and quote is not None:
        symbol = f"{base}/{quote}"
    fees = config.trading_fees
    min_amount = safe_float(raw, "base_min")
    if min_amount is None:
        min_amount = config.min_amount
    return Market(
        id=market_id,
        symbol=symbol,
        base=base,
        quote=quote,
        base_id=base_id,
        quote_id=quote_id,
        active=active,
        min_amount=min_amount,
        maker=fees.maker,
        taker=fees.taker,
        percentage=fees.percentage,
        precision=config.precision,
        info=raw,
    )


def parse_markets(response: Any, config: GraviexConfig = _DEFAULT_CONFIG) -> list[Market]:
    if not isinstance(response, dict):
        logger.warning(f"Expected a mapping of markets, got {type(response).__name__}")
        return []
    markets = []
    for market_id, raw in response.items():
        if not isinstance(raw, dict):
            logger.warning(f"Skipping malformed market record {market_id}: {raw!r}")
            continue
        markets.append(parse_market(market_id, raw, config))
    return markets


def parse_currency(raw: dict, config: GraviexConfig = _DEFAULT_CONFIG) -> Currency:
    """Parse a ``currency/info`` response.

    Inactive when offline, else when delisting, else when withdrawals are not
    in use.
    """
    withdraw = safe_value(raw, "withdraw")
    inuse = safe_value(withdraw, "inuse")
    if safe_string(raw, "state") == "offline":
        active = False
    elif safe_value(raw, "delisting") is True:
        active = False
    elif not inuse:
        active = False
    else:
        active = True
    currency_id = safe_string(raw, "code")
    return Currency(
        id=currency_id,
        code=config.common_currency_code(_upper(currency_id)),
        name=safe_string(raw, "key"),
        active=active,
        fee=safe_float(withdraw, "fee"),
        withdraw_active=inuse,
        withdraw_max=safe_float(withdraw, "max"),
        info=raw,
    )


# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------

def parse_ticker(raw: dict, market: Optional[Market] = None) -> Ticker:
    symbol = market.symbol if market is not None else safe_string(raw, "name")
    timestamp = seconds_to_ms(safe_integer(raw, "at"))
    last = safe_float(raw, "last")
    open_ = safe_float(raw, "open")
    change = percentage = average = None
    if last is not None and open_ is not None:
        change = last - open_
        # Only rises get a percentage; a falling ticker reports None.
        if open_ > 0 and change > 0:
            percentage = change / open_ * 100
        average = (open_ + last) / 2
    return Ticker(
        symbol=symbol,
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        high=safe_float(raw, "high"),
        low=safe_float(raw, "low"),
        bid=safe_float(raw, "buy"),
        ask=safe_float(raw, "sell"),
        open=open_,
        close=last,
        last=last,
        change=change,
        percentage=percentage,
        average=average,
        base_volume=safe_float(raw, "volume"),
        quote_volume=safe_float(raw, "volume2"),
        info=raw,
    )


def parse_tickers(
    response: Any,
    registry: Optional[MarketRegistry] = None,
    symbols: Optional[Iterable[str]] = None,
) -> dict[str, Ticker]:
    """Parse the ``tickers`` mapping, keyed by symbol.

    Tickers whose market is missing from the registry are keyed by the raw
    ``name`` or, failing that, the native id.
    """
    if not isinstance(response, dict):
        logger.warning(f"Expected a mapping of tickers, got {type(response).__name__}")
        return {}
    result: dict[str, Ticker] = {}
    for market_id, raw in response.items():
        if not isinstance(raw, dict):
            logger.warning(f"Skipping malformed ticker record {market_id}: {raw!r}")
            continue
        ticker = parse_ticker(raw, resolve_market(registry, market_id))
        result[ticker.symbol or market_id] = ticker
    if symbols is not None:
        wanted = set(symbols)
        result = {symbol: t for symbol, t in result.items() if symbol in wanted}
    return result


def _parse_levels(levels: Any, descending: bool) -> list[tuple[float, Optional[float]]]:
    if not isinstance(levels, list):
        return []
    result = []
    for level in levels:
        price = safe_float(level, 0)
        if price is None:
            continue
        result.append((price, safe_float(level, 1)))
    result.sort(key=lambda level: level[0], reverse=descending)
    return result


def parse_order_book(raw: dict, symbol: Optional[str] = None) -> OrderBook:
    timestamp = seconds_to_ms(safe_integer(raw, "timestamp"))
    return OrderBook(
        symbol=symbol,
        bids=_parse_levels(safe_value(raw, "bids"), descending=True),
        asks=_parse_levels(safe_value(raw, "asks"), descending=False),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        info=raw,
    )


def parse_ohlcv(row: Any) -> list[Optional[float]]:
    """``[at_s, open, high, low, close, volume]`` -> same with ms and floats."""
    return [
        seconds_to_ms(safe_integer(row, 0)),
        safe_float(row, 1),
        safe_float(row, 2),
        safe_float(row, 3),
        safe_float(row, 4),
        safe_float(row, 5),
    ]


def parse_ohlcvs(
    rows: Any,
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> list[list[Optional[float]]]:
    if not isinstance(rows, list):
        logger.warning(f"Expected a list of candles, got {type(rows).__name__}")
        return []
    candles = []
    for row in rows:
        if not isinstance(row, (list, tuple)):
            logger.warning(f"Skipping malformed candle: {row!r}")
            continue
        candles.append(parse_ohlcv(row))
    return _since_limit(candles, lambda candle: candle[0], since, limit)


# ---------------------------------------------------------------------------
# Trades and orders
# ---------------------------------------------------------------------------

def parse_trade(
    raw: dict,
    registry: Optional[MarketRegistry] = None,
    market: Optional[Market] = None,
    default_cost_precision: int = _DEFAULT_CONFIG.precision.cost,
) -> Trade:
    """Parse a public or private trade.

    ``cost`` is ``price * amount`` rounded to the market's cost precision.
    """
    timestamp = _timestamp(raw)
    price = safe_float(raw, "price")
    amount = safe_float(raw, "volume")
    market = resolve_market(registry, safe_string(raw, "market"), market)
    symbol = market.symbol if market is not None else None
    cost = None
    if price is not None and amount is not None:
        precision = market.precision.cost if market is not None else default_cost_precision
        cost = round_to_precision(price * amount, precision)
    return Trade(
        id=safe_string(raw, "id"),
        order=safe_string(raw, "order_id"),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        symbol=symbol,
        side=safe_string(raw, "side"),
        price=price,
        amount=amount,
        cost=cost,
        info=raw,
    )


def parse_trades(
    raw_trades: Any,
    registry: Optional[MarketRegistry] = None,
    market: Optional[Market] = None,
    since: Optional[int] = None,
    limit: Optional[int] = None,
    default_cost_precision: int = _DEFAULT_CONFIG.precision.cost,
) -> list[Trade]:
    trades = _parse_each(
        raw_trades,
        lambda raw: parse_trade(raw, registry, market, default_cost_precision),
        "trade",
    )
    return filter_by_since_limit(trades, since, limit)


def parse_order(
    raw: dict,
    registry: Optional[MarketRegistry] = None,
    market: Optional[Market] = None,
) -> Order:
    timestamp = _timestamp(raw)
    market = resolve_market(registry, safe_string(raw, "market"), market)
    symbol = fee_currency = None
    if market is not None:
        symbol = market.symbol
        fee_currency = market.quote
    return Order(
        id=safe_string(raw, "id"),
        symbol=symbol,
        side=safe_string(raw, "side"),
        type=safe_string(raw, "ord_type"),
        status=parse_order_status(safe_string(raw, "state")),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        price=safe_float(raw, "price"),
        average=safe_float(raw, "avg_price"),
        amount=safe_float(raw, "volume"),
        filled=safe_float(raw, "executed_volume"),
        remaining=safe_float(raw, "remaining_volume"),
        trades=safe_integer(raw, "trades_count"),
        fee=OrderFee(currency=fee_currency),
        info=raw,
    )


def parse_orders(
    raw_orders: Any,
    registry: Optional[MarketRegistry] = None,
    market: Optional[Market] = None,
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> list[Order]:
    orders = _parse_each(raw_orders, lambda raw: parse_order(raw, registry, market), "order")
    return filter_by_since_limit(orders, since, limit)


# ---------------------------------------------------------------------------
# Funding
# ---------------------------------------------------------------------------

def parse_transaction(
    raw: dict,
    registry: Optional[MarketRegistry] = None,
    currency: Optional[Currency] = None,
    config: GraviexConfig = _DEFAULT_CONFIG,
) -> Transaction:
    """Parse a deposit or withdrawal.

    There is no type field: withdrawals are the records that carry a
    ``provider``. ``done_at`` is in seconds and may be ``"NULL"``, in which
    case the ISO-8601 ``created_at`` is used for the timestamp.
    """
    done_at = to_float(safe_value(raw, "done_at"))
    updated = seconds_to_ms(done_at)
    timestamp = updated if updated is not None else parse_iso8601(safe_value(raw, "created_at"))

    if currency is None:
        currency_id = _upper(safe_string(raw, "currency"))
        currency = registry.currency_by_id(currency_id) if registry is not None else None
        code = currency.code if currency is not None else config.common_currency_code(currency_id)
    else:
        code = currency.code

    fee_cost = safe_float(raw, "fee")
    amount = safe_float(raw, "amount")
    fee_rate = None
    if fee_cost is not None and amount is not None and fee_cost > 0 and amount > 0:
        fee_rate = fee_cost / amount

    return Transaction(
        id=safe_string(raw, "id"),
        txid=safe_string(raw, "txid"),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        updated=updated,
        currency=code,
        type=WITHDRAWAL if "provider" in raw else DEPOSIT,
        amount=amount,
        status=parse_transaction_status(safe_string(raw, "state")),
        fee=TransactionFee(currency=code, cost=fee_cost, rate=fee_rate),
        info=raw,
    )


def _id_sort_key(transaction: Transaction) -> tuple[int, int, str]:
    tx_id = transaction.id or ""
    if tx_id.isdigit():
        return (1, int(tx_id), "")
    return (0, 0, tx_id)


def parse_transactions(
    raw_transactions: Any,
    registry: Optional[MarketRegistry] = None,
    currency: Optional[Currency] = None,
    since: Optional[int] = None,
    limit: Optional[int] = None,
    config: GraviexConfig = _DEFAULT_CONFIG,
) -> list[Transaction]:
    """Parse a transaction list, newest id first."""
    transactions = _parse_each(
        raw_transactions,
        lambda raw: parse_transaction(raw, registry, currency, config),
        "transaction",
    )
    transactions.sort(key=_id_sort_key, reverse=True)
    if since is not None:
        transactions = [t for t in transactions if t.timestamp is not None and t.timestamp >= since]
    if limit is not None:
        transactions = transactions[:limit]
    return transactions


def parse_balance(
    response: Any,
    registry: Optional[MarketRegistry] = None,
    config: GraviexConfig = _DEFAULT_CONFIG,
) -> Balance:
    """Parse ``members/me`` into per-currency free/used/total."""
    currencies: dict[str, BalanceEntry] = {}
    accounts = safe_value(response, "accounts_filtered", [])
    if not isinstance(accounts, list):
        logger.warning(f"Expected accounts_filtered to be a list, got {type(accounts).__name__}")
        accounts = []
    for account in accounts:
        currency_id = _upper(safe_string(account, "currency"))
        if currency_id is None:
            logger.warning(f"Skipping balance entry without currency: {account!r}")
            continue
        currency = registry.currency_by_id(currency_id) if registry is not None else None
        code = currency.code if currency is not None and currency.code else config.common_currency_code(currency_id)
        free = safe_float(account, "balance")
        used = safe_float(account, "locked")
        currencies[code] = BalanceEntry(free=free, used=used, total=sum_known(free, used))
    return Balance(currencies=currencies, info=response)


def _decode_address(response: Any) -> tuple[Optional[str], Optional[str]]:
    # The venue JSON-encodes the address more than once.
    value = response
    while isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            break
        if not isinstance(decoded, (str, dict)):
            break
        value = decoded
    if isinstance(value, dict):
        return safe_string(value, "address"), safe_string(value, "tag")
    if isinstance(value, str):
        return value, None
    return None, None


def parse_deposit_address(response: Any, code: str) -> DepositAddress:
    address, tag = _decode_address(response)
    if not address or any(ch.isspace() for ch in address):
        raise ccxt.InvalidAddress(f"graviex3 returned an invalid {code} deposit address: {response!r}")
    return DepositAddress(currency=code, address=address, tag=tag, info=response)
