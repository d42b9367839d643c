"""Static description of the Graviex v3 exchange.

Everything the connector needs to know about the venue that does not come
from an API call lives here: endpoints, API version, timeframe codes, the
fee schedule, precision, default request limits and credentials.

Usage::

    from graviex.core.config import load_config

    config = load_config("config/graviex_config.json")
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Union

from graviex.core.models import Precision

DEFAULT_TIMEFRAMES: dict[str, str] = {
    "1m": "1",
    "5m": "5",
    "15m": "15",
    "30m": "30",
    "1h": "60",
    "2h": "120",
    "4h": "240",
    "6h": "360",
    "12h": "720",
    "1d": "1440",
    "3d": "4320",
    "1w": "10080",
}

DEFAULT_WITHDRAW_FEES: dict[str, float] = {
    "BTC": 0.0004,
    "ETH": 0.0055,
    "DOGE": 2.0,
    "NYC": 1.0,
    "XMR": 0.02,
    "PIVX": 0.2,
    "NEM": 0.05,
    "SCAVO": 5.0,
    "SEDO": 5.0,
    "USDT": 3.0,
    "GDM": 0.3,
    "PIRL": 0.005,
    "PK": 0.1,
    "ORM": 10.0,
    "NCP": 10.0,
    "ETM": 10.0,
    "USD": 0.0,
    "EUR": 0.0,
    "RUB": 0.0,
    "other": 0.002,
}

# Legacy tickers some venues still use, mapped to the codes used everywhere else.
DEFAULT_COMMON_CURRENCIES: dict[str, str] = {
    "XBT": "BTC",
    "BCC": "BCH",
    "DRK": "DASH",
    "BCHABC": "BCH",
    "BCHSV": "BSV",
}

PUBLIC_GET_ENDPOINTS = (
    "markets", "tickers", "order_book", "depth", "trades", "k",
    "k_with_pending_trades", "currency/info",
)
PRIVATE_GET_ENDPOINTS = (
    "members/me", "deposits", "deposit", "deposit_address", "withdraws",
    "orders", "order", "trades/my",
)
PRIVATE_POST_ENDPOINTS = (
    "orders", "orders/multi", "orders/clear", "order/delete", "create_withdraw",
)


@dataclass(frozen=True)
class TradingFees:
    maker: float = 0.0
    taker: float = 0.2 / 100
    percentage: bool = True


@dataclass(frozen=True)
class RequestLimits:
    order_book: int = 20
    trades: int = 20
    my_trades: int = 100
    ohlcv: int = 100      # the venue's own default of 30 is too short for most consumers
    orders: int = 100


@dataclass(frozen=True)
class GraviexConfig:
    version: str = "v3"
    api_url: str = "https://graviex.net"
    request_timeout: float = 10.0
    api_key: Optional[str] = None
    secret: Optional[Union[str, bytes]] = None
    timeframes: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TIMEFRAMES))
    trading_fees: TradingFees = field(default_factory=TradingFees)
    withdraw_fees: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WITHDRAW_FEES))
    common_currencies: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COMMON_CURRENCIES))
    precision: Precision = field(default_factory=Precision)
    min_amount: float = 0.001  # fallback when a market reports no base_min
    limits: RequestLimits = field(default_factory=RequestLimits)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key) and bool(self.secret)

    def common_currency_code(self, currency_id: Optional[str]) -> Optional[str]:
        if currency_id is None:
            return None
        return self.common_currencies.get(currency_id, currency_id)

    def withdraw_fee(self, code: str) -> float:
        return self.withdraw_fees.get(code, self.withdraw_fees.get("other", 0.0))

    @classmethod
    def from_dict(cls, data: dict) -> "GraviexConfig":
        """Build a config from a plain mapping (e.g. parsed JSON).

        Unknown keys are rejected so a typo in a config file does not silently
        fall back to a default. Nested sections (``trading_fees``,
        ``precision``, ``limits``) may be given partially.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        kwargs = dict(data)
        if "trading_fees" in kwargs:
            kwargs["trading_fees"] = TradingFees(**kwargs["trading_fees"])
        if "precision" in kwargs:
            raw = dict(kwargs["precision"])
            raw.setdefault("cost", raw.get("price", Precision.price))
            kwargs["precision"] = Precision(**raw)
        if "limits" in kwargs:
            kwargs["limits"] = RequestLimits(**kwargs["limits"])
        return cls(**kwargs)


def load_config(config_path: str | Path) -> GraviexConfig:
    """Load a :class:`GraviexConfig` from a JSON file.

    Args:
        config_path: Path to config JSON file

    Returns:
        The parsed configuration

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If the file contains unknown keys
    """
    with open(config_path, "r") as f:
        return GraviexConfig.from_dict(json.load(f))
