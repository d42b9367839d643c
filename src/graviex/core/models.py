from dataclasses import dataclass, field
from typing import Any, Optional

# Every record keeps the raw exchange payload it was built from in ``info``.
# Numeric fields are None when the exchange did not send a usable number.


@dataclass(frozen=True)
class Precision:
    amount: int = 8
    price: int = 8
    cost: int = 8


@dataclass(frozen=True)
class Market:
    id: str                    # native id, e.g. "giobtc"
    symbol: Optional[str]      # canonical, e.g. "GIO/BTC"
    base: Optional[str]
    quote: Optional[str]
    base_id: Optional[str]
    quote_id: Optional[str]
    active: bool
    min_amount: Optional[float] = None
    maker: Optional[float] = None
    taker: Optional[float] = None
    percentage: bool = True
    precision: Precision = field(default_factory=Precision)
    info: Any = None


@dataclass(frozen=True)
class Currency:
    id: Optional[str]
    code: Optional[str]
    name: Optional[str]
    active: bool
    fee: Optional[float] = None
    withdraw_active: Any = None
    withdraw_max: Optional[float] = None
    info: Any = None


@dataclass(frozen=True)
class Ticker:
    symbol: Optional[str]
    timestamp: Optional[int]   # ms since epoch
    datetime: Optional[str]
    high: Optional[float] = None
    low: Optional[float] = None
    bid: Optional[float] = None
    ask: Optional[float] = None
    open: Optional[float] = None
    close: Optional[float] = None
    last: Optional[float] = None
    change: Optional[float] = None
    percentage: Optional[float] = None
    average: Optional[float] = None
    base_volume: Optional[float] = None
    quote_volume: Optional[float] = None
    info: Any = None


@dataclass(frozen=True)
class OrderBook:
    symbol: Optional[str]
    bids: list[tuple[float, Optional[float]]]   # best (highest) first
    asks: list[tuple[float, Optional[float]]]   # best (lowest) first
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    info: Any = None


@dataclass(frozen=True)
class Trade:
    id: Optional[str]
    order: Optional[str]
    timestamp: Optional[int]
    datetime: Optional[str]
    symbol: Optional[str]
    side: Optional[str]
    price: Optional[float]
    amount: Optional[float]
    cost: Optional[float]
    info: Any = None


@dataclass(frozen=True)
class OrderFee:
    currency: Optional[str]
    cost: Optional[float] = None


@dataclass(frozen=True)
class Order:
    id: Optional[str]
    symbol: Optional[str]
    side: Optional[str]
    type: Optional[str]
    status: Optional[str]
    timestamp: Optional[int]
    datetime: Optional[str]
    price: Optional[float] = None
    average: Optional[float] = None
    amount: Optional[float] = None
    filled: Optional[float] = None
    remaining: Optional[float] = None
    trades: Optional[int] = None
    fee: OrderFee = field(default_factory=lambda: OrderFee(None))
    info: Any = None


@dataclass(frozen=True)
class TransactionFee:
    currency: Optional[str]
    cost: Optional[float]
    rate: Optional[float]


@dataclass(frozen=True)
class Transaction:
    id: Optional[str]
    txid: Optional[str]
    timestamp: Optional[int]
    datetime: Optional[str]
    updated: Optional[int]
    currency: Optional[str]
    type: str                  # "deposit" or "withdrawal"
    amount: Optional[float]
    status: Optional[str]
    fee: TransactionFee
    info: Any = None


@dataclass(frozen=True)
class BalanceEntry:
    free: Optional[float]
    used: Optional[float]
    total: Optional[float]


@dataclass
class Balance:
    currencies: dict[str, BalanceEntry]
    info: Any = None

    def __getitem__(self, code: str) -> BalanceEntry:
        return self.currencies[code]

    def __contains__(self, code: str) -> bool:
        return code in self.currencies

    @property
    def free(self) -> dict[str, Optional[float]]:
        return {code: entry.free for code, entry in self.currencies.items()}

    @property
    def used(self) -> dict[str, Optional[float]]:
        return {code: entry.used for code, entry in self.currencies.items()}

    @property
    def total(self) -> dict[str, Optional[float]]:
        return {code: entry.total for code, entry in self.currencies.items()}


@dataclass(frozen=True)
class DepositAddress:
    currency: str
    address: str
    tag: Optional[str] = None
    info: Any = None


@dataclass(frozen=True)
class SignedRequest:
    url: str
    method: str
    body: Optional[str]
    headers: dict[str, str]
