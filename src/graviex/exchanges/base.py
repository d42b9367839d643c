from abc import ABC, abstractmethod
from typing import Optional

from graviex.core.models import Balance, Market, Order, OrderBook, Ticker, Trade, Transaction


class ExchangeAdapter(ABC):

    # Market Data Methods
    @abstractmethod
    def fetch_markets(self) -> list[Market]:
        pass

    @abstractmethod
    def fetch_ticker(self, symbol: str) -> Ticker:
        pass

    @abstractmethod
    def fetch_order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        pass

    @abstractmethod
    def fetch_trades(self, symbol: str, since: Optional[int] = None, limit: Optional[int] = None) -> list[Trade]:
        pass

    @abstractmethod
    def fetch_ohlcv(self, symbol: str, timeframe: str = '5m', since: Optional[int] = None, limit: Optional[int] = None) -> list[list]:
        pass

    # Account Methods
    @abstractmethod
    def fetch_balance(self) -> Balance:
        pass

    @abstractmethod
    def fetch_deposits(self, code: Optional[str] = None, since: Optional[int] = None, limit: Optional[int] = None) -> list[Transaction]:
        pass

    @abstractmethod
    def fetch_withdrawals(self, code: Optional[str] = None, since: Optional[int] = None, limit: Optional[int] = None) -> list[Transaction]:
        pass

    # Trading Methods
    @abstractmethod
    def create_order(self, symbol: str, type: str, side: str, amount: float, price: Optional[float] = None) -> Order:
        pass

    @abstractmethod
    def cancel_order(self, id: str, symbol: Optional[str] = None) -> Order:
        pass

    @abstractmethod
    def fetch_order(self, id: str, symbol: Optional[str] = None) -> Order:
        pass
