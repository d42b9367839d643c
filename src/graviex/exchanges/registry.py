"""
Market and currency lookup tables shared by the parsers.

The registry is owned by the adapter and passed explicitly to every parser
that needs to resolve a native id. A catalog reload builds fresh tables and
swaps them in with a single assignment, so a reader sees either the old
catalog or the new one, never a mix.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

import ccxt

from graviex.core.models import Currency, Market


@dataclass(frozen=True)
class _MarketTables:
    by_symbol: dict[str, Market] = field(default_factory=dict)
    by_id: dict[str, Market] = field(default_factory=dict)


class MarketRegistry:
    def __init__(self, markets: Optional[Iterable[Market]] = None) -> None:
        self._tables = _MarketTables()
        self._currencies_by_id: dict[str, Currency] = {}
        if markets is not None:
            self.replace_markets(markets)

    # ------------------------------------------------------------------
    # Markets
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return bool(self._tables.by_id)

    @property
    def markets(self) -> dict[str, Market]:
        return self._tables.by_symbol

    @property
    def symbols(self) -> list[str]:
        return sorted(self._tables.by_symbol)

    def replace_markets(self, markets: Iterable[Market]) -> None:
        by_symbol: dict[str, Market] = {}
        by_id: dict[str, Market] = {}
        for market in markets:
            by_id[market.id] = market
            if market.symbol is not None:
                by_symbol[market.symbol] = market
        self._tables = _MarketTables(by_symbol=by_symbol, by_id=by_id)

    def market_by_id(self, market_id: Optional[str]) -> Optional[Market]:
        if market_id is None:
            return None
        return self._tables.by_id.get(market_id)

    def market(self, symbol: str) -> Market:
        """Resolve a canonical symbol (or native id) to its market.

        Raises:
            ccxt.BadSymbol: If neither lookup matches
        """
        tables = self._tables
        market = tables.by_symbol.get(symbol) or tables.by_id.get(symbol)
        if market is None:
            raise ccxt.BadSymbol(f"graviex3 does not have market symbol {symbol}")
        return market

    # ------------------------------------------------------------------
    # Currencies
    # ------------------------------------------------------------------

    def add_currency(self, currency: Currency) -> None:
        if currency.id is None:
            return
        currencies = dict(self._currencies_by_id)
        currencies[currency.id.upper()] = currency
        self._currencies_by_id = currencies

    def currency_by_id(self, currency_id: Optional[str]) -> Optional[Currency]:
        if currency_id is None:
            return None
        return self._currencies_by_id.get(currency_id.upper())

    def currency_id(self, code: str) -> str:
        """Native id for a canonical currency code.

        Falls back to the market catalog (base/quote ids) and finally to the
        code itself.
        """
        for currency in self._currencies_by_id.values():
            if currency.code == code and currency.id is not None:
                return currency.id
        for market in self._tables.by_id.values():
            if market.base == code and market.base_id is not None:
                return market.base_id
            if market.quote == code and market.quote_id is not None:
                return market.quote_id
        return code
