"""Numeric and timestamp helpers for exchange payloads.

Graviex mixes numbers and numeric strings freely, and reports most times in
seconds but some in ISO-8601. The ``safe_*`` readers never raise: anything
missing or unusable comes back as None so a single odd field cannot take a
whole response down with it.
"""

from __future__ import annotations

import math
from decimal import InvalidOperation
from typing import Any, Optional

from ccxt.base.decimal_to_precision import DECIMAL_PLACES, ROUND, TRUNCATE, decimal_to_precision
from ccxt.base.exchange import Exchange


def _get(obj: Any, key: Any) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    if isinstance(obj, (list, tuple)) and isinstance(key, int) and -len(obj) <= key < len(obj):
        return obj[key]
    return None


def to_float(value: Any) -> Optional[float]:
    """Coerce *value* to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_value(obj: Any, key: Any, default: Any = None) -> Any:
    value = _get(obj, key)
    return default if value is None else value


def safe_float(obj: Any, key: Any) -> Optional[float]:
    return to_float(_get(obj, key))


def safe_integer(obj: Any, key: Any) -> Optional[int]:
    value = to_float(_get(obj, key))
    if value is None:
        return None
    return int(value)


def safe_string(obj: Any, key: Any) -> Optional[str]:
    value = _get(obj, key)
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def sum_known(*values: Optional[float]) -> Optional[float]:
    """Sum the values that are known; None when none of them are."""
    known = [v for v in values if v is not None]
    if not known:
        return None
    return sum(known)


def seconds_to_ms(seconds: Optional[float]) -> Optional[int]:
    if seconds is None:
        return None
    return int(seconds * 1000)


def parse_iso8601(value: Any) -> Optional[int]:
    """ISO-8601 string to ms since epoch; None when unparseable."""
    if not isinstance(value, str):
        return None
    return Exchange.parse8601(value)


def iso8601(timestamp: Optional[int]) -> Optional[str]:
    if timestamp is None:
        return None
    return Exchange.iso8601(timestamp)


def round_to_precision(value: Optional[float], precision: int) -> Optional[float]:
    """Round half-up to *precision* decimal places, the way the venue displays costs."""
    if value is None or not math.isfinite(value):
        return None
    try:
        return float(decimal_to_precision(value, ROUND, precision, DECIMAL_PLACES))
    except InvalidOperation:
        # beyond the 28-digit decimal context
        return round(value, precision)


def amount_to_precision(amount: float, precision: int) -> str:
    """Order amounts are truncated, never rounded up past the balance."""
    return decimal_to_precision(amount, TRUNCATE, precision, DECIMAL_PLACES)


def price_to_precision(price: float, precision: int) -> str:
    return decimal_to_precision(price, ROUND, precision, DECIMAL_PLACES)
