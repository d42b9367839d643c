"""Order and transaction state vocabularies.

Graviex reports order states as ``wait``/``done``/``cancel`` and transaction
states as ``accepted``/``done``/``submitted``. These are translated to the
canonical names used across the connector. Anything not in the tables is
returned as-is, so a state the venue introduces later shows up verbatim
instead of breaking parsing.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELED = "canceled"


class NativeOrderStatus(str, Enum):
    WAIT = "wait"
    DONE = "done"
    CANCEL = "cancel"


class TransactionStatus(str, Enum):
    OK = "ok"
    PENDING = "pending"


_ORDER_STATUS_PAIRS: tuple[tuple[NativeOrderStatus, OrderStatus], ...] = (
    (NativeOrderStatus.WAIT, OrderStatus.OPEN),
    (NativeOrderStatus.DONE, OrderStatus.CLOSED),
    (NativeOrderStatus.CANCEL, OrderStatus.CANCELED),
)

_ORDER_TO_CANONICAL = {native.value: canonical for native, canonical in _ORDER_STATUS_PAIRS}
_ORDER_TO_NATIVE = {canonical.value: native for native, canonical in _ORDER_STATUS_PAIRS}

_TRANSACTION_TO_CANONICAL: dict[str, TransactionStatus] = {
    "accepted": TransactionStatus.OK,
    "done": TransactionStatus.OK,
    "submitted": TransactionStatus.PENDING,
}


def _key(status) -> str:
    # str-valued enums hash by member name, not value
    return status.value if isinstance(status, Enum) else status


def parse_order_status(status: Optional[str]) -> Optional[str]:
    """Native order state -> canonical (``wait`` -> ``open``)."""
    if status is None:
        return None
    canonical = _ORDER_TO_CANONICAL.get(_key(status))
    if canonical is None:
        return _key(status)
    return canonical.value


def order_status_to_native(status: Optional[str]) -> Optional[str]:
    """Canonical order state -> native (``open`` -> ``wait``)."""
    if status is None:
        return None
    native = _ORDER_TO_NATIVE.get(_key(status))
    if native is None:
        return _key(status)
    return native.value


def parse_transaction_status(status: Optional[str]) -> Optional[str]:
    if status is None:
        return None
    canonical = _TRANSACTION_TO_CANONICAL.get(_key(status))
    if canonical is None:
        return _key(status)
    return canonical.value
