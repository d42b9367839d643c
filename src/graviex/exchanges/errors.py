"""
Maps Graviex HTTP statuses and embedded ``{"error": {"code", "message"}}``
payloads onto ccxt's exception hierarchy.
"""

from __future__ import annotations

from typing import Any, Optional

import ccxt

from graviex.helpers.numeric_helper import safe_integer, safe_string

OVERLOADED_STATUS = 503

INSUFFICIENT_FUNDS_CODES = frozenset({2002})
AUTHENTICATION_CODES = frozenset({2005, 2007})
GENERIC_ERROR_CODES = frozenset({1001})

UNKNOWN_ERROR_MESSAGE = "Unknown error"


def classify_error(http_status: int, body: Any) -> Optional[ccxt.BaseError]:
    """Return the failure a response represents, or None for success.

    Pure: nothing is raised or logged here, see :func:`handle_errors`.
    """
    if http_status == OVERLOADED_STATUS:
        return ccxt.ExchangeNotAvailable("Exchange Overloaded")

    message = UNKNOWN_ERROR_MESSAGE
    error = body.get("error") if isinstance(body, dict) else None
    if error is not None:
        code = safe_integer(error, "code")
        if code is not None:
            message = safe_string(error, "message") or message
            if code in INSUFFICIENT_FUNDS_CODES:
                return ccxt.InsufficientFunds(message)
            if code in AUTHENTICATION_CODES:
                return ccxt.AuthenticationError(message)
            if code in GENERIC_ERROR_CODES:
                return ccxt.ExchangeError(message)

    if http_status != 200:
        return ccxt.ExchangeError(f"Invalid response from exchange: {message}")
    return None


def handle_errors(http_status: int, body: Any) -> Any:
    """Return *body* untouched on success, raise the classified failure otherwise."""
    failure = classify_error(http_status, body)
    if failure is not None:
        raise failure
    return body
