"""
HTTP transport used by the adapter.

Anything with the signature ``issue(url, method, body, headers) -> (status,
json)`` can be passed to :class:`~graviex.exchanges.graviex.GraviexAdapter`
instead; this is the default built on ``requests``. Retry and rate limiting
are left to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import ccxt
import requests

_REQUEST_TIMEOUT = 10

# (url, method, body, headers) -> (http_status, decoded_json)
Transport = Callable[[str, str, Optional[str], dict], tuple[int, Any]]


class HttpTransport:
    """
    ``requests``-backed transport.

    Parameters
    ----------
    timeout : float
        Per-request timeout in seconds.
    session : requests.Session, optional
        Reuse an existing session (useful for testing).
    """

    def __init__(
        self,
        timeout: float = _REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def __call__(self, url: str, method: str, body: Optional[str], headers: dict) -> tuple[int, Any]:
        return self.issue(url, method, body, headers)

    def issue(self, url: str, method: str, body: Optional[str], headers: dict) -> tuple[int, Any]:
        self.logger.debug(f"{method} {url}")
        try:
            response = self._session.request(
                method, url, data=body, headers=headers, timeout=self.timeout
            )
        except requests.Timeout as exc:
            raise ccxt.RequestTimeout(f"graviex3 {method} {url} timed out: {exc}") from exc
        except requests.RequestException as exc:
            raise ccxt.NetworkError(f"graviex3 {method} {url} failed: {exc}") from exc

        status = response.status_code
        text = response.text
        if not text:
            return status, None
        try:
            return status, json.loads(text)
        except ValueError:
            # 503 pages are HTML; let the classifier report the overload.
            if status == 503:
                return status, None
            raise ccxt.ExchangeError(
                f"graviex3 returned a non-JSON response (HTTP {status}): {text[:200]}"
            )

    def close(self) -> None:
        self._session.close()
