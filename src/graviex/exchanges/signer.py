"""
Request signer for the Graviex v3 REST API.

Private calls are authenticated with an HMAC-SHA256 over::

    METHOD|/api/v3/<path>|<urlencoded params sorted by key>

The hex digest is appended as ``signature`` after the sorted parameters.
``tonce`` (a millisecond timestamp) is always sent; ``access_key`` only on
private calls.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Callable, Optional, Union
from urllib.parse import urlencode

import ccxt

from graviex.core.models import SignedRequest

PUBLIC = "public"
PRIVATE = "private"


def milliseconds() -> int:
    return int(time.time() * 1000)


def _encode_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def keysort(params: dict) -> list[tuple[str, str]]:
    return [(key, _encode_value(params[key])) for key in sorted(params)]


class RequestSigner:
    """
    Builds the URL, body and headers for one API call.

    Parameters
    ----------
    base_url : str
        Scheme and host, e.g. ``"https://graviex.net"``.
    version : str
        API version segment, ``"v3"``.
    api_key, secret : str or bytes, optional
        Credentials. Only needed for private calls.
    nonce : callable, optional
        Returns the ``tonce`` value. Defaults to wall-clock milliseconds,
        which is monotonic as long as the system clock is not stepped back.
    """

    def __init__(
        self,
        base_url: str,
        version: str = "v3",
        api_key: Optional[Union[str, bytes]] = None,
        secret: Optional[Union[str, bytes]] = None,
        nonce: Callable[[], int] = milliseconds,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._version = version
        self._api_key = api_key.decode() if isinstance(api_key, bytes) else api_key
        self._secret = secret.encode() if isinstance(secret, str) else secret
        self._nonce = nonce

    def request_path(self, path: str) -> str:
        return f"/api/{self._version}/{path}"

    def signature(self, method: str, request_path: str, sorted_params: list[tuple[str, str]]) -> str:
        payload = f"{method}|{request_path}|{urlencode(sorted_params)}"
        return hmac.new(self._secret, payload.encode(), hashlib.sha256).hexdigest()

    def sign(
        self,
        path: str,
        api: str = PUBLIC,
        method: str = "GET",
        params: Optional[dict] = None,
    ) -> SignedRequest:
        method = method.upper()
        request_path = self.request_path(path)
        params = dict(params or {})
        params["tonce"] = self._nonce()

        if api == PRIVATE:
            if not self._api_key or not self._secret:
                raise ccxt.AuthenticationError(
                    f"graviex3 requires api_key and secret for private endpoint {path}"
                )
            params["access_key"] = self._api_key

        sorted_params = keysort(params)
        if api == PRIVATE:
            sorted_params.append(("signature", self.signature(method, request_path, sorted_params)))

        encoded = urlencode(sorted_params)
        url = self._base_url + request_path
        headers: dict[str, str] = {}
        body = None
        if method == "POST":
            body = encoded
            headers["Content-Type"] = "application/x-www-form-urlencoded"
        else:
            url += "?" + encoded
        return SignedRequest(url=url, method=method, body=body, headers=headers)
