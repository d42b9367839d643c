"""Tests for the request signer

Tests cover:
- Canonical path and nonce handling
- Key sorting before signing
- Signature determinism and sensitivity to every input
- GET vs POST encoding
- Public requests are never signed
"""

import hashlib
import hmac
from urllib.parse import parse_qsl, urlparse

import ccxt
import pytest

from graviex.exchanges.signer import PRIVATE, PUBLIC, RequestSigner, keysort

NONCE = 1700000000000


def make_signer(secret="my-secret", nonce=NONCE):
    return RequestSigner("https://graviex.net/", "v3", api_key="my-key", secret=secret, nonce=lambda: nonce)


def expected_signature(payload: str, secret: str = "my-secret") -> str:
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def query_pairs(url: str) -> list[tuple[str, str]]:
    return parse_qsl(urlparse(url).query)


class TestPublicRequests:
    """Public scope: nonce attached, no key, no signature."""

    def test_public_get_url(self):
        """Test the path is prefixed and params land in the query string."""
        signed = make_signer().sign("depth", PUBLIC, "GET", {"market": "giobtc", "limit": 20})

        assert signed.url == "https://graviex.net/api/v3/depth?limit=20&market=giobtc&tonce=1700000000000"
        assert signed.method == "GET"
        assert signed.body is None
        assert signed.headers == {}

    def test_public_request_never_signed(self):
        """Test neither access_key nor signature are sent on public calls."""
        keys = [k for k, _ in query_pairs(make_signer().sign("tickers").url)]
        assert "signature" not in keys
        assert "access_key" not in keys

    def test_public_works_without_credentials(self):
        """Test public calls need no credentials."""
        signer = RequestSigner("https://graviex.net", nonce=lambda: NONCE)
        assert signer.sign("markets").url.endswith("/api/v3/markets?tonce=1700000000000")

    def test_caller_params_not_mutated(self):
        """Test the caller's dict is left as it was."""
        params = {"market": "giobtc"}
        make_signer().sign("trades", PUBLIC, "GET", params)
        assert params == {"market": "giobtc"}


class TestPrivateRequests:
    """Private scope signing."""

    def test_signature_matches_reference(self):
        """Test the signature is HMAC-SHA256 over METHOD|PATH|sorted params."""
        signed = make_signer().sign("orders", PRIVATE, "GET", {"market": "giobtc", "limit": 10})

        payload = "GET|/api/v3/orders|access_key=my-key&limit=10&market=giobtc&tonce=1700000000000"
        pairs = query_pairs(signed.url)
        assert pairs[-1] == ("signature", expected_signature(payload))

    def test_signature_appended_after_sorted_params(self):
        """Test params are sorted and signature is last, not re-sorted."""
        signed = make_signer().sign("orders", PRIVATE, "GET", {"zeta": 1, "alpha": 2})
        keys = [k for k, _ in query_pairs(signed.url)]
        assert keys == ["access_key", "alpha", "tonce", "zeta", "signature"]

    def test_signature_is_lowercase_hex(self):
        """Test the digest rendering."""
        signed = make_signer().sign("members/me", PRIVATE)
        signature = dict(query_pairs(signed.url))["signature"]
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)

    def test_post_sends_body_and_bare_url(self):
        """Test POST params go to the body."""
        signed = make_signer().sign("order/delete", PRIVATE, "POST", {"id": 42})

        assert signed.url == "https://graviex.net/api/v3/order/delete"
        assert signed.headers["Content-Type"] == "application/x-www-form-urlencoded"
        pairs = parse_qsl(signed.body)
        payload = "POST|/api/v3/order/delete|access_key=my-key&id=42&tonce=1700000000000"
        assert pairs[-1] == ("signature", expected_signature(payload))

    def test_booleans_encoded_lowercase(self):
        """Test booleans are sent as true/false."""
        assert keysort({"b": True, "a": False}) == [("a", "false"), ("b", "true")]

    def test_bytes_credentials(self):
        """Test credentials may be given as bytes."""
        signer = RequestSigner("https://graviex.net", api_key=b"my-key", secret=b"my-secret", nonce=lambda: NONCE)
        assert signer.sign("members/me", PRIVATE).url == make_signer().sign("members/me", PRIVATE).url

    def test_private_without_credentials_raises(self):
        """Test signing a private call without a secret fails locally."""
        signer = RequestSigner("https://graviex.net", nonce=lambda: NONCE)
        with pytest.raises(ccxt.AuthenticationError):
            signer.sign("members/me", PRIVATE)


class TestSignatureDeterminism:
    """Same inputs, same signature; any change, different signature."""

    @staticmethod
    def signature_of(signer=None, path="orders", method="GET", params=None):
        signer = signer or make_signer()
        signed = signer.sign(path, PRIVATE, method, params if params is not None else {"market": "giobtc", "limit": 10})
        source = signed.body if method == "POST" else urlparse(signed.url).query
        return dict(parse_qsl(source))["signature"]

    def test_deterministic(self):
        """Test repeated signing yields identical signatures."""
        assert self.signature_of() == self.signature_of()

    def test_param_order_irrelevant(self):
        """Test insertion order of params does not matter."""
        a = self.signature_of(params={"market": "giobtc", "limit": 10})
        b = self.signature_of(params={"limit": 10, "market": "giobtc"})
        assert a == b

    @pytest.mark.parametrize("change", [
        {"params": {"market": "giobtc", "limit": 11}},
        {"params": {"market": "ethbtc", "limit": 10}},
        {"method": "POST"},
        {"path": "order"},
        {"signer": make_signer(secret="other-secret")},
        {"signer": make_signer(nonce=NONCE + 1)},
    ])
    def test_any_change_invalidates(self, change):
        """Test changing params, method, path, secret or nonce changes the signature."""
        assert self.signature_of(**change) != self.signature_of()
