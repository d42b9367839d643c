"""Tests for order/transaction status mapping"""

import pytest

from graviex.normalize.status import (
    OrderStatus,
    order_status_to_native,
    parse_order_status,
    parse_transaction_status,
)

ORDER_PAIRS = [("wait", "open"), ("done", "closed"), ("cancel", "canceled")]


class TestOrderStatus:
    """Bidirectional order state table."""

    @pytest.mark.parametrize("native,canonical", ORDER_PAIRS)
    def test_mapping(self, native, canonical):
        """Test each defined pair in both directions."""
        assert parse_order_status(native) == canonical
        assert order_status_to_native(canonical) == native

    @pytest.mark.parametrize("native,canonical", ORDER_PAIRS)
    def test_round_trip(self, native, canonical):
        """Test native(canonical(s)) == s and the reverse."""
        assert order_status_to_native(parse_order_status(native)) == native
        assert parse_order_status(order_status_to_native(canonical)) == canonical

    @pytest.mark.parametrize("status", ["convert", "partial", ""])
    def test_unmapped_passes_through(self, status):
        """Test unknown states come back unchanged in both directions."""
        assert parse_order_status(status) == status
        assert order_status_to_native(status) == status

    def test_none(self):
        """Test None stays None."""
        assert parse_order_status(None) is None
        assert order_status_to_native(None) is None

    def test_accepts_enum_members(self):
        """Test enum members map like their values."""
        assert order_status_to_native(OrderStatus.OPEN) == "wait"


class TestTransactionStatus:
    """One-way transaction state table."""

    @pytest.mark.parametrize("native,canonical", [
        ("accepted", "ok"),
        ("done", "ok"),
        ("submitted", "pending"),
    ])
    def test_mapping(self, native, canonical):
        """Test the defined states."""
        assert parse_transaction_status(native) == canonical

    def test_unmapped_passes_through(self):
        """Test unknown states come back unchanged."""
        assert parse_transaction_status("rejected") == "rejected"
        assert parse_transaction_status(None) is None
