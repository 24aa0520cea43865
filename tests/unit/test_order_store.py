"""Unit tests for the DynamoDB order store (moto)."""

import pytest

from boglepay.models.enums import OrderStatus
from boglepay.models.order import Order


class TestCreateAndGet:
    def test_round_trip_preserves_fields(self, make_order, order_store) -> None:
        make_order(42, metadata={"checkout_session_id": "cs_1"})

        order = order_store.get_order(42).get_order()

        assert order.order_key == "wc_order_key42"
        assert order.total_cents == 2599
        assert isinstance(order.total_cents, int)
        assert order.line_items[0].name == "Index Fund T-Shirt"
        assert order.line_items[0].total_cents == 1999
        assert order.metadata == {"checkout_session_id": "cs_1"}
        assert order.created_at is not None

    def test_missing_order_returns_none(self, order_store) -> None:
        assert order_store.get_order(404) is None

    def test_duplicate_order_rejected(self, make_order, order_store) -> None:
        make_order(42)

        with pytest.raises(ValueError, match="already exists"):
            order_store.create_order(
                Order(order_id=42, order_key="k", order_number="42", total_cents=1)
            )


class TestHandleMutations:
    def test_set_status_is_written_through(self, make_order, order_store) -> None:
        order = make_order(42)

        order.set_status(OrderStatus.CANCELLED)

        assert order.get_status() == OrderStatus.CANCELLED
        assert order_store.get_order(42).get_status() == OrderStatus.CANCELLED

    def test_notes_are_appended_in_order(self, make_order, order_store) -> None:
        order = make_order(42)

        order.append_note("first")
        order.append_note("second")

        assert order_store.get_order(42).get_order().notes == ["first", "second"]

    def test_metadata_and_transaction_id(self, make_order, order_store) -> None:
        order = make_order(42)

        order.set_metadata("public_token", "pt_1")
        order.set_transaction_id("txn_1")

        stored = order_store.get_order(42)
        assert stored.get_metadata("public_token") == "pt_1"
        assert stored.get_metadata("unknown") is None
        assert stored.get_transaction_id() == "txn_1"

    def test_mutating_deleted_order_raises(self, make_order, dynamodb_service) -> None:
        order = make_order(42)
        dynamodb_service._get_table("orders").delete_item(Key={"order_id": 42})

        with pytest.raises(LookupError):
            order.append_note("too late")


class TestFindByMetadata:
    def test_indexed_lookup(self, make_order, order_store) -> None:
        make_order(1, metadata={"checkout_session_id": "cs_1"})
        make_order(2, metadata={"checkout_session_id": "cs_2"})

        orders = order_store.find_orders_by_metadata("checkout_session_id", "cs_2")

        assert [order.get_id() for order in orders] == [2]

    def test_unindexed_lookup_scans(self, make_order, order_store) -> None:
        make_order(1, metadata={"campaign": "spring"})
        make_order(2)

        orders = order_store.find_orders_by_metadata("campaign", "spring")

        assert [order.get_id() for order in orders] == [1]

    def test_empty_value_matches_nothing(self, make_order, order_store) -> None:
        make_order(1)

        assert order_store.find_orders_by_metadata("public_token", "") == []

    def test_no_match(self, order_store) -> None:
        assert order_store.find_orders_by_metadata("public_token", "pt_none") == []


class TestMarkPaid:
    def test_first_call_transitions(self, make_order, order_store) -> None:
        order = make_order(42)

        assert order_store.mark_paid(order, "txn_1") is True
        assert order.is_paid()
        assert order.get_order().paid_at is not None

    def test_second_call_is_rejected(self, make_order, order_store) -> None:
        order = make_order(42)
        stale = order_store.get_order(42)
        order_store.mark_paid(order, "txn_1")

        assert order_store.mark_paid(stale, "txn_2") is False
        assert stale.is_paid()
        assert stale.get_transaction_id() == "txn_1"
