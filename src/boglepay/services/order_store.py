"""Order store interface and its DynamoDB implementation.

The reconciliation core never touches storage directly. It works with an
``OrderHandle`` (one mutable order) obtained from an ``OrderStore``.

The only multi-writer transition is pending -> paid, so the store exposes it
as a single conditional write (``mark_paid``) instead of a read followed by
a write. A webhook redelivery racing the return-URL confirmation therefore
produces exactly one paid transition.
"""

import datetime as dt
import logging
from typing import Any, Protocol

from boglepay.models.enums import OrderStatus
from boglepay.models.order import Order, OrderLineItem

from .dynamodb import DynamoDBService

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"
METADATA_PREFIX = "meta_"

# Metadata keys with a GSI on their attribute; other keys fall back to a scan
INDEXED_METADATA: dict[str, str] = {
    "checkout_session_id": "checkout_session_id-index",
    "public_token": "public_token-index",
}


class OrderHandle(Protocol):
    """Capabilities the gateway needs on a single order."""

    def get_id(self) -> int: ...

    def get_status(self) -> OrderStatus: ...

    def set_status(self, status: OrderStatus) -> None: ...

    def is_paid(self) -> bool: ...

    def get_metadata(self, key: str) -> str | None: ...

    def set_metadata(self, key: str, value: str) -> None: ...

    def append_note(self, text: str) -> None: ...

    def get_transaction_id(self) -> str: ...

    def set_transaction_id(self, transaction_id: str) -> None: ...

    def get_order(self) -> Order: ...


class OrderStore(Protocol):
    """Lookup and atomic payment transition for orders."""

    def get_order(self, order_id: int) -> OrderHandle | None: ...

    def find_orders_by_metadata(self, key: str, value: str) -> list[OrderHandle]: ...

    def mark_paid(self, order: OrderHandle, transaction_id: str) -> bool: ...


def _now() -> str:
    return dt.datetime.now(dt.UTC).isoformat()


def _order_to_item(order: Order) -> dict[str, Any]:
    """Convert an Order to a DynamoDB item."""
    item: dict[str, Any] = {
        "order_id": order.order_id,
        "order_key": order.order_key,
        "order_number": order.order_number,
        "status": order.status.value,
        "currency": order.currency,
        "total_cents": order.total_cents,
        "shipping_cents": order.shipping_cents,
        "tax_cents": order.tax_cents,
        "line_items": [
            {"name": line.name, "total_cents": line.total_cents} for line in order.line_items
        ],
        "transaction_id": order.transaction_id,
        "notes": list(order.notes),
    }
    for name in ("billing_email", "billing_name"):
        value = getattr(order, name)
        if value:
            item[name] = value
    for name in ("created_at", "updated_at", "paid_at"):
        value = getattr(order, name)
        if value is not None:
            item[name] = value.isoformat()
    for key, value in order.metadata.items():
        item[f"{METADATA_PREFIX}{key}"] = value
    return item


def _item_to_order(item: dict[str, Any]) -> Order:
    """Convert a DynamoDB item (numbers come back as Decimal) to an Order."""
    metadata = {
        name[len(METADATA_PREFIX):]: str(value)
        for name, value in item.items()
        if name.startswith(METADATA_PREFIX)
    }
    return Order(
        order_id=int(item["order_id"]),
        order_key=item["order_key"],
        order_number=str(item["order_number"]),
        status=OrderStatus(item.get("status", OrderStatus.PENDING.value)),
        currency=item.get("currency", "USD"),
        total_cents=int(item.get("total_cents", 0)),
        shipping_cents=int(item.get("shipping_cents", 0)),
        tax_cents=int(item.get("tax_cents", 0)),
        line_items=[
            OrderLineItem(name=line["name"], total_cents=int(line["total_cents"]))
            for line in item.get("line_items", [])
        ],
        billing_email=item.get("billing_email"),
        billing_name=item.get("billing_name"),
        transaction_id=item.get("transaction_id", ""),
        notes=list(item.get("notes", [])),
        metadata=metadata,
        created_at=item.get("created_at"),
        updated_at=item.get("updated_at"),
        paid_at=item.get("paid_at"),
    )


class DynamoDBOrder:
    """OrderHandle backed by a DynamoDB item.

    Every mutation is written through immediately and the local snapshot is
    replaced with the item DynamoDB returns.
    """

    def __init__(self, store: "DynamoDBOrderStore", order: Order) -> None:
        self._store = store
        self._order = order

    def __repr__(self) -> str:
        return f"DynamoDBOrder(order_id={self._order.order_id}, status={self._order.status.value})"

    def get_order(self) -> Order:
        return self._order

    def get_id(self) -> int:
        return self._order.order_id

    def get_status(self) -> OrderStatus:
        return self._order.status

    def is_paid(self) -> bool:
        return self._order.is_paid

    def set_status(self, status: OrderStatus) -> None:
        self._apply(
            "SET #status = :status, updated_at = :now",
            {":status": status.value, ":now": _now()},
            {"#status": "status"},
        )

    def get_metadata(self, key: str) -> str | None:
        return self._order.metadata.get(key)

    def set_metadata(self, key: str, value: str) -> None:
        self._apply(
            "SET #meta = :value, updated_at = :now",
            {":value": value, ":now": _now()},
            {"#meta": f"{METADATA_PREFIX}{key}"},
        )

    def append_note(self, text: str) -> None:
        self._apply(
            "SET notes = list_append(if_not_exists(notes, :empty), :note), updated_at = :now",
            {":empty": [], ":note": [text], ":now": _now()},
        )

    def get_transaction_id(self) -> str:
        return self._order.transaction_id

    def set_transaction_id(self, transaction_id: str) -> None:
        self._apply(
            "SET transaction_id = :txn, updated_at = :now",
            {":txn": transaction_id, ":now": _now()},
        )

    def refresh(self) -> None:
        """Reload the snapshot from the table."""
        handle = self._store.get_order(self._order.order_id)
        if handle is not None:
            self._order = handle.get_order()

    def _replace(self, item: dict[str, Any]) -> None:
        self._order = _item_to_order(item)

    def _apply(
        self,
        update_expression: str,
        values: dict[str, Any],
        names: dict[str, str] | None = None,
    ) -> None:
        item = self._store.db.update_item(
            ORDERS_TABLE,
            {"order_id": self._order.order_id},
            update_expression,
            values,
            names,
            condition_expression="attribute_exists(order_id)",
        )
        if item is None:
            raise LookupError(f"Order {self._order.order_id} no longer exists")
        self._replace(item)


class DynamoDBOrderStore:
    """OrderStore over the ``orders`` DynamoDB table."""

    def __init__(self, db: DynamoDBService) -> None:
        """Initialize order store.

        Args:
            db: DynamoDB service instance
        """
        self.db = db

    def create_order(self, order: Order) -> DynamoDBOrder:
        """Store a new order.

        Raises:
            ValueError: If an order with the same ID already exists.
        """
        now = dt.datetime.now(dt.UTC)
        order = order.model_copy(
            update={"created_at": order.created_at or now, "updated_at": now}
        )
        created = self.db.put_item(
            ORDERS_TABLE,
            _order_to_item(order),
            condition_expression="attribute_not_exists(order_id)",
        )
        if not created:
            raise ValueError(f"Order {order.order_id} already exists")
        return DynamoDBOrder(self, order)

    def get_order(self, order_id: int) -> DynamoDBOrder | None:
        item = self.db.get_item(ORDERS_TABLE, {"order_id": order_id})
        if not item:
            return None
        return DynamoDBOrder(self, _item_to_order(item))

    def find_orders_by_metadata(self, key: str, value: str) -> list[DynamoDBOrder]:
        """Find orders whose metadata entry ``key`` equals ``value``."""
        if not value:
            # Index keys cannot be empty strings
            return []
        attribute = f"{METADATA_PREFIX}{key}"
        index_name = INDEXED_METADATA.get(key)
        if index_name:
            items = self.db.query_by_gsi(ORDERS_TABLE, index_name, attribute, value)
        else:
            logger.debug("No index for metadata key %s, scanning orders", key)
            items = self.db.scan_by_attribute(ORDERS_TABLE, attribute, value)
        return [DynamoDBOrder(self, _item_to_order(item)) for item in items]

    def mark_paid(self, order: OrderHandle, transaction_id: str) -> bool:
        """Atomically move an order to paid.

        Args:
            order: Order to mark paid
            transaction_id: Canonical payment reference

        Returns:
            True if this call performed the transition, False if the order
            was already paid.
        """
        now = _now()
        item = self.db.update_item(
            ORDERS_TABLE,
            {"order_id": order.get_id()},
            "SET #status = :paid, transaction_id = :txn, paid_at = :now, updated_at = :now",
            {":paid": OrderStatus.PAID.value, ":txn": transaction_id, ":now": now},
            {"#status": "status"},
            condition_expression="attribute_exists(order_id) AND #status <> :paid",
        )
        if isinstance(order, DynamoDBOrder):
            if item is None:
                order.refresh()
            else:
                order._replace(item)
        return item is not None
