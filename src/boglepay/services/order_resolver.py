"""Maps identifiers carried by a webhook event to exactly one local order."""

import logging
from typing import Any, Mapping

from boglepay.models.errors import UnresolvedOrderError

from .order_store import OrderHandle, OrderStore


class OrderResolver:
    """Resolves event data to an order.

    Identifiers are tried in precedence order, each only if present:

    1. ``custom_fields.woo_order_id``: direct lookup by order ID
    2. ``checkout_session_id``: order whose metadata carries that session
    3. ``public_token``: order whose metadata carries that token

    The first identifier present decides the outcome. If it does not match,
    resolution fails without trying lower-precedence identifiers.
    """

    def __init__(self, store: OrderStore, logger: logging.Logger | None = None) -> None:
        self._store = store
        self._logger = logger or logging.getLogger(__name__)

    def resolve(self, data: Mapping[str, Any]) -> OrderHandle:
        """Find the order an event refers to.

        Args:
            data: The ``data`` object of the webhook envelope

        Returns:
            The matching order

        Raises:
            UnresolvedOrderError: If no identifier is present or the first
                present identifier matches no order.
        """
        custom_fields = data.get("custom_fields")
        if isinstance(custom_fields, Mapping) and custom_fields.get("woo_order_id") is not None:
            return self._by_order_id(custom_fields["woo_order_id"])

        if data.get("checkout_session_id") is not None:
            return self._by_metadata("checkout_session_id", data["checkout_session_id"])

        if data.get("public_token") is not None:
            return self._by_metadata("public_token", data["public_token"])

        raise UnresolvedOrderError(details={"reason": "no order identifier in event"})

    def _by_order_id(self, raw_order_id: Any) -> OrderHandle:
        try:
            order_id = abs(int(raw_order_id))
        except (TypeError, ValueError):
            raise UnresolvedOrderError(
                details={"woo_order_id": str(raw_order_id), "reason": "not numeric"}
            ) from None

        order = self._store.get_order(order_id) if order_id else None
        if order is None:
            raise UnresolvedOrderError(details={"woo_order_id": str(order_id)})
        return order

    def _by_metadata(self, key: str, raw_value: Any) -> OrderHandle:
        value = str(raw_value).strip()
        orders = self._store.find_orders_by_metadata(key, value)
        if not orders:
            raise UnresolvedOrderError(details={key: value})

        if len(orders) > 1:
            self._logger.warning(
                "Multiple orders share %s=%s (order IDs %s); using the first",
                key,
                value,
                [order.get_id() for order in orders],
            )
        return orders[0]
