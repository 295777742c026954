"""
Order transition gateway.

The client-side surface for reading orders and requesting status changes.
The backend is the only authority on what a transition does; the table in
models.order only decides which buttons the UI offers.

Projections:
    list_as_buyer()  - orders the current user placed
    list_as_seller() - orders placed against the current user's products;
                       degrades to [] on failure instead of raising
"""

from __future__ import annotations

from typing import Any, List, Optional

from core.api_client import StorefrontAPIClient
from core.exceptions import (
    AuthorizationFailure,
    StorefrontError,
    ValidationFailure,
)
from models.order import Order, OrderStatus, allowed_transitions
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 1000


def parse_quantity(raw: Any) -> int:
    """
    Parse an order quantity.

    Raises:
        ValidationFailure: Not an integer, or less than 1
    """
    if isinstance(raw, bool):
        raise ValidationFailure("Quantity must be a whole number.", field="quantity")
    try:
        quantity = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationFailure("Quantity must be a whole number.", field="quantity")
    if quantity < 1:
        raise ValidationFailure("Quantity must be at least 1", field="quantity")
    return quantity


class OrderGateway:
    """
    Order reads and the single status mutation path.

    Args:
        api_client: Attached-credential request channel
        session_manager: Consulted before authenticated actions
    """

    def __init__(self, api_client: StorefrontAPIClient, session_manager):
        self._api = api_client
        self._session = session_manager

    # =========================================================================
    # READS
    # =========================================================================

    def list_all(self) -> List[Order]:
        """Every order visible to the current user (GET /orders/)."""
        return [Order.from_dict(o) for o in self._api.list_orders()]

    def list_as_buyer(self) -> List[Order]:
        """Orders the current user placed."""
        return [Order.from_dict(o) for o in self._api.list_my_orders()]

    def list_as_seller(self) -> List[Order]:
        """
        Orders against the current user's products.

        A user with no sales (or a failing sales endpoint) gets an empty list.
        A 401 still propagates: the global policy outranks the fallback.
        """
        try:
            return [Order.from_dict(o) for o in self._api.list_my_sales()]
        except AuthorizationFailure:
            raise
        except StorefrontError as e:
            logger.warning(f"Sales list unavailable, showing none: {e}")
            return []

    def get_order(self, order_id: int) -> Order:
        return Order.from_dict(self._api.get_order(order_id))

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def create_order(self, product_id: Any, quantity: Any, message: Optional[str] = None) -> Order:
        """
        Place an order.

        Stock is not checked locally; the backend's rejection (e.g. not
        enough stock) surfaces as RemoteRejection. The local product list
        is not touched - reload to see new stock.

        Raises:
            AuthorizationFailure: No authenticated session (no request sent)
            ValidationFailure: Missing product or quantity < 1 (no request sent)
        """
        if not self._session.is_authenticated:
            raise AuthorizationFailure("Please login to create an order")

        if product_id in (None, ""):
            raise ValidationFailure("Product is required.", field="product_id")
        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            raise ValidationFailure("Unknown product.", field="product_id")

        quantity = parse_quantity(quantity)

        if message:
            message = message.strip()[:MAX_MESSAGE_LENGTH] or None

        order = Order.from_dict(self._api.create_order({
            "product_id": product_id,
            "quantity": quantity,
            "message": message or None,
        }))
        logger.info(f"Order {order.id} created for product {product_id} (qty {quantity})")
        return order

    def set_status(self, order_id: int, new_status: Any) -> Order:
        """
        Request a status change.

        Whatever is asked for is relayed as-is, even targets the UI would
        not offer; the backend's answer is authoritative.
        """
        status_value = new_status.value if isinstance(new_status, OrderStatus) else str(new_status).strip()
        if not status_value:
            raise ValidationFailure("Status is required.", field="new_status")

        order = Order.from_dict(self._api.update_order_status(order_id, status_value))
        logger.info(f"Order {order_id} status -> {order.status}")
        return order

    def update_order(self, order_id: int, data: dict) -> Order:
        return Order.from_dict(self._api.update_order(order_id, data))

    def delete_order(self, order_id: int) -> None:
        self._api.delete_order(order_id)
        logger.info(f"Order {order_id} deleted")

    @staticmethod
    def allowed_transitions(order_or_status: Any) -> tuple:
        """Status targets the UI may offer for an order (or a raw status)."""
        status = order_or_status.status if isinstance(order_or_status, Order) else order_or_status
        return allowed_transitions(status)
