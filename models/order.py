"""
Order data models.

The same order is seen two ways: from the buyer ("my orders") and from the
seller of the product ("my sales"). Status changes only through the
order gateway; the transition table below is what the UI offers, not what
the backend enforces.

Transition table (advisory):
    pending -> confirmed | completed | cancelled
    anything else -> (nothing offered)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from core.exceptions import RemoteRejection


class OrderStatus(str, Enum):
    """
    Order statuses known to the client.

    The backend may know more; unknown values are carried through as plain
    strings on Order.status.
    """

    PENDING = "pending"
    """Placed by the buyer, waiting on the seller."""

    CONFIRMED = "confirmed"
    """Accepted by the seller."""

    COMPLETED = "completed"
    """Delivered and closed."""

    CANCELLED = "cancelled"
    """Withdrawn or rejected."""

    @classmethod
    def parse(cls, value: Any) -> Optional["OrderStatus"]:
        """Return the matching member, or None for statuses the client does not know."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.CONFIRMED,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    }),
}

# Display order for transition buttons
_TRANSITION_ORDER = (OrderStatus.CONFIRMED, OrderStatus.COMPLETED, OrderStatus.CANCELLED)


def allowed_transitions(status: Any) -> tuple:
    """
    Targets the UI may offer for an order in ``status``.

    Args:
        status: Current status (enum member or raw string)

    Returns:
        Tuple of OrderStatus, empty when nothing is offered
    """
    current = OrderStatus.parse(status)
    if current is None:
        return ()
    targets = ORDER_TRANSITIONS.get(current, frozenset())
    return tuple(s for s in _TRANSITION_ORDER if s in targets)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_total(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        total = Decimal(str(value))
    except InvalidOperation:
        return None
    return total if total.is_finite() else None


@dataclass
class Order:
    """
    An order as returned by the backend.

    total_price is whatever the backend computed; the client never
    recomputes or cross-checks it. It is None when the backend sent
    nothing usable. status is "" when the backend sent none, which offers
    no transitions.
    """

    id: int
    product_id: int
    quantity: int
    total_price: Optional[Decimal]
    status: str
    buyer_id: Optional[int] = None
    order_date: Optional[datetime] = None
    message: Optional[str] = None

    @property
    def status_enum(self) -> Optional[OrderStatus]:
        """Known status, or None if the backend sent something new."""
        return OrderStatus.parse(self.status)

    @property
    def allowed_transitions(self) -> tuple:
        """Status targets the UI may offer for this order."""
        return allowed_transitions(self.status)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        """
        Create from an API payload.

        Raises:
            RemoteRejection: Payload is not an object or quantity is not a whole number
        """
        if not isinstance(data, dict):
            raise RemoteRejection("Malformed order payload", payload=data)
        try:
            quantity = int(data.get("quantity") or 0)
        except (TypeError, ValueError):
            raise RemoteRejection("Malformed order payload", payload=data)

        return cls(
            id=data.get("id"),
            product_id=data.get("product_id"),
            quantity=quantity,
            total_price=_parse_total(data.get("total_price")),
            status=str(data.get("status") or ""),
            buyer_id=data.get("buyer_id", data.get("user_id")),
            order_date=_parse_timestamp(data.get("order_date")),
            message=data.get("message"),
        )
