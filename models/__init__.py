"""
Data models for the storefront client.

- User: Snapshot of the authenticated account
- Session: Immutable view of the session store
- Product / ProductInput: Catalog read model and validated write payload
- Order / OrderStatus: Orders and the advisory transition table

Products and orders are transient copies of backend state; nothing here is
cached beyond the request that fetched it.
"""

from .user import User
from .session import Session, SessionStatus, LoadingState
from .product import Product, ProductInput, parse_image_list
from .order import Order, OrderStatus, ORDER_TRANSITIONS, allowed_transitions

__all__ = [
    "User",
    "Session",
    "SessionStatus",
    "LoadingState",
    "Product",
    "ProductInput",
    "parse_image_list",
    "Order",
    "OrderStatus",
    "ORDER_TRANSITIONS",
    "allowed_transitions",
]
