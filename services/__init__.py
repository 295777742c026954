"""
Services layer for the storefront client.

- SessionManager: Token lifecycle and the global 401 policy
- OrderGateway: Order projections and the status mutation path
- ProductService: Owner-scoped product CRUD
- DashboardService: Concurrent page-load fetches

All services share one StorefrontAPIClient, so every request carries the
session's credential and every 401 reaches the SessionManager.
"""

from .session_manager import SessionManager
from .order_gateway import OrderGateway
from .product_service import ProductService
from .dashboard_service import DashboardService, Overview, ProfileView

__all__ = [
    "SessionManager",
    "OrderGateway",
    "ProductService",
    "DashboardService",
    "Overview",
    "ProfileView",
]
