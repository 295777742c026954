"""
Page-load aggregation with concurrent fetches.

The home page needs the catalog and the order list; the profile page needs
my products, my orders and my sales. Those fetches run side by side on a
small thread pool and are joined before rendering.

Failure isolation:
    - One failing fetch never blocks the others; its slot becomes [] and
      its message is recorded in ``errors``.
    - AuthorizationFailure is re-raised after every fetch has finished, so
      the global 401 handling still wins.

Flask note:
    Worker threads have no request context. Routes pass
    ``flask.copy_current_request_context`` as ``wrap`` so the session store
    stays reachable from the workers.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from core.exceptions import AuthorizationFailure, StorefrontError
from models.order import Order
from models.product import Product
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

MAX_WORKERS = 3


def _identity(fn: Callable) -> Callable:
    return fn


@dataclass
class Overview:
    """Home page data."""

    products: List[Product] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


@dataclass
class ProfileView:
    """Profile page data."""

    products: List[Product] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)
    sales: List[Order] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


class DashboardService:
    """Runs the page-load fetches concurrently."""

    def __init__(self, product_service, order_gateway):
        self._products = product_service
        self._orders = order_gateway

    def load_overview(
        self,
        include_orders: bool,
        filters: Optional[Dict[str, str]] = None,
        wrap: Callable = _identity,
    ) -> Overview:
        """
        Fetch the catalog and, for logged-in users, all orders.

        Args:
            include_orders: False for anonymous visitors
            filters: Catalog query parameters
            wrap: Wraps each task before it is handed to a worker thread
        """
        tasks = {"products": lambda: self._products.list_products(filters)}
        if include_orders:
            tasks["orders"] = self._orders.list_all

        results, errors = self._run(tasks, wrap, "Overview")
        return Overview(
            products=results.get("products", []),
            orders=results.get("orders", []),
            errors=errors,
        )

    def load_profile(self, wrap: Callable = _identity) -> ProfileView:
        """Fetch my products, my orders and my sales side by side."""
        tasks = {
            "products": self._products.list_my_products,
            "orders": self._orders.list_as_buyer,
            "sales": self._orders.list_as_seller,
        }
        results, errors = self._run(tasks, wrap, "Profile")
        return ProfileView(
            products=results.get("products", []),
            orders=results.get("orders", []),
            sales=results.get("sales", []),
            errors=errors,
        )

    def _run(self, tasks: Dict[str, Callable], wrap: Callable, name: str):
        results: Dict[str, list] = {}
        errors: Dict[str, str] = {}
        auth_failure: Optional[AuthorizationFailure] = None

        with ThreadPoolExecutor(max_workers=MAX_WORKERS, thread_name_prefix=name) as pool:
            futures: Dict[str, Future] = {key: pool.submit(wrap(fn)) for key, fn in tasks.items()}

            for key, future in futures.items():
                try:
                    results[key] = future.result()
                except AuthorizationFailure as e:
                    auth_failure = auth_failure or e
                    results[key] = []
                except StorefrontError as e:
                    logger.warning(f"{name} fetch '{key}' failed: {e}")
                    errors[key] = e.message
                    results[key] = []

        if auth_failure is not None:
            raise auth_failure
        return results, errors
