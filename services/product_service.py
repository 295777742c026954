"""
Product catalog service.

Owner-scoped CRUD. The only client-side rules are: be logged in, fill the
required fields, and give numbers that parse to non-negative values.
Ownership itself is enforced by the backend.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from core.api_client import StorefrontAPIClient
from core.exceptions import AuthorizationFailure
from models.product import Product, ProductInput
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

# Query parameters the catalog endpoint understands
FILTER_KEYS = ("category", "search", "min_price", "max_price", "status", "skip", "limit")


class ProductService:
    """Catalog reads and owner-scoped writes."""

    def __init__(self, api_client: StorefrontAPIClient, session_manager):
        self._api = api_client
        self._session = session_manager

    def list_products(self, filters: Optional[Mapping[str, Any]] = None) -> List[Product]:
        """List the catalog, optionally filtered. Blank filter values are dropped."""
        params: Dict[str, Any] = {}
        for key in FILTER_KEYS:
            value = (filters or {}).get(key)
            if value not in (None, ""):
                params[key] = value
        return [Product.from_dict(p) for p in self._api.list_products(params or None)]

    def get_product(self, product_id: int) -> Product:
        return Product.from_dict(self._api.get_product(product_id))

    def list_my_products(self) -> List[Product]:
        return [Product.from_dict(p) for p in self._api.list_my_products()]

    def create_product(self, form: Mapping[str, Any]) -> Product:
        """
        Validate and create a product.

        Raises:
            AuthorizationFailure: Not logged in (no request sent)
            ValidationFailure: Bad field (no request sent)
        """
        self._require_login("Please login to create a product")
        product_input = ProductInput.from_form(form)
        product = Product.from_dict(self._api.create_product(product_input.to_payload()))
        logger.info(f"Product {product.id} created")
        return product

    def update_product(self, product_id: int, form: Mapping[str, Any]) -> Product:
        self._require_login("Please login to edit a product")
        product_input = ProductInput.from_form(form)
        product = Product.from_dict(self._api.update_product(product_id, product_input.to_payload()))
        logger.info(f"Product {product_id} updated")
        return product

    def delete_product(self, product_id: int) -> None:
        self._require_login("Please login to delete a product")
        self._api.delete_product(product_id)
        logger.info(f"Product {product_id} deleted")

    def _require_login(self, message: str) -> None:
        if not self._session.is_authenticated:
            raise AuthorizationFailure(message)
