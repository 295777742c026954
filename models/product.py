"""
Product data models.

Product is the read model returned by the catalog endpoints.
ProductInput is the validated payload for create/update; it is built from
raw form fields and refuses to exist with unparseable numbers, so a bad
price or stock never reaches the network.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

import bleach

from core.exceptions import RemoteRejection, ValidationFailure


# Limits mirrored from the backend's field sizes
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000
MAX_CATEGORY_LENGTH = 100


def _sanitize_text(text: Optional[str], max_length: Optional[int] = None) -> str:
    """Strip markup and surrounding whitespace from user input."""
    if not text:
        return ""
    text = bleach.clean(str(text).strip(), tags=[], strip=True)
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def parse_image_list(raw: Any) -> List[str]:
    """
    Parse the comma-separated image field.

    Each entry is trimmed, empty entries are dropped and order is kept.
    A list is accepted as-is (after the same trimming).
    """
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        parts = [str(p) for p in raw]
    else:
        parts = str(raw).split(",")
    return [p.strip() for p in parts if p.strip()]


@dataclass
class Product:
    """
    A catalog product as returned by the backend.

    Ownership is implicit: products returned by ``/products/my/`` belong to
    the current user.
    """

    id: int
    title: str
    description: str = ""
    price: Decimal = Decimal("0")
    stock: int = 0
    category: str = ""
    images: List[str] = field(default_factory=list)
    status: str = "active"
    owner_id: Optional[int] = None

    @property
    def in_stock(self) -> bool:
        """True if at least one unit can be ordered."""
        return self.stock > 0

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """
        Create from an API payload.

        Raises:
            RemoteRejection: Payload is not an object or stock is not a whole number
        """
        if not isinstance(data, dict):
            raise RemoteRejection("Malformed product payload", payload=data)
        try:
            stock = int(data.get("stock") or 0)
        except (TypeError, ValueError):
            raise RemoteRejection("Malformed product payload", payload=data)

        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            description=data.get("description") or "",
            price=_to_decimal(data.get("price")),
            stock=stock,
            category=data.get("category") or "",
            images=parse_image_list(data.get("images")),
            status=data.get("status") or "active",
            owner_id=data.get("owner_id", data.get("seller_id")),
        )


@dataclass(frozen=True)
class ProductInput:
    """
    Validated product payload for create and update.

    Build with ``from_form()``; the constructor does no checking.
    """

    title: str
    description: str
    price: Decimal
    stock: int
    category: str
    images: List[str] = field(default_factory=list)
    status: Optional[str] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ProductInput":
        """
        Validate raw form fields.

        Args:
            form: Mapping of field name to raw string value

        Returns:
            ProductInput ready to serialise

        Raises:
            ValidationFailure: If a required field is empty or a number
                does not parse to a non-negative value
        """
        title = _sanitize_text(form.get("title"), MAX_TITLE_LENGTH)
        description = _sanitize_text(form.get("description"), MAX_DESCRIPTION_LENGTH)
        category = _sanitize_text(form.get("category"), MAX_CATEGORY_LENGTH)

        for name, value in (("title", title), ("description", description), ("category", category)):
            if not value:
                raise ValidationFailure(f"{name.capitalize()} is required.", field=name)

        raw_price = str(form.get("price") or "").strip()
        if not raw_price:
            raise ValidationFailure("Price is required.", field="price")
        try:
            price = Decimal(raw_price)
        except InvalidOperation:
            raise ValidationFailure("Price must be a number.", field="price")
        if not price.is_finite() or price < 0:
            raise ValidationFailure("Price must be zero or greater.", field="price")
        if not math.isfinite(float(price)):
            raise ValidationFailure("Price is too large.", field="price")

        raw_stock = str(form.get("stock") or "").strip()
        if not raw_stock:
            raise ValidationFailure("Stock is required.", field="stock")
        try:
            stock = int(raw_stock)
        except ValueError:
            raise ValidationFailure("Stock must be a whole number.", field="stock")
        if stock < 0:
            raise ValidationFailure("Stock must be zero or greater.", field="stock")

        status = _sanitize_text(form.get("status")) or None

        return cls(
            title=title,
            description=description,
            price=price,
            stock=stock,
            category=category,
            images=parse_image_list(form.get("images")),
            status=status,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Serialise to the JSON body the backend expects."""
        payload = {
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "stock": self.stock,
            "category": self.category,
            "images": list(self.images),
        }
        if self.status:
            payload["status"] = self.status
        return payload
