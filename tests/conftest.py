"""
Shared fixtures for the storefront client tests.

FakeStorefrontBackend stands in for requests.Session: it is injected into
StorefrontAPIClient as ``http_session`` and answers ``request()`` calls from
in-memory users, products and orders, the way the real REST API would.
"""

import json
import re
from decimal import Decimal

import pytest
import requests

from core.api_client import StorefrontAPIClient
from core.session_store import InMemorySessionStore
from services.session_manager import SessionManager
from services.order_gateway import OrderGateway
from services.product_service import ProductService
from services.dashboard_service import DashboardService


BASE_URL = "http://storefront.test/api"


class FakeResponse:
    """Minimal requests.Response look-alike."""

    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.content = b"" if payload is None else json.dumps(payload, default=str).encode("utf-8")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeStorefrontBackend:
    """In-memory REST backend, called like ``requests.Session.request``."""

    def __init__(self):
        self.users = {}
        self.passwords = {}
        self.tokens = {}
        self.products = {}
        self.orders = {}
        self.calls = []
        self.overrides = {}
        self._next_id = 1
        self._next_token = 1

        self.add_user("5551234", "rightpw", full_name="Ada Seller")
        self.add_user("5559876", "buyerpw", full_name="Bob Buyer")

    # -------------------------------------------------------------------------
    # Seeding helpers
    # -------------------------------------------------------------------------

    def _new_id(self):
        value = self._next_id
        self._next_id += 1
        return value

    def add_user(self, phone, password, full_name="Test User"):
        user = {
            "id": self._new_id(),
            "full_name": full_name,
            "phone": phone,
            "avatar": None,
            "about": None,
            "birth_date": None,
            "rating": 4.5,
        }
        self.users[phone] = user
        self.passwords[phone] = password
        return user

    def add_product(self, owner_phone, title="Lamp", price="19.99", stock=5, images=None, category="home"):
        product = {
            "id": self._new_id(),
            "owner_id": self.users[owner_phone]["id"],
            "title": title,
            "description": f"A {title.lower()}",
            "price": price,
            "stock": stock,
            "category": category,
            "images": images or [],
            "status": "active",
        }
        self.products[product["id"]] = product
        return product

    def add_order(self, buyer_phone, product, quantity=1, status="pending"):
        order = {
            "id": self._new_id(),
            "product_id": product["id"],
            "buyer_id": self.users[buyer_phone]["id"],
            "quantity": quantity,
            "total_price": str(Decimal(str(product["price"])) * quantity),
            "status": status,
            "order_date": "2026-10-01T12:00:00",
            "message": None,
        }
        self.orders[order["id"]] = order
        return order

    def issue_token(self, phone):
        token = f"access-{self._next_token}"
        self._next_token += 1
        self.tokens[token] = phone
        return token

    def fail(self, method, path, status_code=500, payload=None):
        """Force the next calls to ``method path`` to answer with an error."""
        self.overrides[(method, path)] = FakeResponse(status_code, payload)

    def raise_on(self, method, path, exc):
        """Force the next calls to ``method path`` to raise a transport error."""
        self.overrides[(method, path)] = exc

    def paths_called(self, method=None):
        return [p for (m, p, _) in self.calls if method is None or m == method]

    # -------------------------------------------------------------------------
    # requests.Session interface
    # -------------------------------------------------------------------------

    def request(self, method, url, json=None, data=None, params=None, headers=None, timeout=None):
        assert url.startswith(BASE_URL), url
        assert timeout is not None, "every request must carry a timeout"
        path = url[len(BASE_URL):]
        self.calls.append((method, path, {"json": json, "data": data, "params": params, "headers": headers or {}}))

        override = self.overrides.get((method, path))
        if isinstance(override, Exception):
            raise override
        if override is not None:
            return override

        for pattern_method, pattern, handler in self._routes():
            match = re.fullmatch(pattern, path)
            if match and pattern_method == method:
                return handler(match, json=json, data=data, params=params or {}, headers=headers or {})
        return FakeResponse(404, {"detail": "Not Found"})

    def _routes(self):
        return [
            ("POST", r"/auth/login", self._login),
            ("POST", r"/auth/signup", self._signup),
            ("POST", r"/auth/logout", self._logout),
            ("GET", r"/users/me/get", self._me),
            ("GET", r"/products/", self._list_products),
            ("POST", r"/products/", self._create_product),
            ("GET", r"/products/my/", self._my_products),
            ("GET", r"/products/(\d+)", self._get_product),
            ("PUT", r"/products/(\d+)", self._update_product),
            ("DELETE", r"/products/(\d+)", self._delete_product),
            ("GET", r"/orders/", self._list_orders),
            ("POST", r"/orders/", self._create_order),
            ("GET", r"/orders/my/", self._my_orders),
            ("GET", r"/orders/my/sales/", self._my_sales),
            ("GET", r"/orders/(\d+)", self._get_order),
            ("PATCH", r"/orders/(\d+)/status", self._set_status),
            ("DELETE", r"/orders/(\d+)", self._delete_order),
        ]

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _caller(self, headers):
        auth = headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return None
        phone = self.tokens.get(auth[len("Bearer "):])
        return self.users.get(phone) if phone else None

    def _unauthorized(self):
        return FakeResponse(401, {"detail": "Could not validate credentials"})

    def _login(self, match, data=None, **_):
        phone = (data or {}).get("username")
        if phone in self.passwords and self.passwords[phone] == (data or {}).get("password"):
            return FakeResponse(200, {
                "access_token": self.issue_token(phone),
                "refresh_token": f"refresh-for-{phone}",
                "token_type": "bearer",
            })
        return FakeResponse(401, {"detail": "Incorrect phone or password"})

    def _signup(self, match, json=None, **_):
        if json["phone"] in self.users:
            return FakeResponse(400, {"detail": "Phone already registered"})
        user = self.add_user(json["phone"], json["password"], full_name=json["full_name"])
        return FakeResponse(201, user)

    def _logout(self, match, headers=None, **_):
        auth = headers.get("Authorization", "")
        self.tokens.pop(auth[len("Bearer "):], None)
        return FakeResponse(200, {"detail": "Logged out"})

    def _me(self, match, headers=None, **_):
        user = self._caller(headers)
        return FakeResponse(200, user) if user else self._unauthorized()

    def _list_products(self, match, params=None, **_):
        products = list(self.products.values())
        if params.get("category"):
            products = [p for p in products if p["category"] == params["category"]]
        return FakeResponse(200, products)

    def _create_product(self, match, json=None, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        product = dict(json, id=self._new_id(), owner_id=user["id"], status=json.get("status", "active"))
        self.products[product["id"]] = product
        return FakeResponse(201, product)

    def _my_products(self, match, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        return FakeResponse(200, [p for p in self.products.values() if p["owner_id"] == user["id"]])

    def _get_product(self, match, **_):
        product = self.products.get(int(match.group(1)))
        return FakeResponse(200, product) if product else FakeResponse(404, {"detail": "Product not found"})

    def _update_product(self, match, json=None, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        product = self.products.get(int(match.group(1)))
        if not product:
            return FakeResponse(404, {"detail": "Product not found"})
        if product["owner_id"] != user["id"]:
            return FakeResponse(403, {"detail": "Not your product"})
        product.update(json)
        return FakeResponse(200, product)

    def _delete_product(self, match, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        product = self.products.get(int(match.group(1)))
        if not product:
            return FakeResponse(404, {"detail": "Product not found"})
        if product["owner_id"] != user["id"]:
            return FakeResponse(403, {"detail": "Not your product"})
        del self.products[product["id"]]
        return FakeResponse(204)

    def _visible_orders(self, user):
        own_products = {p["id"] for p in self.products.values() if p["owner_id"] == user["id"]}
        return [o for o in self.orders.values() if o["buyer_id"] == user["id"] or o["product_id"] in own_products]

    def _list_orders(self, match, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        return FakeResponse(200, self._visible_orders(user))

    def _my_orders(self, match, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        return FakeResponse(200, [o for o in self.orders.values() if o["buyer_id"] == user["id"]])

    def _my_sales(self, match, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        own_products = {p["id"] for p in self.products.values() if p["owner_id"] == user["id"]}
        return FakeResponse(200, [o for o in self.orders.values() if o["product_id"] in own_products])

    def _create_order(self, match, json=None, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        product = self.products.get(json["product_id"])
        if not product:
            return FakeResponse(404, {"detail": "Product not found"})
        if json["quantity"] > product["stock"]:
            return FakeResponse(400, {"detail": f"Not enough stock. Available: {product['stock']}"})
        product["stock"] -= json["quantity"]
        buyer_phone = user["phone"]
        order = self.add_order(buyer_phone, product, quantity=json["quantity"])
        order["message"] = json.get("message")
        return FakeResponse(201, order)

    def _get_order(self, match, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        order = self.orders.get(int(match.group(1)))
        return FakeResponse(200, order) if order else FakeResponse(404, {"detail": "Order not found"})

    def _set_status(self, match, params=None, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        order = self.orders.get(int(match.group(1)))
        if not order:
            return FakeResponse(404, {"detail": "Order not found"})
        new_status = params.get("new_status")
        if new_status not in ("pending", "confirmed", "completed", "cancelled"):
            return FakeResponse(422, {"detail": [{"loc": ["query", "new_status"], "msg": "Invalid status"}]})
        if order["status"] != "pending":
            return FakeResponse(400, {"detail": f"Cannot change status from {order['status']}"})
        order["status"] = new_status
        return FakeResponse(200, order)

    def _delete_order(self, match, headers=None, **_):
        user = self._caller(headers)
        if not user:
            return self._unauthorized()
        if self.orders.pop(int(match.group(1)), None) is None:
            return FakeResponse(404, {"detail": "Order not found"})
        return FakeResponse(204)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def backend():
    """A fresh fake backend with two users and no products."""
    return FakeStorefrontBackend()


@pytest.fixture
def api_client(backend):
    """API client talking to the fake backend."""
    return StorefrontAPIClient(BASE_URL, http_session=backend, timeout=2.0)


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def session_manager(api_client, store):
    return SessionManager(api_client, store)


@pytest.fixture
def logged_in(session_manager):
    """Session manager logged in as the seller (5551234)."""
    session_manager.login("5551234", "rightpw")
    return session_manager


@pytest.fixture
def order_gateway(api_client, session_manager):
    return OrderGateway(api_client, session_manager)


@pytest.fixture
def product_service(api_client, session_manager):
    return ProductService(api_client, session_manager)


@pytest.fixture
def dashboard(product_service, order_gateway):
    return DashboardService(product_service, order_gateway)


@pytest.fixture
def app(backend):
    """Flask app wired to the fake backend."""
    from app import create_app

    client = StorefrontAPIClient(BASE_URL, http_session=backend, timeout=2.0)
    flask_app = create_app("config.TestingConfig", api_client=client)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def transport_error():
    return requests.exceptions.ConnectionError("connection refused")
