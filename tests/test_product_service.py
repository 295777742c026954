"""
Unit tests for the ProductService.
"""

import pytest

from core.exceptions import AuthorizationFailure, RemoteRejection, ValidationFailure


@pytest.fixture
def form():
    return {
        "title": "Desk Lamp",
        "description": "Warm light",
        "price": "24.50",
        "stock": "3",
        "category": "home",
        "images": "a.jpg, b.jpg",
    }


class TestCreate:

    def test_images_round_trip(self, logged_in, product_service, form):
        created = product_service.create_product(form)

        fetched = product_service.get_product(created.id)

        assert fetched.images == ["a.jpg", "b.jpg"]
        assert fetched.title == "Desk Lamp"

    @pytest.mark.parametrize("price", ["twelve", "1e400"])
    def test_bad_price_never_reaches_network(self, logged_in, product_service, backend, form, price):
        form["price"] = price

        with pytest.raises(ValidationFailure) as exc_info:
            product_service.create_product(form)

        assert exc_info.value.field == "price"
        assert "/products/" not in backend.paths_called("POST")

    def test_negative_stock(self, logged_in, product_service, backend, form):
        form["stock"] = "-1"

        with pytest.raises(ValidationFailure):
            product_service.create_product(form)

        assert "/products/" not in backend.paths_called("POST")

    def test_requires_login(self, product_service, backend, form):
        with pytest.raises(AuthorizationFailure):
            product_service.create_product(form)

        assert backend.calls == []

    def test_created_product_is_mine(self, logged_in, product_service, form):
        created = product_service.create_product(form)

        assert [p.id for p in product_service.list_my_products()] == [created.id]


class TestUpdateDelete:

    def test_update(self, logged_in, product_service, form):
        created = product_service.create_product(form)
        form.update(price="30", status="inactive")

        updated = product_service.update_product(created.id, form)

        assert str(updated.price) == "30.0"
        assert updated.status == "inactive"

    def test_update_someone_elses_product(self, product_service, session_manager, backend, form):
        product = backend.add_product("5551234")
        session_manager.login("5559876", "buyerpw")

        with pytest.raises(RemoteRejection) as exc_info:
            product_service.update_product(product["id"], form)

        assert exc_info.value.message == "Not your product"
        assert exc_info.value.status_code == 403

    def test_delete(self, logged_in, product_service, backend, form):
        created = product_service.create_product(form)

        product_service.delete_product(created.id)

        assert created.id not in backend.products

    def test_delete_requires_login(self, product_service, backend):
        with pytest.raises(AuthorizationFailure):
            product_service.delete_product(1)

        assert backend.calls == []


class TestList:

    def test_blank_filters_are_dropped(self, product_service, backend):
        backend.add_product("5551234", title="Lamp", category="home")

        products = product_service.list_products({"category": "home", "search": "", "bogus": "x"})

        assert [p.title for p in products] == ["Lamp"]
        assert backend.calls[-1][2]["params"] == {"category": "home"}

    def test_no_filters_sends_no_params(self, product_service, backend):
        product_service.list_products()

        assert backend.calls[-1][2]["params"] is None

    def test_missing_product(self, product_service):
        with pytest.raises(RemoteRejection) as exc_info:
            product_service.get_product(999)

        assert exc_info.value.message == "Product not found"
