"""
Unit tests for the concurrent page loads.
"""

import pytest

from core.exceptions import AuthorizationFailure


@pytest.fixture
def seeded(backend):
    product = backend.add_product("5551234", title="Lamp")
    backend.add_order("5559876", product, status="pending")
    backend.add_order("5559876", product, status="completed")
    return product


class TestOverview:

    def test_anonymous_skips_orders(self, dashboard, backend, seeded):
        overview = dashboard.load_overview(include_orders=False)

        assert [p.title for p in overview.products] == ["Lamp"]
        assert overview.orders == []
        assert "/orders/" not in backend.paths_called("GET")

    def test_logged_in_gets_orders(self, logged_in, dashboard, seeded):
        overview = dashboard.load_overview(include_orders=True)

        assert len(overview.orders) == 2
        assert overview.errors == {}

    def test_filters_reach_catalog(self, dashboard, backend, seeded):
        backend.add_product("5551234", title="Novel", category="books")

        overview = dashboard.load_overview(include_orders=False, filters={"category": "books"})

        assert [p.title for p in overview.products] == ["Novel"]

    def test_product_failure_does_not_block_orders(self, logged_in, dashboard, backend, seeded):
        backend.fail("GET", "/products/", 500, {"detail": "catalog down"})

        overview = dashboard.load_overview(include_orders=True)

        assert overview.products == []
        assert overview.errors == {"products": "catalog down"}
        assert len(overview.orders) == 2

    def test_wrap_is_applied_to_every_task(self, logged_in, dashboard, seeded):
        wrapped = []

        def wrap(fn):
            wrapped.append(fn)
            return fn

        dashboard.load_overview(include_orders=True, wrap=wrap)

        assert len(wrapped) == 2


class TestProfile:

    def test_all_three_lists(self, dashboard, session_manager, seeded):
        session_manager.login("5551234", "rightpw")

        view = dashboard.load_profile()

        assert [p.title for p in view.products] == ["Lamp"]
        assert view.orders == []
        assert len(view.sales) == 2

    def test_sales_failure_keeps_buyer_orders(self, dashboard, session_manager, backend, seeded):
        session_manager.login("5559876", "buyerpw")
        backend.fail("GET", "/orders/my/sales/", 500)

        view = dashboard.load_profile()

        assert view.sales == []
        assert len(view.orders) == 2
        assert "sales" not in view.errors

    def test_orders_failure_is_reported(self, logged_in, dashboard, backend, transport_error):
        backend.raise_on("GET", "/orders/my/", transport_error)

        view = dashboard.load_profile()

        assert view.orders == []
        assert view.errors["orders"] == "Could not reach the storefront service"

    def test_401_is_raised_after_join(self, logged_in, dashboard, backend, store):
        backend.tokens.clear()

        with pytest.raises(AuthorizationFailure):
            dashboard.load_profile()

        assert store.snapshot().access_token is None


class TestMalformedRows:

    def test_bad_product_row_does_not_block_orders(self, logged_in, dashboard, backend, seeded):
        backend.add_product("5551234", title="Broken", stock="n/a")

        overview = dashboard.load_overview(include_orders=True)

        assert overview.products == []
        assert overview.errors == {"products": "Malformed product payload"}
        assert len(overview.orders) == 2

    def test_bad_sales_row_degrades_to_empty(self, logged_in, dashboard, backend, seeded):
        broken = backend.add_order("5559876", seeded)
        broken["quantity"] = "two"

        view = dashboard.load_profile()

        assert view.sales == []
        assert "sales" not in view.errors
        assert [p.title for p in view.products] == ["Lamp"]
