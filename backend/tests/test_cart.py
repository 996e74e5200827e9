# Overview: Pytest coverage for the cart aggregator.

"""
Cart tests: single active cart, price snapshots, grouping by store and the
advisory stock check.
"""

from decimal import Decimal

import pytest

from mall.enums import AuthRole, StoreStatus
from mall.errors import BadRequestError, NotFoundError
from mall.models import Cart, CartItem
from mall.services import cart_service


class TestActiveCart:

    def test_get_or_create_is_idempotent(self, db_session, customer):
        first = cart_service.get_or_create_active_cart(customer.id)
        second = cart_service.get_or_create_active_cart(customer.id)
        assert first.id == second.id
        assert db_session.query(Cart).filter_by(customer_id=customer.id, is_active=True).count() == 1

    def test_add_item_reuses_cart(self, db_session, customer, product_x, plain_product_x):
        product, variant = product_x
        cart_service.add_item(customer.id, product.id, variant.id, 1)
        cart_service.add_item(customer.id, plain_product_x.id, None, 2)
        assert db_session.query(Cart).filter_by(customer_id=customer.id).count() == 1
        assert db_session.query(CartItem).count() == 2


class TestPriceSnapshot:

    def test_base_price_change_does_not_touch_cart_line(self, db_session, customer, plain_product_x):
        item = cart_service.add_item(customer.id, plain_product_x.id, None, 1)

        plain_product_x.base_price = Decimal("999.99")
        db_session.commit()

        db_session.refresh(item)
        assert item.unit_price_snapshot == Decimal("25.50")

    def test_variant_override_is_snapshotted(self, db_session, customer, product_x):
        product, variant = product_x
        variant.price_override = Decimal("120.00")
        db_session.commit()

        item = cart_service.add_item(customer.id, product.id, variant.id, 1)
        variant.price_override = Decimal("80.00")
        db_session.commit()

        db_session.refresh(item)
        assert item.unit_price_snapshot == Decimal("120.00")
        assert item.currency_snapshot == "YER"


class TestAddItemRules:

    def test_unknown_product(self, db_session, customer):
        with pytest.raises(NotFoundError):
            cart_service.add_item(customer.id, 424242, None, 1)

    def test_product_of_inactive_store(self, db_session, customer, store_x, plain_product_x):
        store_x.status = StoreStatus.SUSPENDED.value
        db_session.commit()
        with pytest.raises(NotFoundError):
            cart_service.add_item(customer.id, plain_product_x.id, None, 1)

    def test_variant_of_other_product(self, db_session, customer, product_x, product_y):
        product, _ = product_x
        _, other_variant = product_y
        with pytest.raises(NotFoundError):
            cart_service.add_item(customer.id, product.id, other_variant.id, 1)

    def test_stock_checked_but_not_reserved(self, db_session, customer, product_x):
        product, variant = product_x
        with pytest.raises(BadRequestError):
            cart_service.add_item(customer.id, product.id, variant.id, 6)

        cart_service.add_item(customer.id, product.id, variant.id, 5)
        db_session.refresh(variant.inventory)
        assert variant.inventory.stock_qty == 5


class TestCartRoutes:

    def test_view_groups_by_store(self, client, customer_headers, product_x, plain_product_x, product_y):
        product, variant = product_x
        lamp, lamp_variant = product_y

        for payload in (
            {"productId": str(product.id), "variantId": str(variant.id), "qty": 2},
            {"productId": str(plain_product_x.id), "qty": 1},
            {"productId": str(lamp.id), "variantId": str(lamp_variant.id), "qty": 1},
        ):
            resp = client.post("/api/checkout/cart/items", json=payload, headers=customer_headers)
            assert resp.status_code == 201

        body = client.get("/api/checkout/cart", headers=customer_headers).get_json()
        groups = {g["storeSlug"]: g for g in body["groups"]}
        assert set(groups) == {"store-x", "store-y"}
        assert groups["store-x"]["subtotal"] == "225.50"
        assert len(groups["store-x"]["items"]) == 2
        assert groups["store-y"]["subtotal"] == "40.00"
        assert groups["store-y"]["items"][0]["unitPrice"] == "40.00"

    def test_empty_cart(self, client, customer_headers):
        body = client.get("/api/checkout/cart", headers=customer_headers).get_json()
        assert body["cartId"]
        assert body["groups"] == []

    @pytest.mark.parametrize(
        "payload",
        [
            {"productId": "1", "qty": 0},
            {"productId": "1", "qty": "2"},
            {"productId": "abc", "qty": 1},
            {"qty": 1},
        ],
    )
    def test_add_item_validation(self, client, customer_headers, payload):
        resp = client.post("/api/checkout/cart/items", json=payload, headers=customer_headers)
        assert resp.status_code == 400

    def test_insufficient_stock_is_400(self, client, customer_headers, product_x):
        product, variant = product_x
        resp = client.post(
            "/api/checkout/cart/items",
            json={"productId": str(product.id), "variantId": str(variant.id), "qty": 50},
            headers=customer_headers,
        )
        assert resp.status_code == 400

    def test_remove_item(self, client, customer_headers, plain_product_x):
        resp = client.post(
            "/api/checkout/cart/items",
            json={"productId": str(plain_product_x.id), "qty": 1},
            headers=customer_headers,
        )
        item_id = resp.get_json()["id"]

        resp = client.delete(f"/api/checkout/cart/items/{item_id}", headers=customer_headers)
        assert resp.status_code == 200
        assert client.get("/api/checkout/cart", headers=customer_headers).get_json()["groups"] == []

    def test_cannot_remove_other_customers_item(self, client, db_session, make_user, headers_for,
                                                customer_headers, plain_product_x):
        resp = client.post(
            "/api/checkout/cart/items",
            json={"productId": str(plain_product_x.id), "qty": 1},
            headers=customer_headers,
        )
        item_id = resp.get_json()["id"]

        intruder = make_user("Intruder", "intruder@mall.test", AuthRole.CUSTOMER)
        resp = client.delete(f"/api/checkout/cart/items/{item_id}", headers=headers_for(intruder))
        assert resp.status_code == 404
