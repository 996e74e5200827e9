# Overview: Pytest coverage for checkout and order splitting.

"""
Checkout tests.

Verifies:
- One order per store with per-store shipping fees
- Stock decremented exactly once per variant line
- All-or-nothing: a stock failure in any store leaves every store untouched
- Empty cart and malformed shipping fees are 400s
"""

from decimal import Decimal

import pytest

from mall.enums import StoreStatus
from mall.errors import BadRequestError
from mall.models import CartItem, Inventory, Order, OrderItem
from mall.services import cart_service, checkout_service


@pytest.fixture
def split_cart(db_session, customer, product_x, plain_product_x, product_y):
    """Two store-X lines (qty 1 each) and one store-Y line."""
    bed, bed_variant = product_x
    lamp, lamp_variant = product_y
    cart_service.add_item(customer.id, bed.id, bed_variant.id, 1)
    cart_service.add_item(customer.id, plain_product_x.id, None, 1)
    cart_service.add_item(customer.id, lamp.id, lamp_variant.id, 1)
    return bed_variant, lamp_variant


def _stock(db_session, variant) -> int:
    return db_session.query(Inventory.stock_qty).filter_by(variant_id=variant.id).scalar()


class TestCheckoutService:

    def test_splits_orders_per_store(self, db_session, customer, store_x, store_y, split_cart):
        bed_variant, lamp_variant = split_cart

        summaries = checkout_service.checkout(customer.id, {store_x.id: Decimal("10.00")})

        assert len(summaries) == 2
        by_store = {s["storeId"]: s for s in summaries}
        assert by_store[str(store_x.id)]["total"] == "135.50"
        assert by_store[str(store_y.id)]["total"] == "40.00"

        order_x = db_session.query(Order).filter_by(store_id=store_x.id).one()
        assert order_x.subtotal == Decimal("125.50")
        assert order_x.shipping_fee == Decimal("10.00")
        assert order_x.status == "PENDING"
        assert order_x.payment_status == "UNPAID"
        assert len(order_x.items) == 2

        assert _stock(db_session, bed_variant) == 4
        assert _stock(db_session, lamp_variant) == 2
        assert db_session.query(CartItem).count() == 0

    def test_stock_failure_rolls_back_every_store(self, db_session, customer, store_x, store_y, split_cart):
        bed_variant, lamp_variant = split_cart
        db_session.query(Inventory).filter_by(variant_id=bed_variant.id).update({"stock_qty": 0})
        db_session.commit()

        with pytest.raises(BadRequestError) as exc_info:
            checkout_service.checkout(customer.id, {store_x.id: Decimal("10.00")})

        assert exc_info.value.details["variantId"] == str(bed_variant.id)
        assert exc_info.value.details["available"] == 0
        assert db_session.query(Order).count() == 0
        assert db_session.query(OrderItem).count() == 0
        assert _stock(db_session, bed_variant) == 0
        assert _stock(db_session, lamp_variant) == 3
        assert db_session.query(CartItem).count() == 3

    def test_empty_cart(self, db_session, customer):
        with pytest.raises(BadRequestError, match="Cart is empty"):
            checkout_service.checkout(customer.id)

    def test_suspended_store_blocks_checkout(self, db_session, customer, store_x, split_cart):
        _, lamp_variant = split_cart
        store_x.status = StoreStatus.SUSPENDED.value
        db_session.commit()

        with pytest.raises(BadRequestError, match="Store is not accepting orders") as exc_info:
            checkout_service.checkout(customer.id)

        assert exc_info.value.details == {"storeId": str(store_x.id)}
        assert db_session.query(Order).count() == 0
        assert _stock(db_session, lamp_variant) == 3
        assert db_session.query(CartItem).count() == 3

    def test_disabled_product_blocks_checkout(self, db_session, customer, plain_product_x):
        cart_service.add_item(customer.id, plain_product_x.id, None, 1)
        plain_product_x.is_active = False
        db_session.commit()

        with pytest.raises(BadRequestError, match="Product is no longer available"):
            checkout_service.checkout(customer.id)

        assert db_session.query(Order).count() == 0
        assert db_session.query(CartItem).count() == 1

    def test_cart_reused_after_checkout(self, db_session, customer, store_x, split_cart):
        cart_before = cart_service.find_active_cart(customer.id)
        checkout_service.checkout(customer.id)
        assert cart_service.find_active_cart(customer.id).id == cart_before.id

    def test_order_keeps_price_snapshot(self, db_session, customer, store_x, plain_product_x):
        cart_service.add_item(customer.id, plain_product_x.id, None, 2)
        plain_product_x.base_price = Decimal("1.00")
        db_session.commit()

        checkout_service.checkout(customer.id)

        item = db_session.query(OrderItem).one()
        assert item.unit_price == Decimal("25.50")
        assert db_session.query(Order).one().total == Decimal("51.00")

    def test_group_by_store_keeps_first_seen_order(self):
        items = [CartItem(store_id=2), CartItem(store_id=1), CartItem(store_id=2)]
        groups = checkout_service.group_by_store(items)
        assert list(groups) == [2, 1]
        assert len(groups[2]) == 2


class TestCheckoutRoute:

    def test_checkout_scenario(self, client, db_session, customer_headers, store_x, store_y, split_cart):
        bed_variant, _ = split_cart

        resp = client.post(
            "/api/checkout/checkout",
            json={"shippingFeePerStore": {str(store_x.id): "10.00"}},
            headers=customer_headers,
        )
        assert resp.status_code == 200
        orders = resp.get_json()["orders"]
        assert len(orders) == 2
        totals = {o["storeId"]: o["total"] for o in orders}
        assert totals == {str(store_x.id): "135.50", str(store_y.id): "40.00"}
        assert all(o["currency"] == "YER" for o in orders)

        assert _stock(db_session, bed_variant) == 4
        cart = client.get("/api/checkout/cart", headers=customer_headers).get_json()
        assert cart["groups"] == []

    def test_checkout_rollback_scenario(self, client, db_session, customer_headers, store_x, split_cart):
        bed_variant, lamp_variant = split_cart
        db_session.query(Inventory).filter_by(variant_id=bed_variant.id).update({"stock_qty": 0})
        db_session.commit()

        resp = client.post(
            "/api/checkout/checkout",
            json={"shippingFeePerStore": {str(store_x.id): "10.00"}},
            headers=customer_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Insufficient stock during checkout"
        assert db_session.query(Order).count() == 0
        assert _stock(db_session, lamp_variant) == 3

    def test_empty_cart_is_400(self, client, customer_headers):
        resp = client.post("/api/checkout/checkout", json={}, headers=customer_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Cart is empty"

    @pytest.mark.parametrize(
        "fees",
        [
            {"1": "10.001"},
            {"1": 10},
            {"abc": "1.00"},
            ["10.00"],
        ],
    )
    def test_bad_shipping_fees(self, client, customer_headers, split_cart, fees):
        resp = client.post(
            "/api/checkout/checkout",
            json={"shippingFeePerStore": fees},
            headers=customer_headers,
        )
        assert resp.status_code == 400
