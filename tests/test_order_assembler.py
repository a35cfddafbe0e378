"""Tests for checkout and the order lifecycle."""

from datetime import datetime, timedelta, timezone

import pytest

from models.cart import CartItem
from models.coupon import Coupon
from models.order import Order
from services.errors import (
    CheckoutError, CouponExhausted, CouponNotActive, EmptyCart, InsufficientStock, InvalidTransition,
    OrderNotFound, ProductUnavailable,
)
from services.money import Money
from services.order_assembler import OrderAssembler

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
ADDRESS = {"name": "Budi", "street": "Jl. Merdeka 1", "city": "Jakarta", "postal_code": "10110",
           "country": "Indonesia", "phone": "0812"}


@pytest.fixture
def assembler(db, store_config):
    return OrderAssembler(db, store_config, clock=lambda: NOW)


@pytest.fixture
def customer(make_user):
    return make_user()


def place(assembler, user, items, **kwargs):
    kwargs.setdefault("payment_method", "bank_transfer")
    return assembler.create_order(
        user_id=user.id,
        cart_items=items,
        billing_address=ADDRESS,
        shipping_address=ADDRESS,
        **kwargs,
    )


class TestCreateOrder:
    def test_happy_path(self, db, assembler, customer, make_product):
        p = make_product(price="45000", stock_quantity=5)
        db.add(CartItem(user_id=customer.id, product_id=p.id, quantity=2))
        db.commit()

        order = place(assembler, customer, [(p.id, 2)])

        assert order.order_number.startswith("ORD-20260301-")
        assert order.status == "pending"
        assert order.payment_status == "pending"
        assert order.subtotal == Money.of("90000")
        assert order.tax_amount == Money.of("9000")
        assert order.shipping_amount == Money.of("15000")
        assert order.total_amount == Money.of("114000")
        assert order.total_amount == (
            order.subtotal + order.tax_amount + order.shipping_amount - order.discount_amount
        )
        assert [(line.product_sku, line.quantity, line.total) for line in order.lines] == [
            (p.sku, 2, Money.of("90000"))
        ]

        db.refresh(p)
        assert p.stock_quantity == 3
        assert db.query(CartItem).filter(CartItem.user_id == customer.id).count() == 0

    def test_lines_keep_price_after_catalog_change(self, db, assembler, customer, make_product):
        p = make_product(price="45000", name="Batik Shirt")
        order = place(assembler, customer, [(p.id, 1)])

        p.price = 99000
        p.name = "Renamed"
        db.commit()

        stored = db.get(Order, order.id)
        assert stored.items[0].product_name == "Batik Shirt"
        assert Money.of(stored.items[0].price) == Money.of("45000")

    def test_all_or_nothing_when_one_line_is_short(self, db, assembler, customer, make_product, make_coupon):
        plenty = make_product(stock_quantity=10)
        empty = make_product(stock_quantity=0)
        coupon = make_coupon(code="SAVE10", usage_limit=5)

        with pytest.raises(InsufficientStock):
            place(assembler, customer, [(plenty.id, 2), (empty.id, 1)], coupon_code="SAVE10")

        db.refresh(plenty)
        db.refresh(coupon)
        assert plenty.stock_quantity == 10
        assert coupon.used_count == 0
        assert db.query(Order).count() == 0

    def test_cart_is_kept_when_checkout_fails(self, db, assembler, customer, make_product):
        p = make_product(stock_quantity=1)
        db.add(CartItem(user_id=customer.id, product_id=p.id, quantity=3))
        db.commit()

        with pytest.raises(InsufficientStock):
            place(assembler, customer, [(p.id, 3)])
        assert db.query(CartItem).filter(CartItem.user_id == customer.id).count() == 1

    def test_empty_cart(self, assembler, customer):
        with pytest.raises(EmptyCart):
            place(assembler, customer, [])

    def test_unknown_payment_method(self, assembler, customer, make_product):
        p = make_product()
        with pytest.raises(CheckoutError):
            place(assembler, customer, [(p.id, 1)], payment_method="barter")

    def test_unavailable_product(self, db, assembler, customer, make_product):
        p = make_product(status="inactive")
        with pytest.raises(ProductUnavailable):
            place(assembler, customer, [(p.id, 1)])
        db.refresh(p)
        assert p.stock_quantity == 10

    def test_coupon_is_redeemed_once(self, db, assembler, customer, make_product, make_coupon):
        p = make_product(price="80000")
        coupon = make_coupon(code="SAVE10", minimum_amount="50000")

        order = place(assembler, customer, [(p.id, 1)], coupon_code="save10")

        assert order.discount_amount == Money.of("8000")
        assert order.tax_amount == Money.of("7200")
        assert order.coupon_id == coupon.id
        db.refresh(coupon)
        assert coupon.used_count == 1

    def test_coupon_below_minimum_is_rejected(self, db, assembler, customer, make_product, make_coupon):
        p = make_product(price="40000")
        coupon = make_coupon(code="SAVE10", minimum_amount="50000")

        with pytest.raises(CouponNotActive):
            place(assembler, customer, [(p.id, 1)], coupon_code="SAVE10")
        db.refresh(coupon)
        db.refresh(p)
        assert coupon.used_count == 0
        assert p.stock_quantity == 10

    def test_expired_coupon(self, assembler, customer, make_product, make_coupon):
        p = make_product()
        make_coupon(code="OLD", expires_at=NOW - timedelta(days=1))
        with pytest.raises(CouponNotActive):
            place(assembler, customer, [(p.id, 1)], coupon_code="OLD")

    def test_exhausted_coupon(self, db, assembler, customer, make_product, make_coupon):
        p = make_product(stock_quantity=5)
        make_coupon(code="ONCE", usage_limit=1)
        place(assembler, customer, [(p.id, 1)], coupon_code="ONCE")

        with pytest.raises(CouponExhausted):
            place(assembler, customer, [(p.id, 1)], coupon_code="ONCE")
        db.refresh(p)
        assert p.stock_quantity == 4
        assert db.query(Coupon).filter(Coupon.code == "ONCE").one().used_count == 1


class TestOrderStatus:
    def test_forward_path_sets_timestamps(self, assembler, customer, make_product):
        p = make_product()
        order = place(assembler, customer, [(p.id, 1)])

        for status in ("confirmed", "processing", "shipped"):
            order = assembler.update_status(order.id, status)
        assert order.status == "shipped"
        assert order.shipped_at is not None

        order = assembler.update_status(order.id, "delivered")
        assert order.delivered_at is not None

    def test_cannot_skip_or_go_back(self, assembler, customer, make_product):
        p = make_product()
        order = place(assembler, customer, [(p.id, 1)])

        with pytest.raises(InvalidTransition):
            assembler.update_status(order.id, "shipped")
        assembler.update_status(order.id, "confirmed")
        with pytest.raises(InvalidTransition):
            assembler.update_status(order.id, "pending")

    def test_cancel_releases_stock(self, db, assembler, customer, make_product):
        p = make_product(stock_quantity=5)
        order = place(assembler, customer, [(p.id, 2)])
        db.refresh(p)
        assert p.stock_quantity == 3

        order = assembler.update_status(order.id, "cancelled")
        assert order.status == "cancelled"
        db.refresh(p)
        assert p.stock_quantity == 5

        with pytest.raises(InvalidTransition):
            assembler.update_status(order.id, "confirmed")

    def test_delivered_is_terminal(self, assembler, customer, make_product):
        p = make_product()
        order = place(assembler, customer, [(p.id, 1)])
        for status in ("confirmed", "processing", "shipped", "delivered"):
            assembler.update_status(order.id, status)
        with pytest.raises(InvalidTransition):
            assembler.update_status(order.id, "cancelled")

    def test_payment_transitions(self, assembler, customer, make_product):
        p = make_product()
        order = place(assembler, customer, [(p.id, 1)])

        order = assembler.update_payment_status(order.id, "paid")
        assert order.payment_status == "paid"
        with pytest.raises(InvalidTransition):
            assembler.update_payment_status(order.id, "failed")
        order = assembler.update_payment_status(order.id, "refunded")
        assert order.payment_status == "refunded"

    def test_unknown_order(self, assembler):
        with pytest.raises(OrderNotFound):
            assembler.update_status(12345, "confirmed")

    def test_failed_payment_commit_leaves_session_clean(self, db, assembler, customer, make_product, monkeypatch):
        p = make_product()
        order = place(assembler, customer, [(p.id, 1)])

        def broken_commit():
            raise RuntimeError("database went away")

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(RuntimeError):
            assembler.update_payment_status(order.id, "paid")
        monkeypatch.undo()

        assert not db.dirty
        assert db.get(Order, order.id).payment_status == "pending"
