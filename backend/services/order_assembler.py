"""Checkout commit and order lifecycle.

``create_order`` re-prices the cart from fresh product rows, reserves stock,
redeems the coupon, writes the order with frozen line copies and clears the
purchased cart lines, all inside one database transaction. Any failure rolls
the whole session back, so a rejected checkout leaves stock, coupon usage,
orders and the cart exactly as they were.
"""

import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from models.order import Order, OrderItem, PAYMENT_METHODS
from services import order_status
from services.cart_pricer import CartPricer
from services.coupons import CouponValidator
from services.errors import CheckoutError, CouponNotActive, EmptyCart, OrderNotFound
from services.repositories import SqlCatalogRepository, SqlCouponRepository, SqlOrderRepository
from services.snapshots import CartLine, OrderSnapshot
from services.stock_ledger import StockLedger
from services.store_config import StoreConfig

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderAssembler:
    def __init__(self, db: Session, config: StoreConfig, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.config = config
        self.clock = clock or _utcnow
        self.catalog = SqlCatalogRepository(db, config.currency)
        self.orders = SqlOrderRepository(db)
        self.stock = StockLedger(self.catalog)
        self.coupons = CouponValidator(SqlCouponRepository(db, config.currency))
        self.pricer = CartPricer(config)

    def create_order(
        self,
        user_id: int,
        cart_items: Sequence[Tuple[int, int]],
        billing_address: dict,
        shipping_address: dict,
        payment_method: str,
        coupon_code: Optional[str] = None,
        shipping_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> OrderSnapshot:
        """Place an order for ``cart_items`` given as ``(product_id, quantity)`` pairs."""
        if not cart_items:
            raise EmptyCart()
        if payment_method not in PAYMENT_METHODS:
            raise CheckoutError(f"Unsupported payment method: {payment_method}")

        now = self.clock()
        try:
            # Never trust totals computed at preview time
            lines = [CartLine(product=self.catalog.get(pid), quantity=qty) for pid, qty in cart_items]

            coupon = None
            if coupon_code:
                coupon = self.coupons.find(coupon_code)
                self.coupons.ensure_applicable(coupon, now)

            pricing = self.pricer.price(lines, coupon, now)
            if coupon is not None and pricing.discount.is_zero():
                raise CouponNotActive(coupon.code, "minimum amount not reached")

            for priced in pricing.lines:
                self.stock.reserve(priced.line.product.id, priced.line.quantity)

            if coupon is not None:
                self.coupons.redeem(coupon)

            order = Order(
                order_number=self._new_order_number(now),
                user_id=user_id,
                status=order_status.PENDING,
                payment_status=order_status.PAYMENT_PENDING,
                payment_method=payment_method,
                currency=pricing.currency,
                subtotal=pricing.subtotal.amount,
                tax_amount=pricing.tax.amount,
                shipping_amount=pricing.shipping.amount,
                discount_amount=pricing.discount.amount,
                total_amount=pricing.total.amount,
                billing_address=dict(billing_address),
                shipping_address=dict(shipping_address),
                shipping_method=shipping_method,
                notes=notes,
                coupon_id=coupon.id if coupon is not None else None,
            )
            items = [
                OrderItem(
                    product_id=p.line.product.id,
                    product_name=p.line.product.name,
                    product_sku=p.line.product.sku,
                    price=p.unit_price.amount,
                    quantity=p.line.quantity,
                    total=p.line_total.amount,
                )
                for p in pricing.lines
            ]
            self.orders.add(order, items)
            self.orders.clear_cart_lines(user_id, [p.line.product.id for p in pricing.lines])
            self.db.commit()
        except CheckoutError as exc:
            self.db.rollback()
            logger.warning("Checkout rejected for user %s: %s", user_id, exc)
            raise
        except Exception:
            self.db.rollback()
            logger.exception("Checkout failed for user %s", user_id)
            raise

        self.db.refresh(order)
        logger.info(
            "Order %s created for user %s: total=%s", order.order_number, user_id, pricing.total
        )
        return OrderSnapshot.from_model(order)

    def update_status(self, order_id: int, new_status: str) -> OrderSnapshot:
        order = self._get(order_id)
        old_status = order.status
        order_status.check_order_transition(old_status, new_status)

        now = self.clock()
        try:
            order.status = new_status
            if new_status == order_status.SHIPPED:
                order.shipped_at = now
            elif new_status == order_status.DELIVERED:
                order.delivered_at = now
            elif new_status == order_status.CANCELLED:
                # Put the goods back on the shelf
                for item in order.items:
                    if item.product_id is not None:
                        self.stock.release(item.product_id, item.quantity)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(order)
        logger.info("Order %s status %s -> %s", order.order_number, old_status, new_status)
        return OrderSnapshot.from_model(order)

    def update_payment_status(self, order_id: int, new_status: str) -> OrderSnapshot:
        order = self._get(order_id)
        old_status = order.payment_status
        order_status.check_payment_transition(old_status, new_status)

        try:
            order.payment_status = new_status
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(order)
        logger.info("Order %s payment %s -> %s", order.order_number, old_status, new_status)
        return OrderSnapshot.from_model(order)

    def _get(self, order_id: int) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def _new_order_number(self, now: datetime) -> str:
        while True:
            number = f"ORD-{now:%Y%m%d}-{secrets.token_hex(4).upper()}"
            if not self.orders.number_exists(number):
                return number
