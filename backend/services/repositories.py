"""Persistence seams used by the pricing engine.

Counters (``products.stock_quantity`` and ``coupons.used_count``) are only
changed here, through single conditional UPDATE statements, so two
concurrent checkouts cannot both take the last unit or the last coupon use.
Nothing in this module commits; the caller owns the transaction.
"""

from typing import Iterable, List, Optional, Protocol

from sqlalchemy import func, or_, update, delete
from sqlalchemy.orm import Session

from models.cart import CartItem
from models.coupon import Coupon
from models.order import Order, OrderItem
from models.product import Product
from services.errors import ProductNotFound
from services.snapshots import CouponSnapshot, ProductSnapshot


class CatalogRepository(Protocol):
    def get(self, product_id: int) -> ProductSnapshot: ...

    def decrement_stock(self, product_id: int, qty: int) -> bool: ...

    def increment_stock(self, product_id: int, qty: int) -> None: ...


class CouponRepository(Protocol):
    def get_by_code(self, code: str) -> Optional[CouponSnapshot]: ...

    def increment_usage(self, coupon_id: int) -> bool: ...


class SqlCatalogRepository:
    def __init__(self, db: Session, currency: str):
        self.db = db
        self.currency = currency

    def get(self, product_id: int) -> ProductSnapshot:
        product = self.db.get(Product, product_id, populate_existing=True)
        if product is None:
            raise ProductNotFound(product_id)
        return ProductSnapshot.from_model(product, self.currency)

    def decrement_stock(self, product_id: int, qty: int) -> bool:
        # Compare-and-decrement: no row matches once stock drops below qty
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock_quantity >= qty)
            .values(stock_quantity=Product.stock_quantity - qty)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def increment_stock(self, product_id: int, qty: int) -> None:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock_quantity=Product.stock_quantity + qty)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if result.rowcount == 0:
            raise ProductNotFound(product_id)


class SqlCouponRepository:
    def __init__(self, db: Session, currency: str):
        self.db = db
        self.currency = currency

    def get_by_code(self, code: str) -> Optional[CouponSnapshot]:
        normalized = (code or "").strip().upper()
        coupon = (
            self.db.query(Coupon)
            .populate_existing()
            .filter(func.upper(Coupon.code) == normalized)
            .first()
        )
        if coupon is None:
            return None
        return CouponSnapshot.from_model(coupon, self.currency)

    def increment_usage(self, coupon_id: int) -> bool:
        stmt = (
            update(Coupon)
            .where(
                Coupon.id == coupon_id,
                or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit),
            )
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1


class SqlOrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, order: Order, items: Iterable[OrderItem]) -> Order:
        order.items = list(items)
        self.db.add(order)
        self.db.flush()
        return order

    def get(self, order_id: int) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def number_exists(self, order_number: str) -> bool:
        return self.db.query(Order.id).filter(Order.order_number == order_number).first() is not None

    def clear_cart_lines(self, user_id: int, product_ids: List[int]) -> int:
        if not product_ids:
            return 0
        stmt = (
            delete(CartItem)
            .where(CartItem.user_id == user_id, CartItem.product_id.in_(product_ids))
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount
