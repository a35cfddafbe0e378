"""Plain, immutable views of catalog, coupon and order rows.

The pricing code works on these instead of ORM objects so it can be called
without a session and gives the same answer for the same inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Tuple

from services.money import Money


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite returns naive datetimes; they are stored as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class ProductSnapshot:
    id: int
    name: str
    sku: str
    price: Money
    sale_price: Optional[Money] = None
    stock_quantity: int = 0
    in_stock: bool = True
    manage_stock: bool = True
    status: str = "active"

    @property
    def unit_price(self) -> Money:
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def sellable(self) -> bool:
        return self.in_stock and self.is_active

    @classmethod
    def from_model(cls, product, currency: str) -> ProductSnapshot:
        sale_price = Money.of(product.sale_price, currency) if product.sale_price is not None else None
        return cls(
            id=product.id,
            name=product.name,
            sku=product.sku,
            price=Money.of(product.price, currency),
            sale_price=sale_price,
            stock_quantity=product.stock_quantity or 0,
            in_stock=bool(product.in_stock),
            manage_stock=bool(product.manage_stock),
            status=product.status or "active",
        )


@dataclass(frozen=True)
class CartLine:
    product: ProductSnapshot
    quantity: int


@dataclass(frozen=True)
class CouponSnapshot:
    id: int
    code: str
    type: str
    value: Decimal
    minimum_amount: Optional[Money] = None
    usage_limit: Optional[int] = None
    used_count: int = 0
    is_active: bool = True
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, coupon, currency: str) -> CouponSnapshot:
        minimum = Money.of(coupon.minimum_amount, currency) if coupon.minimum_amount is not None else None
        coupon_type = coupon.type.value if hasattr(coupon.type, "value") else coupon.type
        return cls(
            id=coupon.id,
            code=coupon.code,
            type=coupon_type,
            value=Decimal(coupon.value),
            minimum_amount=minimum,
            usage_limit=coupon.usage_limit,
            used_count=coupon.used_count or 0,
            is_active=bool(coupon.is_active),
            starts_at=as_utc(coupon.starts_at),
            expires_at=as_utc(coupon.expires_at),
        )


@dataclass(frozen=True)
class OrderLineSnapshot:
    product_id: Optional[int]
    product_name: str
    product_sku: str
    price: Money
    quantity: int
    total: Money


@dataclass(frozen=True)
class OrderSnapshot:
    id: int
    order_number: str
    user_id: int
    status: str
    payment_status: str
    payment_method: str
    currency: str
    subtotal: Money
    tax_amount: Money
    shipping_amount: Money
    discount_amount: Money
    total_amount: Money
    billing_address: dict
    shipping_address: dict
    lines: Tuple[OrderLineSnapshot, ...] = field(default_factory=tuple)
    coupon_id: Optional[int] = None
    shipping_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, order) -> OrderSnapshot:
        currency = order.currency
        lines = tuple(
            OrderLineSnapshot(
                product_id=item.product_id,
                product_name=item.product_name,
                product_sku=item.product_sku,
                price=Money.of(item.price, currency),
                quantity=item.quantity,
                total=Money.of(item.total, currency),
            )
            for item in order.items
        )
        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            currency=currency,
            subtotal=Money.of(order.subtotal, currency),
            tax_amount=Money.of(order.tax_amount, currency),
            shipping_amount=Money.of(order.shipping_amount, currency),
            discount_amount=Money.of(order.discount_amount, currency),
            total_amount=Money.of(order.total_amount, currency),
            billing_address=dict(order.billing_address or {}),
            shipping_address=dict(order.shipping_address or {}),
            lines=lines,
            coupon_id=order.coupon_id,
            shipping_method=order.shipping_method,
            notes=order.notes,
            created_at=as_utc(order.created_at),
            shipped_at=as_utc(order.shipped_at),
            delivered_at=as_utc(order.delivered_at),
        )
