from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, JSON, Index, func
from sqlalchemy.orm import relationship
from database import Base
from models.types import Cents

ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")
PAYMENT_METHODS = ("bank_transfer", "cod", "e_wallet")


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)

    # Totals, frozen at checkout
    subtotal = Column(Cents, nullable=False)
    tax_amount = Column(Cents, nullable=False, default=0)
    shipping_amount = Column(Cents, nullable=False, default=0)
    discount_amount = Column(Cents, nullable=False, default=0)
    total_amount = Column(Cents, nullable=False)
    currency = Column(String(3), nullable=False, default="IDR")

    # Payment
    payment_method = Column(String, nullable=False)
    payment_status = Column(String, nullable=False, default="pending", index=True)

    # Address snapshots copied at order time
    billing_address = Column(JSON, nullable=False)
    shipping_address = Column(JSON, nullable=False)
    shipping_method = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    coupon_id = Column(Integer, ForeignKey("coupons.id", ondelete="SET NULL"), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User", back_populates="orders")
    coupon = relationship("Coupon", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


# Frozen copy of a product line; product_id is kept only for reporting and restocking
class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    product_name = Column(String, nullable=False)
    product_sku = Column(String, nullable=False)
    price = Column(Cents, nullable=False)
    quantity = Column(Integer, nullable=False)
    total = Column(Cents, nullable=False)

    order = relationship("Order", back_populates="items")
