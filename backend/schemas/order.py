from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal
from datetime import datetime

OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
PaymentMethod = Literal["bank_transfer", "cod", "e_wallet"]


# Postal address copied onto the order
class Address(BaseModel):
    name: str = Field(min_length=1)
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str
    country: str = "Indonesia"
    phone: Optional[str] = None


# Checkout request; shipping defaults to the billing address
class OrderCreatePayload(BaseModel):
    billing_address: Address
    shipping_address: Optional[Address] = None
    payment_method: PaymentMethod
    coupon_code: Optional[str] = None
    shipping_method: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


# Output schema for an individual order line
class OrderItemOut(BaseModel):
    product_id: Optional[int]
    product_name: str
    product_sku: str
    price: Decimal
    quantity: int
    total: Decimal


# Output schema representing the full order
class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    status: str
    payment_status: str
    payment_method: str
    currency: str
    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    billing_address: dict
    shipping_address: dict
    shipping_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    items: List[OrderItemOut]


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


class OrderStatusPatch(BaseModel):
    status: OrderStatus


class PaymentStatusPatch(BaseModel):
    payment_status: PaymentStatus
