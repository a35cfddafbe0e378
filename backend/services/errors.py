"""Checkout and pricing errors.

Every error is recoverable at the request boundary: the app turns it into a
rejected request with the message as the human-readable reason.
"""

from typing import Optional


class CheckoutError(Exception):
    """Base class for pricing, stock, coupon and order errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidAmount(CheckoutError):
    """Raised for negative, float or currency-mismatched money values."""


class ProductNotFound(CheckoutError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class ProductUnavailable(CheckoutError):
    """Raised when a cart line points at a product that can no longer be sold."""

    def __init__(self, product_id: int, name: Optional[str] = None):
        self.product_id = product_id
        label = name or f"#{product_id}"
        super().__init__(f"Product {label} is no longer available")


class InsufficientStock(CheckoutError):
    def __init__(self, product_id: int, requested: int, name: Optional[str] = None):
        self.product_id = product_id
        self.requested = requested
        label = name or f"#{product_id}"
        super().__init__(f"Insufficient stock for {label} (requested {requested})")


class CouponNotActive(CheckoutError):
    def __init__(self, code: str, state: Optional[str] = None):
        self.code = code
        self.state = state
        msg = f"Coupon {code} cannot be used"
        if state:
            msg = f"{msg} ({state})"
        super().__init__(msg)


class CouponExhausted(CheckoutError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Coupon {code} has reached its usage limit")


class EmptyCart(CheckoutError):
    def __init__(self):
        super().__init__("Cart is empty")


class OrderNotFound(CheckoutError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class InvalidTransition(CheckoutError):
    """Raised when an order or payment status change is not allowed."""

    def __init__(self, field: str, current: str, target: str):
        self.field = field
        self.current = current
        self.target = target
        super().__init__(f"Cannot change {field} from {current} to {target}")
