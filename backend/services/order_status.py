# Order and payment status machines
from services.errors import InvalidTransition

PENDING = "pending"
CONFIRMED = "confirmed"
PROCESSING = "processing"
SHIPPED = "shipped"
DELIVERED = "delivered"
CANCELLED = "cancelled"

ORDER_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED},
    CONFIRMED: {PROCESSING, CANCELLED},
    PROCESSING: {SHIPPED, CANCELLED},
    SHIPPED: {DELIVERED, CANCELLED},
    DELIVERED: set(),
    CANCELLED: set(),
}

TERMINAL_STATUSES = {s for s, targets in ORDER_TRANSITIONS.items() if not targets}

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"
PAYMENT_REFUNDED = "refunded"

PAYMENT_TRANSITIONS = {
    PAYMENT_PENDING: {PAYMENT_PAID, PAYMENT_FAILED},
    PAYMENT_PAID: {PAYMENT_REFUNDED},
    PAYMENT_FAILED: set(),
    PAYMENT_REFUNDED: set(),
}


def check_order_transition(current: str, target: str) -> None:
    if target not in ORDER_TRANSITIONS or target not in ORDER_TRANSITIONS.get(current, set()):
        raise InvalidTransition("status", current, target)


def check_payment_transition(current: str, target: str) -> None:
    if target not in PAYMENT_TRANSITIONS or target not in PAYMENT_TRANSITIONS.get(current, set()):
        raise InvalidTransition("payment_status", current, target)
