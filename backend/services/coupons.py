"""Coupon state derivation, discount calculation and redemption."""

import enum
import logging
from datetime import datetime, timezone
from typing import Optional

from services.errors import CouponExhausted, CouponNotActive
from services.money import Money
from services.repositories import CouponRepository
from services.snapshots import CouponSnapshot, as_utc

logger = logging.getLogger(__name__)

FIXED = "fixed"
PERCENTAGE = "percentage"


class CouponState(str, enum.Enum):
    INACTIVE = "inactive"
    NOT_YET_STARTED = "not_yet_started"
    ACTIVE = "active"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


def _now(now: Optional[datetime]) -> datetime:
    return as_utc(now) if now is not None else datetime.now(timezone.utc)


def coupon_state(coupon: CouponSnapshot, now: Optional[datetime] = None) -> CouponState:
    # First matching rule wins
    current = _now(now)
    if not coupon.is_active:
        return CouponState.INACTIVE
    if coupon.starts_at is not None and coupon.starts_at > current:
        return CouponState.NOT_YET_STARTED
    if coupon.expires_at is not None and coupon.expires_at < current:
        return CouponState.EXPIRED
    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        return CouponState.EXHAUSTED
    return CouponState.ACTIVE


def calculate_discount(coupon: CouponSnapshot, subtotal: Money, now: Optional[datetime] = None) -> Money:
    """Discount for ``subtotal``; zero when the coupon does not apply.

    The result is always between zero and the subtotal. No state is changed,
    so this is safe to call for every cart preview.
    """
    zero = Money.zero(subtotal.currency)
    if coupon_state(coupon, now) is not CouponState.ACTIVE:
        return zero
    if coupon.minimum_amount is not None and subtotal < coupon.minimum_amount:
        return zero
    if subtotal.cents <= 0:
        return zero

    if coupon.type == PERCENTAGE:
        discount = subtotal.percent(coupon.value)
    else:
        discount = Money.of(coupon.value, subtotal.currency)
    return discount.max(zero).min(subtotal)


class CouponValidator:
    def __init__(self, coupons: CouponRepository):
        self.coupons = coupons

    def find(self, code: str) -> CouponSnapshot:
        coupon = self.coupons.get_by_code(code)
        if coupon is None:
            raise CouponNotActive(code, "unknown code")
        return coupon

    def state(self, coupon: CouponSnapshot, now: Optional[datetime] = None) -> CouponState:
        return coupon_state(coupon, now)

    def calculate_discount(self, coupon: CouponSnapshot, subtotal: Money, now: Optional[datetime] = None) -> Money:
        return calculate_discount(coupon, subtotal, now)

    def ensure_applicable(self, coupon: CouponSnapshot, now: Optional[datetime] = None) -> None:
        state = coupon_state(coupon, now)
        if state is CouponState.EXHAUSTED:
            raise CouponExhausted(coupon.code)
        if state is not CouponState.ACTIVE:
            raise CouponNotActive(coupon.code, state.value)

    def redeem(self, coupon: CouponSnapshot) -> None:
        """Count one use of the coupon. Only called when an order is committed."""
        if not self.coupons.increment_usage(coupon.id):
            logger.warning("Coupon redemption refused: %s reached its usage limit", coupon.code)
            raise CouponExhausted(coupon.code)
