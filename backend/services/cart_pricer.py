from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from services.coupons import calculate_discount
from services.errors import InvalidAmount, ProductUnavailable
from services.money import Money
from services.snapshots import CartLine, CouponSnapshot
from services.store_config import StoreConfig


@dataclass(frozen=True)
class PricedLine:
    line: CartLine
    unit_price: Money
    line_total: Money


@dataclass(frozen=True)
class PricingResult:
    lines: Tuple[PricedLine, ...]
    subtotal: Money
    discount: Money
    tax: Money
    shipping: Money
    total: Money
    currency: str
    coupon_code: Optional[str] = None


class CartPricer:
    """Turns cart lines into subtotal, discount, tax, shipping and total.

    Pure: the same lines, coupon, config and clock give the same result, and
    nothing is written anywhere.
    """

    def __init__(self, config: StoreConfig):
        self.config = config

    def price(
        self,
        lines: Sequence[CartLine],
        coupon: Optional[CouponSnapshot] = None,
        now: Optional[datetime] = None,
    ) -> PricingResult:
        currency = self.config.currency
        zero = Money.zero(currency)

        priced = []
        subtotal = zero
        for line in lines:
            if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity < 1:
                raise InvalidAmount(f"Quantity must be a positive integer, got {line.quantity!r}")
            product = line.product
            if not product.sellable:
                raise ProductUnavailable(product.id, product.name)
            unit_price = product.unit_price.ensure_non_negative()
            line_total = unit_price * line.quantity
            priced.append(PricedLine(line=line, unit_price=unit_price, line_total=line_total))
            subtotal = subtotal + line_total

        discount = calculate_discount(coupon, subtotal, now) if coupon is not None else zero

        # Tax is charged on the discounted amount
        taxable = subtotal - discount
        tax = taxable.percent(self.config.tax_rate)

        if not priced or subtotal >= self.config.free_shipping_threshold:
            shipping = zero
        else:
            shipping = self.config.flat_shipping_rate

        total = (subtotal + tax + shipping - discount).max(zero)

        return PricingResult(
            lines=tuple(priced),
            subtotal=subtotal,
            discount=discount,
            tax=tax,
            shipping=shipping,
            total=total,
            currency=currency,
            coupon_code=coupon.code if coupon is not None and not discount.is_zero() else None,
        )
