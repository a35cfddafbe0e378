"""Store pricing configuration, resolved once and passed to the pricer."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from config import settings
from models.store_setting import get_setting
from services.errors import InvalidAmount
from services.money import Money

# store_settings keys read by the pricer: key -> setting type it must be saved as
PRICING_SETTINGS = {
    "currency": "string",
    "tax_rate": "float",
    "shipping_rate": "float",
    "free_shipping_threshold": "float",
}
MAX_TAX_RATE = Decimal("100")


@dataclass(frozen=True)
class StoreConfig:
    currency: str
    tax_rate: Decimal  # percent, e.g. Decimal("10")
    flat_shipping_rate: Money
    free_shipping_threshold: Money

    @classmethod
    def defaults(cls) -> StoreConfig:
        currency = settings.STORE_CURRENCY
        return cls(
            currency=currency,
            tax_rate=_tax_rate(settings.DEFAULT_TAX_RATE),
            flat_shipping_rate=Money.of(settings.DEFAULT_SHIPPING_RATE, currency),
            free_shipping_threshold=Money.of(settings.DEFAULT_FREE_SHIPPING_THRESHOLD, currency),
        )


def _decimal(key: str, value) -> Decimal:
    if isinstance(value, (bool, float)):
        raise InvalidAmount(f"{key} must be a decimal number written as text or an integer, got {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmount(f"{key} is not a number: {value!r}") from None
    if not result.is_finite():
        raise InvalidAmount(f"{key} is not a number: {value!r}")
    if result < 0:
        raise InvalidAmount(f"{key} must not be negative: {value}")
    return result


def _tax_rate(value) -> Decimal:
    rate = _decimal("tax_rate", value)
    if rate > MAX_TAX_RATE:
        raise InvalidAmount(f"tax_rate must be at most {MAX_TAX_RATE}: {value}")
    return rate


def _currency(value) -> str:
    if not isinstance(value, str) or len(value.strip()) != 3 or not value.strip().isalpha():
        raise InvalidAmount(f"currency must be a three-letter code, got {value!r}")
    return value.strip().upper()


def check_pricing_setting(key: str, value, type_: str) -> None:
    """Reject a store_settings write that the pricer could not read back.

    Keys outside PRICING_SETTINGS are not checked here.
    """
    expected = PRICING_SETTINGS.get(key)
    if expected is None:
        return
    if type_ != expected:
        raise InvalidAmount(f"{key} must be saved as type {expected}, got {type_}")
    if key == "currency":
        _currency(value)
    elif key == "tax_rate":
        _tax_rate(value)
    else:
        _decimal(key, value)


def load_store_config(db: Session) -> StoreConfig:
    """Read store_settings overrides on top of the environment defaults."""
    base = StoreConfig.defaults()
    currency = _currency(get_setting(db, "currency", base.currency))
    tax_rate = get_setting(db, "tax_rate", None)
    shipping_rate = get_setting(db, "shipping_rate", None)
    threshold = get_setting(db, "free_shipping_threshold", None)
    return StoreConfig(
        currency=currency,
        tax_rate=_tax_rate(tax_rate) if tax_rate is not None else base.tax_rate,
        flat_shipping_rate=Money.of(
            _decimal("shipping_rate", shipping_rate) if shipping_rate is not None
            else base.flat_shipping_rate.amount,
            currency,
        ),
        free_shipping_threshold=Money.of(
            _decimal("free_shipping_threshold", threshold) if threshold is not None
            else base.free_shipping_threshold.amount,
            currency,
        ),
    )
