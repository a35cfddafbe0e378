# backend/models/types.py
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

TWO_PLACES = Decimal("0.01")


# Stores a two-decimal amount as integer hundredths and returns it as Decimal.
# SQLite has no native decimal type, so money never passes through a float.
class Cents(TypeDecorator):
    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, float):
            raise TypeError("Monetary columns do not accept float values")
        amount = Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        return int(amount * 100)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return (Decimal(int(value)) / 100).quantize(TWO_PLACES)
