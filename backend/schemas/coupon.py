from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, Literal

CouponTypeName = Literal["fixed", "percentage"]


class CouponCreate(BaseModel):
    code: str = Field(min_length=3, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    type: CouponTypeName
    value: Decimal = Field(gt=0, decimal_places=2)
    minimum_amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    usage_limit: Optional[int] = Field(default=None, ge=1)
    is_active: bool = True
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_rules(self):
        if self.type == "percentage" and self.value > 100:
            raise ValueError("Percentage coupons cannot exceed 100.")
        if self.starts_at and self.expires_at and self.expires_at <= self.starts_at:
            raise ValueError("Coupon must expire after it starts.")
        return self


# Admin edits; usage counters are not editable
class CouponUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    minimum_amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    usage_limit: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class CouponOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    description: Optional[str] = None
    type: CouponTypeName
    value: Decimal
    minimum_amount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    used_count: int
    is_active: bool
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    state: Optional[str] = None


# Discount preview for a code against a subtotal
class CouponCheck(BaseModel):
    code: str
    state: str
    subtotal: Decimal
    discount: Decimal
    applicable: bool
