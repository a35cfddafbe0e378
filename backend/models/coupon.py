# backend/models/coupon.py
import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base
from models.types import Cents


class CouponType(str, enum.Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


# Discount code. value is an amount for FIXED coupons and a percent for PERCENTAGE ones.
# used_count only moves through CouponRepository.increment_usage (conditional UPDATE).
class Coupon(Base):
    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint("used_count >= 0", name="ck_coupons_used_non_negative"),
        CheckConstraint(
            "usage_limit IS NULL OR used_count <= usage_limit", name="ck_coupons_used_within_limit"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(Enum(CouponType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    value = Column(Cents, nullable=False)
    minimum_amount = Column(Cents, nullable=True)
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    orders = relationship("Order", back_populates="coupon")
