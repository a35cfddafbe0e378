from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index, func
from sqlalchemy.orm import relationship
from database import Base

STATUS_SUCCESS = "SUCCESS"
STATUS_FAIL = "FAIL"


# One row per storefront event: CART_ADD, CHECKOUT, ORDER_STATUS_CHANGE, COUPON_CREATE, ...
class Log(Base):
    __tablename__ = "logs"
    __table_args__ = (
        Index("ix_logs_resource_action", "resource", "action"),
    )

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(50), nullable=False)
    resource = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_SUCCESS, index=True)
    ip = Column(String(64), nullable=True)

    # Order ids, quantities, rejection reasons
    meta = Column(JSON, nullable=True)

    user = relationship("User", uselist=False)
