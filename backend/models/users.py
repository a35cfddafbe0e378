# backend/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"

# Store account. Credentials are handled by the identity provider issuing the JWT.
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default=ROLE_CUSTOMER)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == ROLE_ADMIN
