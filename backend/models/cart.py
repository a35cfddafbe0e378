from sqlalchemy import Column, Integer, ForeignKey, DateTime, CheckConstraint, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base


# A single product + quantity in a user's cart (one cart per user)
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="cart_items")
    product = relationship("Product")

    __table_args__ = (
        # Prevent duplicate product entries in the same cart
        UniqueConstraint("user_id", "product_id", name="uq_cartitem_user_product"),
        CheckConstraint("quantity >= 1", name="ck_cartitem_quantity_positive"),
    )
