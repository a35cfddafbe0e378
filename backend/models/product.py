# backend/models/product.py
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, ForeignKey, CheckConstraint, DateTime, func,
)
from sqlalchemy.orm import relationship
from database import Base
from models.types import Cents

PRODUCT_STATUSES = ("active", "inactive", "draft")


# Product grouping shown on the storefront
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    products = relationship("Product", back_populates="category")


# A sellable catalog item.
# Prices are stored in hundredths (see models.types.Cents); sale_price, when set,
# must stay below price. stock_quantity is only enforced when manage_stock is on.
class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("sale_price IS NULL OR sale_price < price", name="ck_products_sale_below_price"),
    )

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    name = Column(String, nullable=False, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)

    price = Column(Cents, nullable=False)
    sale_price = Column(Cents, nullable=True)

    # Inventory
    stock_quantity = Column(Integer, nullable=False, default=0)
    manage_stock = Column(Boolean, nullable=False, default=True)
    in_stock = Column(Boolean, nullable=False, default=True)

    is_featured = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default="active", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="products")

    @property
    def current_price(self):
        return self.sale_price if self.sale_price is not None else self.price
