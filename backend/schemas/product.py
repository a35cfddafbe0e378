# backend/schemas/product.py
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Literal

ProductStatus = Literal["active", "inactive", "draft"]


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0


class CategoryOut(ORMBase):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    sort_order: int


# Schema for creating a product; sale price must undercut the regular price
class ProductCreate(BaseModel):
    category_id: Optional[int] = None
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    sku: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(ge=0, decimal_places=2)
    sale_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    manage_stock: bool = True
    in_stock: bool = True
    is_featured: bool = False
    status: ProductStatus = "active"

    @model_validator(mode="after")
    def _sale_below_price(self):
        if self.sale_price is not None and self.sale_price >= self.price:
            raise ValueError("Sale price must be less than regular price.")
        return self


# Schema for partial product updates (PATCH)
class ProductEditRequest(BaseModel):
    category_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    sale_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    manage_stock: Optional[bool] = None
    in_stock: Optional[bool] = None
    is_featured: Optional[bool] = None
    status: Optional[ProductStatus] = None


# Manual restock or write-off; stock_quantity itself is never set directly
class StockAdjustment(BaseModel):
    delta: int
    reason: Optional[str] = Field(None, max_length=255)


# Full product representation
class ProductOut(ORMBase):
    id: int
    category_id: Optional[int] = None
    name: str
    slug: str
    sku: str
    description: Optional[str] = None
    price: Decimal
    sale_price: Optional[Decimal] = None
    current_price: Decimal
    stock_quantity: int
    manage_stock: bool
    in_stock: bool
    is_featured: bool
    status: str


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
