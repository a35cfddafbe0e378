from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# Request schema for adding a product to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Request schema for changing a cart line quantity
class CartUpdateItem(BaseModel):
    quantity: int = Field(ge=1)

# A single priced cart line
class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    name: str
    sku: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

# Cart summary with the same totals checkout will charge
class CartOut(BaseModel):
    items: List[CartItemOut]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    currency: str
    coupon_code: Optional[str] = None
    coupon_error: Optional[str] = None
    unavailable: List[int] = []
