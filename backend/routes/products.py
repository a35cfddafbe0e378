# backend/routes/products.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import role_required
from utils.audit import write_log
from models.users import User
from models.product import Product, Category
from schemas.product import (
    ProductCreate, ProductEditRequest, ProductOut, ProductListPage, CategoryCreate, CategoryOut, StockAdjustment,
)
from services.errors import CheckoutError
from services.repositories import SqlCatalogRepository
from services.stock_ledger import StockLedger
from services.store_config import load_store_config

# Catalog upkeep for administrators. Stock counts are never set directly:
# they change through checkout, cancellation and the StockLedger adjustment below.
router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=ProductListPage)
def list_products(
    q: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    query = db.query(Product)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
    if status_filter:
        query = query.filter(Product.status == status_filter)

    total = query.count()
    items = query.order_by(Product.id.asc()).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    duplicate = db.query(Product).filter(or_(Product.slug == payload.slug, Product.sku == payload.sku)).first()
    if duplicate:
        raise HTTPException(status_code=400, detail="This slug or SKU is already taken.")
    if payload.category_id is not None and not db.get(Category, payload.category_id):
        raise HTTPException(status_code=400, detail="Selected category does not exist.")

    product = Product(**payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              request=request, meta={"product_id": product.id, "sku": product.sku})
    return product


@router.patch("/{product_id}", response_model=ProductOut)
def edit_product(
    product_id: int,
    payload: ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    changes = payload.model_dump(exclude_unset=True)
    price = changes.get("price", product.price)
    sale_price = changes.get("sale_price", product.sale_price)
    if price is None:
        raise HTTPException(status_code=400, detail="Product price is required.")
    if sale_price is not None and sale_price >= price:
        raise HTTPException(status_code=400, detail="Sale price must be less than regular price.")
    if changes.get("category_id") is not None and not db.get(Category, changes["category_id"]):
        raise HTTPException(status_code=400, detail="Selected category does not exist.")

    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_EDIT", resource="products",
              request=request, meta={"product_id": product.id, "fields": sorted(changes)})
    return product


# Restock or write off units (admin only)
@router.post("/{product_id}/stock", response_model=ProductOut)
def adjust_stock(
    product_id: int,
    payload: StockAdjustment,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    ledger = StockLedger(SqlCatalogRepository(db, load_store_config(db).currency))
    try:
        new_quantity = ledger.adjust(product_id, payload.delta)
        db.commit()
    except CheckoutError:
        db.rollback()
        raise

    write_log(db, user_id=current_user.id, action="PRODUCT_STOCK_ADJUST", resource="products",
              request=request, meta={"product_id": product_id, "delta": payload.delta,
                                     "stock_quantity": new_quantity, "reason": payload.reason})
    return db.get(Product, product_id, populate_existing=True)


@router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    if db.query(Category).filter(Category.slug == payload.slug).first():
        raise HTTPException(status_code=400, detail="Category slug already exists")
    category = Category(**payload.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    return category
