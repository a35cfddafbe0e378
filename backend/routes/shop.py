from typing import Optional, List, Literal
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product, Category
from schemas.product import ProductOut, ProductListPage, CategoryOut

router = APIRouter(
    prefix="/shop",
    tags=["Shop"]
)

# Products a customer can buy right now
def _storefront_query(db: Session):
    return db.query(Product).filter(Product.status == "active", Product.in_stock == True)  # noqa: E712


# Active categories in display order
@router.get("/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return (
        db.query(Category)
        .filter(Category.is_active == True)  # noqa: E712
        .order_by(Category.sort_order.asc(), Category.name.asc())
        .all()
    )


@router.get("/products", response_model=ProductListPage)
def list_products_for_shop(
    q: Optional[str] = Query(None, description="Search by name, SKU or description"),
    category: Optional[str] = Query(None, description="Category slug"),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    sort_by: Literal["name", "price", "created_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
):
    query = _storefront_query(db)

    # Free-text search
    if q:
        like = f"%{q}%"
        query = query.filter(
            or_(
                Product.name.ilike(like),
                Product.sku.ilike(like),
                Product.description.ilike(like),
            )
        )

    if category:
        query = query.join(Category).filter(Category.slug == category)

    allowed = {
        "name": Product.name,
        "price": Product.price,
        "created_at": Product.created_at,
    }
    sort_col = allowed.get(sort_by, Product.name)
    query = query.order_by(sort_col.desc() if order == "desc" else sort_col.asc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/featured", response_model=List[ProductOut])
def list_featured_products(
    limit: int = Query(8, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return (
        _storefront_query(db)
        .filter(Product.is_featured == True)  # noqa: E712
        .order_by(Product.created_at.desc())
        .limit(limit)
        .all()
    )


@router.get("/products/{slug}", response_model=ProductOut)
def get_product(slug: str, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.slug == slug, Product.status == "active").first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
