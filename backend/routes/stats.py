# backend/routes/stats.py

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import func, extract
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import role_required
from models.users import User, ROLE_CUSTOMER
from models.order import Order, OrderItem
from models.product import Product

router = APIRouter(
    prefix="/stats",
    tags=["Stats"]
)

# Threshold for low stock alert
LOW_STOCK_THRESHOLD = 10

# Revenue only counts orders whose payment has been received
PAID = "paid"

# === Pydantic Response Schemas ===

class StatsSummary(BaseModel):
    total_orders: int
    total_customers: int
    total_products: int
    total_revenue: Decimal
    low_stock_products: int

class MonthlySales(BaseModel):
    month: int
    total: Decimal

class MonthlySalesResponse(BaseModel):
    year: int
    data: List[MonthlySales]

class TopProduct(BaseModel):
    product_id: Optional[int]
    product_name: str
    total_sold: int

class TopProductsResponse(BaseModel):
    data: List[TopProduct]

class RecentOrder(BaseModel):
    id: int
    order_number: str
    customer_email: Optional[str]
    status: str
    payment_status: str
    total_amount: Decimal
    created_at: Optional[datetime]


def _revenue(value) -> Decimal:
    # SUM keeps the Cents column type, so only the empty case needs handling
    return value if value is not None else Decimal("0.00")


# === Endpoint 1: Dashboard Summary ===

@router.get("/summary", response_model=StatsSummary)
def get_stats_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin"))
):
    total_revenue = db.query(func.sum(Order.total_amount)).filter(Order.payment_status == PAID).scalar()

    return StatsSummary(
        total_orders=db.query(Order).count(),
        total_customers=db.query(User).filter(User.role == ROLE_CUSTOMER).count(),
        total_products=db.query(Product).count(),
        total_revenue=_revenue(total_revenue),
        low_stock_products=db.query(Product).filter(
            Product.manage_stock == True,  # noqa: E712
            Product.stock_quantity < LOW_STOCK_THRESHOLD,
        ).count(),
    )

# === Endpoint 2: Chart Data ===

@router.get("/monthly-sales", response_model=MonthlySalesResponse)
def get_monthly_sales(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin"))
):
    year = year or datetime.now(timezone.utc).year
    month = extract("month", Order.created_at)

    rows = (
        db.query(month.label("month"), func.sum(Order.total_amount).label("total"))
        .filter(Order.payment_status == PAID, extract("year", Order.created_at) == year)
        .group_by(month)
        .order_by(month)
        .all()
    )
    totals = {int(row.month): _revenue(row.total) for row in rows}

    # Fill months without sales with zero
    data = [MonthlySales(month=m, total=totals.get(m, _revenue(None))) for m in range(1, 13)]
    return MonthlySalesResponse(year=year, data=data)

# === Endpoint 3: Best sellers ===

@router.get("/top-products", response_model=TopProductsResponse)
def get_top_products(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin"))
):
    sold = func.sum(OrderItem.quantity)
    rows = (
        db.query(
            OrderItem.product_id.label("product_id"),
            OrderItem.product_name.label("product_name"),
            sold.label("total_sold"),
        )
        .join(Order, Order.id == OrderItem.order_id)
        .filter(Order.payment_status == PAID)
        .group_by(OrderItem.product_id, OrderItem.product_name)
        .order_by(sold.desc())
        .limit(limit)
        .all()
    )
    return TopProductsResponse(data=[
        TopProduct(product_id=r.product_id, product_name=r.product_name, total_sold=int(r.total_sold))
        for r in rows
    ])

# === Endpoint 4: Recent orders ===

@router.get("/recent-orders", response_model=List[RecentOrder])
def get_recent_orders(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin"))
):
    rows = (
        db.query(Order, User.email)
        .outerjoin(User, User.id == Order.user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .all()
    )
    return [
        RecentOrder(
            id=o.id,
            order_number=o.order_number,
            customer_email=email,
            status=o.status,
            payment_status=o.payment_status,
            total_amount=o.total_amount,
            created_at=o.created_at,
        )
        for o, email in rows
    ]
