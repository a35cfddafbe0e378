# backend/routes/orders.py
from fastapi import APIRouter, Depends, HTTPException, Request, Query, status
from sqlalchemy.orm import Session, selectinload

from database import get_db
from utils.tokenJWT import get_current_user, role_required
from utils.audit import write_log
from models.users import User
from models.cart import CartItem
from models.log import STATUS_FAIL, STATUS_SUCCESS
from models.order import Order
from schemas.order import (
    OrderResponse, OrdersPage, OrderStatusPatch, PaymentStatusPatch, OrderCreatePayload, OrderItemOut,
)
from services.errors import CheckoutError
from services.order_assembler import OrderAssembler
from services.snapshots import OrderSnapshot
from services.store_config import load_store_config

router = APIRouter(prefix="/orders", tags=["Orders"])


# Map an order snapshot to the response schema
def _order_to_out(order: OrderSnapshot) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        currency=order.currency,
        subtotal=order.subtotal.amount,
        tax_amount=order.tax_amount.amount,
        shipping_amount=order.shipping_amount.amount,
        discount_amount=order.discount_amount.amount,
        total_amount=order.total_amount.amount,
        billing_address=order.billing_address,
        shipping_address=order.shipping_address,
        shipping_method=order.shipping_method,
        notes=order.notes,
        created_at=order.created_at,
        shipped_at=order.shipped_at,
        delivered_at=order.delivered_at,
        items=[
            OrderItemOut(
                product_id=line.product_id,
                product_name=line.product_name,
                product_sku=line.product_sku,
                price=line.price.amount,
                quantity=line.quantity,
                total=line.total.amount,
            )
            for line in order.lines
        ],
    )


def _assembler(db: Session) -> OrderAssembler:
    return OrderAssembler(db, load_store_config(db))


# Place an order from the current cart
@router.post("/checkout", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def checkout(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart_items = (
        db.query(CartItem.product_id, CartItem.quantity)
        .filter(CartItem.user_id == current_user.id)
        .order_by(CartItem.id.asc())
        .all()
    )
    billing = payload.billing_address.model_dump()
    shipping = payload.shipping_address.model_dump() if payload.shipping_address else dict(billing)

    try:
        order = _assembler(db).create_order(
            user_id=current_user.id,
            cart_items=[(row.product_id, row.quantity) for row in cart_items],
            billing_address=billing,
            shipping_address=shipping,
            payment_method=payload.payment_method,
            coupon_code=payload.coupon_code,
            shipping_method=payload.shipping_method,
            notes=payload.notes,
        )
    except CheckoutError as exc:
        write_log(
            db, user_id=current_user.id, action="CHECKOUT", resource="orders", status=STATUS_FAIL,
            request=request, meta={"reason": exc.message, "error": type(exc).__name__},
        )
        raise

    write_log(
        db, user_id=current_user.id, action="CHECKOUT", resource="orders", status=STATUS_SUCCESS,
        request=request, meta={"order_id": order.id, "order_number": order.order_number,
                               "total": str(order.total_amount.amount)},
    )
    return _order_to_out(order)


# List the current user's orders, newest first
@router.get("", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    q = db.query(Order).options(selectinload(Order.items)).filter(Order.user_id == current_user.id)
    total = q.count()
    rows = q.order_by(Order.created_at.desc(), Order.id.desc()).offset((page - 1) * page_size).limit(page_size).all()
    items = [_order_to_out(OrderSnapshot.from_model(o)) for o in rows]
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    o = db.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
    if not o or (o.user_id != current_user.id and not current_user.is_admin):
        raise HTTPException(status_code=404, detail="Order not found")
    return _order_to_out(OrderSnapshot.from_model(o))


# Move an order through its status workflow (admin only)
@router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin"))
):
    order = _assembler(db).update_status(order_id, payload.status)
    write_log(
        db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders",
        request=request, meta={"order_id": order.id, "new": order.status},
    )
    return _order_to_out(order)


@router.patch("/{order_id}/payment-status", response_model=OrderResponse)
def update_payment_status(
    order_id: int,
    payload: PaymentStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin"))
):
    order = _assembler(db).update_payment_status(order_id, payload.payment_status)
    write_log(
        db, user_id=current_user.id, action="ORDER_PAYMENT_CHANGE", resource="orders",
        request=request, meta={"order_id": order.id, "new": order.payment_status},
    )
    return _order_to_out(order)
