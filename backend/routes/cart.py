# backend/routes/cart.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session, joinedload

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log
from models.users import User
from models.cart import CartItem
from schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartItemOut
from services.cart_pricer import CartPricer
from services.coupons import CouponValidator, CouponState
from services.errors import CouponNotActive, InsufficientStock, ProductUnavailable
from services.repositories import SqlCatalogRepository, SqlCouponRepository
from services.snapshots import CartLine, ProductSnapshot
from services.stock_ledger import StockLedger
from services.store_config import load_store_config

router = APIRouter(prefix="/cart", tags=["Cart"])


def _cart_items(db: Session, user_id: int):
    return (
        db.query(CartItem)
        .options(joinedload(CartItem.product))
        .filter(CartItem.user_id == user_id)
        .order_by(CartItem.id.asc())
        .all()
    )


def _cart_to_out(db: Session, user_id: int, coupon_code: Optional[str] = None) -> CartOut:
    """Price the cart exactly as checkout would, skipping lines that can no longer be bought."""
    config = load_store_config(db)
    items = _cart_items(db, user_id)

    lines, item_ids, unavailable = [], [], []
    for it in items:
        snapshot = ProductSnapshot.from_model(it.product, config.currency)
        if not snapshot.sellable:
            unavailable.append(it.product_id)
            continue
        lines.append(CartLine(product=snapshot, quantity=it.quantity))
        item_ids.append(it.id)

    coupon, coupon_error = None, None
    if coupon_code:
        validator = CouponValidator(SqlCouponRepository(db, config.currency))
        try:
            coupon = validator.find(coupon_code)
        except CouponNotActive as exc:
            coupon_error = exc.message
        else:
            state = validator.state(coupon)
            if state is not CouponState.ACTIVE:
                coupon_error = f"Coupon {coupon.code} cannot be used ({state.value})"

    pricing = CartPricer(config).price(lines, coupon)
    if coupon is not None and coupon_error is None and pricing.discount.is_zero():
        coupon_error = f"Coupon {coupon.code} requires a higher subtotal"

    items_out = [
        CartItemOut(
            id=item_id,
            product_id=p.line.product.id,
            name=p.line.product.name,
            sku=p.line.product.sku,
            quantity=p.line.quantity,
            unit_price=p.unit_price.amount,
            line_total=p.line_total.amount,
        )
        for item_id, p in zip(item_ids, pricing.lines)
    ]
    return CartOut(
        items=items_out,
        subtotal=pricing.subtotal.amount,
        discount=pricing.discount.amount,
        tax=pricing.tax.amount,
        shipping=pricing.shipping.amount,
        total=pricing.total.amount,
        currency=pricing.currency,
        coupon_code=pricing.coupon_code,
        coupon_error=coupon_error,
        unavailable=unavailable,
    )


def _check_stock(db: Session, product_id: int, quantity: int):
    config = load_store_config(db)
    ledger = StockLedger(SqlCatalogRepository(db, config.currency))
    product = ledger.catalog.get(product_id)
    if not product.is_active:
        raise ProductUnavailable(product.id, product.name)
    availability = ledger.check_availability(product_id, quantity)
    if not availability.available:
        raise InsufficientStock(product_id, quantity, product.name)


@router.get("", response_model=CartOut)
def get_cart(
    coupon: Optional[str] = Query(None, description="Coupon code to preview"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _cart_to_out(db, current_user.id, coupon)


@router.post("/add", response_model=CartOut, status_code=status.HTTP_200_OK)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = db.query(CartItem).filter(
        CartItem.user_id == current_user.id, CartItem.product_id == payload.product_id
    ).first()

    # Stock must cover the combined quantity
    new_quantity = payload.quantity + (item.quantity if item else 0)
    _check_stock(db, payload.product_id, new_quantity)

    if item:
        item.quantity = new_quantity
    else:
        db.add(CartItem(user_id=current_user.id, product_id=payload.product_id, quantity=payload.quantity))
    db.commit()

    out = _cart_to_out(db, current_user.id)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        request=request,
        meta={"product_id": payload.product_id, "quantity": payload.quantity, "cart_items": len(out.items)},
    )
    return out


@router.put("/items/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.user_id == current_user.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")

    _check_stock(db, item.product_id, payload.quantity)

    item.quantity = payload.quantity
    db.commit()

    out = _cart_to_out(db, current_user.id)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_UPDATE",
        resource="cart",
        request=request,
        meta={"item_id": item_id, "quantity": payload.quantity, "total": str(out.total)},
    )
    return out


@router.delete("/items/{item_id}", response_model=CartOut)
def delete_cart_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.user_id == current_user.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")

    db.delete(item)
    db.commit()

    out = _cart_to_out(db, current_user.id)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_DELETE",
        resource="cart",
        request=request,
        meta={"item_id": item_id, "cart_items": len(out.items)},
    )
    return out
