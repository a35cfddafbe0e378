from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user, role_required
from utils.audit import write_log
from models.users import User
from models.coupon import Coupon, CouponType
from schemas.coupon import CouponCreate, CouponUpdate, CouponOut, CouponCheck
from services.coupons import CouponValidator, CouponState, coupon_state
from services.money import Money
from services.repositories import SqlCouponRepository
from services.snapshots import CouponSnapshot, as_utc
from services.store_config import load_store_config

router = APIRouter(prefix="/coupons", tags=["Coupons"])


def _coupon_to_out(coupon: Coupon, currency: str) -> CouponOut:
    snapshot = CouponSnapshot.from_model(coupon, currency)
    return CouponOut(
        id=coupon.id,
        code=coupon.code,
        name=coupon.name,
        description=coupon.description,
        type=snapshot.type,
        value=coupon.value,
        minimum_amount=coupon.minimum_amount,
        usage_limit=coupon.usage_limit,
        used_count=coupon.used_count,
        is_active=coupon.is_active,
        starts_at=coupon.starts_at,
        expires_at=coupon.expires_at,
        state=coupon_state(snapshot).value,
    )


@router.get("", response_model=List[CouponOut])
def list_coupons(
    active_only: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    currency = load_store_config(db).currency
    query = db.query(Coupon)
    if active_only:
        query = query.filter(Coupon.is_active == True)  # noqa: E712
    return [_coupon_to_out(c, currency) for c in query.order_by(Coupon.id.asc()).all()]


@router.post("", response_model=CouponOut, status_code=status.HTTP_201_CREATED)
def create_coupon(
    payload: CouponCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    code = payload.code.strip().upper()
    if db.query(Coupon).filter(func.upper(Coupon.code) == code).first():
        raise HTTPException(status_code=400, detail="Coupon code already exists")

    data = payload.model_dump()
    data["code"] = code
    data["type"] = CouponType(payload.type)
    coupon = Coupon(used_count=0, **data)
    db.add(coupon)
    db.commit()
    db.refresh(coupon)

    write_log(db, user_id=current_user.id, action="COUPON_CREATE", resource="coupons",
              request=request, meta={"coupon_id": coupon.id, "code": coupon.code})
    return _coupon_to_out(coupon, load_store_config(db).currency)


@router.patch("/{coupon_id}", response_model=CouponOut)
def update_coupon(
    coupon_id: int,
    payload: CouponUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    coupon = db.get(Coupon, coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")

    changes = payload.model_dump(exclude_unset=True)
    limit = changes.get("usage_limit", coupon.usage_limit)
    if limit is not None and limit < coupon.used_count:
        raise HTTPException(status_code=400, detail="Usage limit cannot be below the number of uses")

    # Same window rule as on create, applied to the merged values
    starts_at = as_utc(changes.get("starts_at", coupon.starts_at))
    expires_at = as_utc(changes.get("expires_at", coupon.expires_at))
    if starts_at and expires_at and expires_at <= starts_at:
        raise HTTPException(status_code=400, detail="Coupon must expire after it starts.")

    for field, value in changes.items():
        setattr(coupon, field, value)
    db.commit()
    db.refresh(coupon)

    write_log(db, user_id=current_user.id, action="COUPON_UPDATE", resource="coupons",
              request=request, meta={"coupon_id": coupon.id, "fields": sorted(changes)})
    return _coupon_to_out(coupon, load_store_config(db).currency)


# Preview a code against a subtotal; never counts a use
@router.get("/{code}/check", response_model=CouponCheck)
def check_coupon(
    code: str,
    subtotal: Decimal = Query(..., ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    currency = load_store_config(db).currency
    validator = CouponValidator(SqlCouponRepository(db, currency))
    coupon = validator.find(code)
    amount = Money.of(subtotal, currency)
    discount = validator.calculate_discount(coupon, amount)
    state = validator.state(coupon)
    return CouponCheck(
        code=coupon.code,
        state=state.value,
        subtotal=amount.amount,
        discount=discount.amount,
        applicable=state is CouponState.ACTIVE and not discount.is_zero(),
    )
