from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import role_required
from utils.audit import write_log
from models.users import User
from models.store_setting import StoreSetting, set_setting
from schemas.store_setting import StoreSettingOut, StoreSettingUpdate
from services.store_config import check_pricing_setting

router = APIRouter(prefix="/settings", tags=["Settings"])


def _setting_to_out(setting: StoreSetting) -> StoreSettingOut:
    return StoreSettingOut(
        key=setting.key, value=setting.typed_value(), type=setting.type, description=setting.description
    )


@router.get("/store", response_model=List[StoreSettingOut])
def list_store_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    return [_setting_to_out(s) for s in db.query(StoreSetting).order_by(StoreSetting.key.asc()).all()]


@router.put("/store/{key}", response_model=StoreSettingOut)
def update_store_setting(
    key: str,
    payload: StoreSettingUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    # Pricing keys are checked before anything is written; InvalidAmount becomes a 400
    check_pricing_setting(key, payload.value, payload.type)
    try:
        setting = set_setting(db, key, payload.value, payload.type, payload.description)
    except (TypeError, ValueError) as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Invalid value for {key}: {exc}")

    write_log(db, user_id=current_user.id, action="SETTING_UPDATE", resource="settings",
              request=request, meta={"key": key})
    return _setting_to_out(setting)
