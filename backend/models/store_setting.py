# backend/models/store_setting.py
import json
from decimal import Decimal, InvalidOperation
from sqlalchemy import Column, Integer, String, Text, DateTime, func
from sqlalchemy.orm import Session
from database import Base

SETTING_TYPES = ("string", "boolean", "integer", "float", "json")


# Key/value store configuration with a declared value type
class StoreSetting(Base):
    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, unique=True, nullable=False, index=True)
    value = Column(Text, nullable=True)
    type = Column(String, nullable=False, default="string")
    description = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def typed_value(self):
        if self.value is None:
            return None
        if self.type == "boolean":
            return self.value.strip().lower() in {"1", "true", "yes", "on"}
        if self.type == "integer":
            return int(self.value)
        if self.type == "float":
            # Kept as text so money settings never pass through a float
            try:
                return str(Decimal(self.value.strip()))
            except InvalidOperation:
                raise ValueError(f"Not a number: {self.value!r}") from None
        if self.type == "json":
            return json.loads(self.value)
        return self.value


def get_setting(db: Session, key: str, default=None):
    setting = db.query(StoreSetting).filter(StoreSetting.key == key).first()
    if not setting:
        return default
    return setting.typed_value()


def set_setting(db: Session, key: str, value, type: str = "string", description: str = None) -> StoreSetting:
    if type not in SETTING_TYPES:
        raise ValueError(f"Unknown setting type: {type}")

    if type == "boolean":
        raw = "1" if value else "0"
    elif type == "json":
        raw = json.dumps(value)
    else:
        raw = str(value)

    setting = db.query(StoreSetting).filter(StoreSetting.key == key).first()
    if setting:
        setting.value = raw
        setting.type = type
        if description is not None:
            setting.description = description
    else:
        setting = StoreSetting(key=key, value=raw, type=type, description=description)
        db.add(setting)
    # Fail before committing a value that cannot be read back
    setting.typed_value()
    db.commit()
    db.refresh(setting)
    return setting
