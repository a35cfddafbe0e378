from pydantic import BaseModel, ConfigDict
from typing import Any, Literal, Optional

SettingType = Literal["string", "boolean", "integer", "float", "json"]


class StoreSettingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: Any
    type: SettingType
    description: Optional[str] = None


class StoreSettingUpdate(BaseModel):
    value: Any
    type: SettingType = "string"
    description: Optional[str] = None
