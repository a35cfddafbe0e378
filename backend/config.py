# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./storefront.db"
    FRONTEND_URL: str = "http://localhost:5173"

    # Store defaults, overridden per key by rows in store_settings
    STORE_CURRENCY: str = "IDR"
    DEFAULT_TAX_RATE: str = "10"
    DEFAULT_SHIPPING_RATE: str = "15000"
    DEFAULT_FREE_SHIPPING_THRESHOLD: str = "100000"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
