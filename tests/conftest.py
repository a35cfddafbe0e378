"""Pytest fixtures for storefront tests."""

import os
import tempfile
from decimal import Decimal

# The app module creates its tables at import time; keep that out of the working tree
_TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'app.db')}"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import Base, get_db
import models.users, models.product, models.cart, models.coupon  # noqa: E401,F401
import models.order, models.store_setting, models.log  # noqa: E401,F401
from models.users import User
from models.product import Product, Category
from models.coupon import Coupon, CouponType
from services.money import Money
from services.store_config import StoreConfig
from utils.tokenJWT import create_access_token


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite database, fresh for every test."""
    eng = create_engine(
        f"sqlite:///{tmp_path / 'store.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store_config():
    """Store defaults used by the shop: 10% tax, 15,000 flat shipping, free from 100,000."""
    return StoreConfig(
        currency="IDR",
        tax_rate=Decimal("10"),
        flat_shipping_rate=Money.of("15000"),
        free_shipping_threshold=Money.of("100000"),
    )


@pytest.fixture
def make_user(db):
    def _make(email="customer@example.com", role="customer", name="Test Customer"):
        user = User(email=email, role=role, name=name)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_category(db):
    def _make(name="Coffee", slug="coffee", sort_order=0):
        category = Category(name=name, slug=slug, sort_order=sort_order)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category
    return _make


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def _make(name=None, price="50000", sale_price=None, stock_quantity=10, **overrides):
        counter["n"] += 1
        n = counter["n"]
        product = Product(
            name=name or f"Product {n}",
            slug=overrides.pop("slug", f"product-{n}"),
            sku=overrides.pop("sku", f"SKU-{n:04d}"),
            price=Decimal(price),
            sale_price=Decimal(sale_price) if sale_price is not None else None,
            stock_quantity=stock_quantity,
            manage_stock=overrides.pop("manage_stock", True),
            in_stock=overrides.pop("in_stock", True),
            status=overrides.pop("status", "active"),
            **overrides,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def make_coupon(db):
    def _make(code="SAVE10", type="percentage", value="10", minimum_amount=None, usage_limit=None,
              used_count=0, is_active=True, starts_at=None, expires_at=None):
        coupon = Coupon(
            code=code,
            name=f"{code} coupon",
            type=CouponType(type),
            value=Decimal(value),
            minimum_amount=Decimal(minimum_amount) if minimum_amount is not None else None,
            usage_limit=usage_limit,
            used_count=used_count,
            is_active=is_active,
            starts_at=starts_at,
            expires_at=expires_at,
        )
        db.add(coupon)
        db.commit()
        db.refresh(coupon)
        return coupon
    return _make


@pytest.fixture
def client(session_factory):
    """API client whose requests use the per-test database."""
    from main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user) -> dict:
    token = create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}
