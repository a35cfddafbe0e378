import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from database import SessionLocal, init_db
from models.users import User, ROLE_ADMIN, ROLE_CUSTOMER
from models.product import Product, Category
from models.coupon import Coupon, CouponType
from models.store_setting import StoreSetting, set_setting
from services.store_config import check_pricing_setting

# Configuration
CATEGORY_NAMES = ["Batik", "Coffee", "Snacks", "Handicraft", "Skincare", "Home Decor"]
PRODUCTS_PER_CATEGORY = (3, 8)

# Default store settings: (key, value, type, description)
STORE_SETTINGS = [
    ("store_name", "UMKM Online Store", "string", None),
    ("store_description", "Your trusted online marketplace for local UMKM products", "string", None),
    ("store_address", "Jakarta, Indonesia", "string", None),
    ("store_email", "info@umkmstore.com", "string", None),
    ("currency", "IDR", "string", "ISO currency code for all prices"),
    ("tax_rate", "10", "float", "Tax percentage charged on the discounted subtotal"),
    ("shipping_rate", "15000", "float", "Flat shipping fee"),
    ("free_shipping_threshold", "100000", "float", "Subtotal from which shipping is free"),
    ("payment_methods", ["bank_transfer", "cod", "e_wallet"], "json", None),
]
# End Configuration


def _slugify(text: str) -> str:
    return "-".join(text.lower().split())


def seed_users(session: Session):
    for email, name, role in [
        ("admin@example.com", "Admin User", ROLE_ADMIN),
        ("customer@example.com", "Test Customer", ROLE_CUSTOMER),
    ]:
        if not session.query(User).filter(User.email == email).first():
            session.add(User(email=email, name=name, role=role))
    session.commit()


def seed_catalog(session: Session, rng: random.Random):
    for position, name in enumerate(CATEGORY_NAMES):
        category = Category(name=name, slug=_slugify(name), sort_order=position)
        session.add(category)
        session.flush()

        for n in range(rng.randint(*PRODUCTS_PER_CATEGORY)):
            price = Decimal(rng.randrange(10_000, 500_000, 500))
            # Roughly a third of products are on sale
            sale_price = None
            if rng.random() < 0.3:
                sale_price = (price * Decimal(rng.randint(50, 90)) / 100).quantize(Decimal("1"))
            product_name = f"{name} Item {n + 1}"
            session.add(Product(
                category_id=category.id,
                name=product_name,
                slug=f"{_slugify(product_name)}-{category.id}",
                sku=f"SKU-{category.id:02d}{n + 1:04d}",
                description=f"Local {name.lower()} product.",
                price=price,
                sale_price=sale_price,
                stock_quantity=rng.randint(0, 100),
                manage_stock=True,
                in_stock=rng.random() < 0.85,
                is_featured=rng.random() < 0.2,
                status="active",
            ))
    session.commit()


def seed_coupons(session: Session):
    now = datetime.now(timezone.utc)
    session.add_all([
        Coupon(code="WELCOME10", name="Welcome Discount", type=CouponType.PERCENTAGE, value=Decimal("10"),
               minimum_amount=Decimal("50000"), usage_limit=100, used_count=0, is_active=True),
        Coupon(code="HEMAT20K", name="Hemat 20K", type=CouponType.FIXED, value=Decimal("20000"),
               usage_limit=None, used_count=0, is_active=True, expires_at=now + timedelta(days=90)),
        Coupon(code="FLASH50", name="Flash Sale", type=CouponType.PERCENTAGE, value=Decimal("50"),
               minimum_amount=Decimal("200000"), usage_limit=10, used_count=0, is_active=False),
    ])
    session.commit()


def seed_store_settings(session: Session):
    for key, value, type_, description in STORE_SETTINGS:
        if not session.query(StoreSetting).filter(StoreSetting.key == key).first():
            check_pricing_setting(key, value, type_)
            set_setting(session, key, value, type_, description)


def populate_database(session: Session, seed: int = 42):
    """Fill an empty database with demo users, catalog, coupons and store settings."""
    rng = random.Random(seed)
    seed_users(session)
    seed_store_settings(session)
    if session.query(Product).count() == 0:
        seed_catalog(session, rng)
    if session.query(Coupon).count() == 0:
        seed_coupons(session)


if __name__ == "__main__":
    init_db()
    session = SessionLocal()
    try:
        populate_database(session)
        print("Database populated.")
    finally:
        session.close()
