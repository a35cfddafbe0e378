# backend/main.py
import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from services.errors import (
    CheckoutError, InvalidAmount, ProductNotFound, ProductUnavailable, InsufficientStock,
    CouponExhausted, CouponNotActive, EmptyCart, OrderNotFound, InvalidTransition,
)

# Routers
from routes.shop import router as shop_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router
from routes.coupons import router as coupons_router
from routes.products import router as products_router
from routes.store_settings import router as settings_router
from routes.stats import router as stats_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Create tables on startup
init_db()

app = FastAPI(title="Storefront API", version="1.0.0")

# CORS: local frontend plus the configured deployment URL
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS_CODES = {
    InvalidAmount: 400,
    EmptyCart: 400,
    CouponNotActive: 400,
    ProductNotFound: 404,
    OrderNotFound: 404,
    ProductUnavailable: 409,
    InsufficientStock: 409,
    CouponExhausted: 409,
    InvalidTransition: 409,
}


@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    """Turn pricing/stock/coupon/order errors into a rejected request."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 400)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error_type": type(exc).__name__},
    )


# Router registration
app.include_router(shop_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(coupons_router)
app.include_router(products_router)
app.include_router(settings_router)
app.include_router(stats_router)

@app.get("/")
def read_root():
    return {"message": "Storefront API is running"}
