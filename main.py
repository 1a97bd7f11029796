from fastapi.middleware.cors import CORSMiddleware
from fastapi import Body, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from models import (
    CouponListResponse, CouponResponse,
    ApplicableCouponsResponse, ApplyCouponResponse
)
from coupon_service import CouponService
from errors import CouponAPIError, ValidationError
from firebase_util import CouponStore
from logging_config import setup_logging, get_logger
import os
from dotenv import load_dotenv

load_dotenv()
setup_logging()
log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seeds the sample coupons on startup when APP_ENV is 'development'."""
    if os.getenv("APP_ENV") == "development":
        log.info("Development mode: seeding sample coupons.")
        CouponStore().seed()
    yield


app = FastAPI(title="Coupons Management API", version="1.0.0", lifespan=lifespan)

# 🔐 Allow frontend CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "http://127.0.0.1:5500").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 🔐 Admin API key check (only enforced when ADMIN_API_KEY is configured)
def check_admin(api_key: Optional[str] = Header(None, alias="x-api-key")):
    admin_key = os.getenv("ADMIN_API_KEY")
    if admin_key and api_key != admin_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def get_coupon_service() -> CouponService:
    return CouponService(CouponStore())


def _require_cart(body: Dict[str, Any]):
    cart = body.get("cart")
    if cart is None:
        raise ValidationError("Cart is required in request body")
    return cart


@app.exception_handler(CouponAPIError)
async def coupon_error_handler(request: Request, exc: CouponAPIError):
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        log.warning(f"{request.method} {request.url.path} rejected: {exc.message}")

    error = {"message": exc.message}
    if getattr(exc, "errors", None):
        error["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content={"error": error})


@app.get("/")
def health_check():
    return {
        "message": "Coupons Management API",
        "version": app.version,
        "status": "running",
        "endpoints": {"coupons": "/coupons", "documentation": "/docs", "health": "/"},
    }


# 🎯 1. LIST COUPONS
@app.get("/coupons", response_model=CouponListResponse)
def list_coupons(
    coupon_type: Optional[str] = Query(None, alias="type"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    service: CouponService = Depends(get_coupon_service),
):
    coupons = service.get_all_coupons(coupon_type=coupon_type, is_active=is_active)
    return CouponListResponse(count=len(coupons), data=coupons)


# 🎯 2. GET COUPON
@app.get("/coupons/{coupon_id}", response_model=CouponResponse)
def get_coupon(coupon_id: str, service: CouponService = Depends(get_coupon_service)):
    return CouponResponse(data=service.get_coupon_by_id(coupon_id))


# 🎯 3. CREATE COUPON
@app.post("/coupons", response_model=CouponResponse, status_code=201, dependencies=[Depends(check_admin)])
def create_coupon(coupon: Dict[str, Any] = Body(...), service: CouponService = Depends(get_coupon_service)):
    created = service.create_coupon(coupon)
    return CouponResponse(message="Coupon created successfully", data=created)


# 🎯 4. UPDATE COUPON
@app.put("/coupons/{coupon_id}", response_model=CouponResponse, dependencies=[Depends(check_admin)])
def update_coupon(
    coupon_id: str,
    changes: Dict[str, Any] = Body(...),
    service: CouponService = Depends(get_coupon_service),
):
    updated = service.update_coupon(coupon_id, changes)
    return CouponResponse(message="Coupon updated successfully", data=updated)


# 🎯 5. DELETE COUPON
@app.delete("/coupons/{coupon_id}", dependencies=[Depends(check_admin)])
def delete_coupon(coupon_id: str, service: CouponService = Depends(get_coupon_service)):
    service.delete_coupon(coupon_id)
    return {"success": True, "message": "Coupon deleted successfully"}


# 🎯 6. APPLICABLE COUPONS FOR A CART
@app.post("/applicable-coupons", response_model=ApplicableCouponsResponse)
def applicable_coupons(body: Dict[str, Any] = Body(...), service: CouponService = Depends(get_coupon_service)):
    cart = _require_cart(body)
    return ApplicableCouponsResponse(applicable_coupons=service.get_applicable_coupons(cart))


# 🎯 7. APPLY A COUPON TO A CART
@app.post("/apply-coupon/{coupon_id}", response_model=ApplyCouponResponse)
def apply_coupon(
    coupon_id: str,
    body: Dict[str, Any] = Body(...),
    service: CouponService = Depends(get_coupon_service),
):
    cart = _require_cart(body)
    return ApplyCouponResponse(updated_cart=service.apply_coupon(coupon_id, cart))
