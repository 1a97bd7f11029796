from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CouponType(str, Enum):
    CART_WISE = "cart-wise"
    PRODUCT_WISE = "product-wise"
    BXGY = "bxgy"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# --- Coupon details (one schema per coupon type) ---

class CartWiseDetails(BaseModel):
    threshold: float = Field(..., gt=0, strict=True)
    discount: float = Field(..., gt=0, strict=True)
    discountType: DiscountType = DiscountType.PERCENTAGE


class ProductWiseDetails(BaseModel):
    product_id: int = Field(..., gt=0, strict=True)
    discount: float = Field(..., gt=0, strict=True)
    discountType: DiscountType = DiscountType.PERCENTAGE


class ProductQuantity(BaseModel):
    product_id: int = Field(..., gt=0, strict=True)
    quantity: int = Field(..., gt=0, strict=True)


class BxGyDetails(BaseModel):
    buy_products: List[ProductQuantity] = Field(..., min_length=1)
    get_products: List[ProductQuantity] = Field(..., min_length=1)
    repetition_limit: Optional[int] = Field(None, gt=0, strict=True)


DETAILS_MODELS = {
    CouponType.CART_WISE.value: CartWiseDetails,
    CouponType.PRODUCT_WISE.value: ProductWiseDetails,
    CouponType.BXGY.value: BxGyDetails,
}


class Coupon(BaseModel):
    """
    A stored coupon. `details` is kept as the raw record so that a malformed
    entry in the store can still be loaded and skipped by the engine.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    details: Dict[str, Any]
    is_active: bool = Field(True, alias="isActive")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# --- Cart ---

class CartItem(BaseModel):
    product_id: int = Field(..., gt=0, strict=True)
    quantity: int = Field(..., gt=0, strict=True)
    price: float = Field(..., ge=0, strict=True)
    total_discount: float = 0


class Cart(BaseModel):
    items: List[CartItem] = Field(..., min_length=1)


class UpdatedCart(BaseModel):
    items: List[CartItem]
    total_price: float
    total_discount: float
    final_price: float


class ApplicableCoupon(BaseModel):
    coupon_id: str
    type: str
    discount: float


# --- API responses ---

class CouponListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[Coupon]


class CouponResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Optional[Coupon] = None


class ApplicableCouponsResponse(BaseModel):
    applicable_coupons: List[ApplicableCoupon]


class ApplyCouponResponse(BaseModel):
    updated_cart: UpdatedCart
