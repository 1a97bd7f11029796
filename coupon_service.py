"""
Service layer between the HTTP API, the coupon store and the discount engine.

Validation and lookup failures are raised as ValidationError / NotFoundError;
pricing failures come from the engine as BusinessLogicError.
"""

from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

import discount_engine
from errors import BusinessLogicError, NotFoundError, ValidationError
from firebase_util import CouponStore
from logging_config import get_logger
from models import ApplicableCoupon, Cart, Coupon, UpdatedCart
from validation import validate_cart, validate_coupon

log = get_logger(__name__)


class CouponService:
    def __init__(self, store: CouponStore):
        self.store = store

    def get_all_coupons(self, coupon_type: Optional[str] = None, is_active: Optional[bool] = None) -> List[Coupon]:
        coupons = []
        for record in self.store.get_all(coupon_type=coupon_type, is_active=is_active):
            try:
                coupons.append(Coupon.model_validate(record))
            except PydanticValidationError as e:
                log.error(f"[Coupon: {record.get('id')}] Unreadable record skipped: {e}")
        return coupons

    def get_coupon_by_id(self, coupon_id: str) -> Coupon:
        record = self.store.get_by_id(coupon_id)
        if record is None:
            raise NotFoundError(f"Coupon with ID {coupon_id} not found")
        try:
            return Coupon.model_validate(record)
        except PydanticValidationError as e:
            log.error(f"[Coupon: {coupon_id}] Stored record is unreadable: {e}")
            raise BusinessLogicError(f"Coupon {coupon_id} has invalid details")

    def create_coupon(self, coupon_data: Any) -> Coupon:
        validation = validate_coupon(coupon_data)
        if not validation.is_valid:
            raise ValidationError("Invalid coupon data", validation.errors)
        return Coupon.model_validate(self.store.create(coupon_data))

    def update_coupon(self, coupon_id: str, update_data: dict) -> Coupon:
        existing = self.store.get_by_id(coupon_id)
        if existing is None:
            raise NotFoundError(f"Coupon with ID {coupon_id} not found")

        # The update must leave a valid coupon behind, not just be valid itself
        validation = validate_coupon({**existing, **update_data})
        if not validation.is_valid:
            raise ValidationError("Invalid coupon data", validation.errors)

        return Coupon.model_validate(self.store.update(coupon_id, update_data))

    def delete_coupon(self, coupon_id: str) -> None:
        if not self.store.delete(coupon_id):
            raise NotFoundError(f"Coupon with ID {coupon_id} not found")

    def get_applicable_coupons(self, cart_data: Any) -> List[ApplicableCoupon]:
        cart = self._parse_cart(cart_data)
        coupons = self.get_all_coupons(is_active=True)
        applicable = discount_engine.list_applicable_coupons(coupons, cart)
        log.info(f"{len(applicable)} of {len(coupons)} active coupon(s) apply to the cart.")
        return applicable

    def apply_coupon(self, coupon_id: str, cart_data: Any) -> UpdatedCart:
        cart = self._parse_cart(cart_data)
        coupon = self.get_coupon_by_id(coupon_id)
        return discount_engine.apply_coupon(coupon, cart)

    @staticmethod
    def _parse_cart(cart_data: Any) -> Cart:
        validation = validate_cart(cart_data)
        if not validation.is_valid:
            raise ValidationError("Invalid cart data", validation.errors)
        return Cart.model_validate(cart_data)
