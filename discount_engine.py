"""
Discount engine: picks the strategy for a coupon's type and runs it.

This is the only entry point the service layer uses to price a cart.
"""

from typing import Iterable, List

from pydantic import ValidationError as PydanticValidationError

import strategies
from errors import BusinessLogicError
from logging_config import get_logger
from models import ApplicableCoupon, Cart, Coupon, CouponType, UpdatedCart

log = get_logger(__name__)

STRATEGIES = {
    CouponType.CART_WISE.value: strategies.CART_WISE,
    CouponType.PRODUCT_WISE.value: strategies.PRODUCT_WISE,
    CouponType.BXGY.value: strategies.BXGY,
}


def get_strategy(coupon_type: str) -> strategies.Strategy:
    strategy = STRATEGIES.get(coupon_type)
    if strategy is None:
        raise BusinessLogicError(f"No strategy found for coupon type: {coupon_type}")
    return strategy


def is_applicable(coupon: Coupon, cart: Cart) -> bool:
    return get_strategy(coupon.type).is_applicable(coupon, cart)


def calculate_discount(coupon: Coupon, cart: Cart) -> float:
    return get_strategy(coupon.type).calculate_discount(coupon, cart)


def apply_to_cart(coupon: Coupon, cart: Cart) -> UpdatedCart:
    return get_strategy(coupon.type).apply_to_cart(coupon, cart)


def list_applicable_coupons(coupons: Iterable[Coupon], cart: Cart) -> List[ApplicableCoupon]:
    """
    Price every active coupon against the cart and rank the ones that give a
    discount, best first. Coupons with equal discounts keep catalog order.

    A coupon that fails to evaluate (bad stored details, unknown type) is
    logged and skipped so the rest of the catalog is still listed.
    """
    applicable = []
    for coupon in coupons:
        if not coupon.is_active:
            continue
        try:
            if not is_applicable(coupon, cart):
                continue
            discount = calculate_discount(coupon, cart)
        except Exception as e:
            log.error(f"[Coupon: {coupon.id}] Skipped while checking applicability: {e}")
            continue

        if discount > 0:
            applicable.append(ApplicableCoupon(coupon_id=coupon.id, type=coupon.type, discount=discount))

    return sorted(applicable, key=lambda c: c.discount, reverse=True)


def apply_coupon(coupon: Coupon, cart: Cart) -> UpdatedCart:
    if not coupon.is_active:
        raise BusinessLogicError("Coupon is not active")

    try:
        if not is_applicable(coupon, cart):
            raise BusinessLogicError("Coupon is not applicable to this cart")
        updated = apply_to_cart(coupon, cart)
    except PydanticValidationError as e:
        log.error(f"[Coupon: {coupon.id}] Stored details are invalid: {e}")
        raise BusinessLogicError(f"Coupon {coupon.id} has invalid details")

    log.info(f"[Coupon: {coupon.id}] Applied, discount {updated.total_discount}")
    return updated
