"""
Discount strategies, one per coupon type.

Each strategy is a triple of pure functions over a coupon and a cart:

    is_applicable(coupon, cart) -> bool
    calculate_discount(coupon, cart) -> float   (0 when not applicable)
    apply_to_cart(coupon, cart) -> UpdatedCart  (raises when the discount is 0)

Carts are never modified; apply_to_cart builds a new UpdatedCart.
"""

from typing import Callable, List, NamedTuple, Tuple

from errors import BusinessLogicError
from helpers import (
    cart_total, count_quantity, find_cart_item, percentage_of,
    required_quantity, round_money, to_cents,
)
from models import (
    BxGyDetails, Cart, CartWiseDetails, Coupon, DiscountType,
    ProductWiseDetails, UpdatedCart,
)

NOT_APPLICABLE = "Coupon not applicable to this cart"


class Strategy(NamedTuple):
    is_applicable: Callable[[Coupon, Cart], bool]
    calculate_discount: Callable[[Coupon, Cart], float]
    apply_to_cart: Callable[[Coupon, Cart], UpdatedCart]


def _updated_cart(cart: Cart, item_discounts: List[float], total_discount: float) -> UpdatedCart:
    items = [
        item.model_copy(update={"total_discount": discount})
        for item, discount in zip(cart.items, item_discounts)
    ]
    total_price = round_money(cart_total(cart))
    total_discount = round_money(total_discount)
    return UpdatedCart(
        items=items,
        total_price=total_price,
        total_discount=total_discount,
        final_price=round_money(total_price - total_discount),
    )


# --- Cart-wise: threshold on the whole cart ---

def cart_wise_is_applicable(coupon: Coupon, cart: Cart) -> bool:
    details = CartWiseDetails.model_validate(coupon.details)
    return cart_total(cart) >= details.threshold


def cart_wise_calculate_discount(coupon: Coupon, cart: Cart) -> float:
    if not cart_wise_is_applicable(coupon, cart):
        return 0
    details = CartWiseDetails.model_validate(coupon.details)
    total = cart_total(cart)

    if details.discountType == DiscountType.FIXED:
        discount = details.discount
    else:
        discount = percentage_of(total, details.discount)

    return round_money(min(discount, total))


def cart_wise_apply_to_cart(coupon: Coupon, cart: Cart) -> UpdatedCart:
    discount = cart_wise_calculate_discount(coupon, cart)
    if discount == 0:
        raise BusinessLogicError(NOT_APPLICABLE)
    # Cart-level discount, not attributed to any line
    return _updated_cart(cart, [0.0] * len(cart.items), discount)


# --- Product-wise: discount on a single product's line ---

def product_wise_is_applicable(coupon: Coupon, cart: Cart) -> bool:
    details = ProductWiseDetails.model_validate(coupon.details)
    item = find_cart_item(cart, details.product_id)
    return item is not None and item.quantity > 0


def product_wise_calculate_discount(coupon: Coupon, cart: Cart) -> float:
    if not product_wise_is_applicable(coupon, cart):
        return 0
    details = ProductWiseDetails.model_validate(coupon.details)
    item = find_cart_item(cart, details.product_id)
    item_total = item.price * item.quantity

    if details.discountType == DiscountType.FIXED:
        # Flat amount for the line, not per unit
        discount = details.discount
    else:
        discount = percentage_of(item_total, details.discount)

    return round_money(min(discount, item_total))


def product_wise_apply_to_cart(coupon: Coupon, cart: Cart) -> UpdatedCart:
    discount = product_wise_calculate_discount(coupon, cart)
    if discount == 0:
        raise BusinessLogicError(NOT_APPLICABLE)

    product_id = ProductWiseDetails.model_validate(coupon.details).product_id
    target = find_cart_item(cart, product_id)
    item_discounts = [discount if item is target else 0.0 for item in cart.items]
    return _updated_cart(cart, item_discounts, discount)


# --- BxGy: buy a bundle, get items free ---

def _times_qualified(details: BxGyDetails, cart: Cart) -> int:
    # Buy quantities are pooled across every listed buy product
    buy_qty = count_quantity(cart, (spec.product_id for spec in details.buy_products))
    return buy_qty // required_quantity(details.buy_products)


def _times_applicable(details: BxGyDetails, cart: Cart) -> int:
    times = _times_qualified(details, cart)
    if details.repetition_limit is not None:
        times = min(times, details.repetition_limit)
    return times


def _allocate_free_units(details: BxGyDetails, cart: Cart) -> List[Tuple[int, float]]:
    """
    Hand out free units to the get-eligible lines, cheapest unit price first.

    Returns (line index, freed value) pairs. sorted() is stable, so lines with
    equal prices keep their cart order.
    """
    remaining = required_quantity(details.get_products) * _times_applicable(details, cart)
    get_ids = {spec.product_id for spec in details.get_products}
    eligible = sorted(
        (index for index, item in enumerate(cart.items) if item.product_id in get_ids),
        key=lambda index: cart.items[index].price,
    )

    allocation = []
    for index in eligible:
        if remaining <= 0:
            break
        item = cart.items[index]
        free_qty = min(item.quantity, remaining)
        allocation.append((index, item.price * free_qty))
        remaining -= free_qty
    return allocation


def bxgy_is_applicable(coupon: Coupon, cart: Cart) -> bool:
    details = BxGyDetails.model_validate(coupon.details)
    if _times_qualified(details, cart) < 1:
        return False
    get_ids = {spec.product_id for spec in details.get_products}
    return any(item.product_id in get_ids and item.quantity > 0 for item in cart.items)


def bxgy_calculate_discount(coupon: Coupon, cart: Cart) -> float:
    if not bxgy_is_applicable(coupon, cart):
        return 0
    details = BxGyDetails.model_validate(coupon.details)
    return round_money(sum(value for _, value in _allocate_free_units(details, cart)))


def bxgy_apply_to_cart(coupon: Coupon, cart: Cart) -> UpdatedCart:
    discount = bxgy_calculate_discount(coupon, cart)
    if discount == 0:
        raise BusinessLogicError(NOT_APPLICABLE)

    details = BxGyDetails.model_validate(coupon.details)
    item_discounts = [0.0] * len(cart.items)
    # Each line gets the growth of the rounded running total, so the lines
    # add up to exactly the rounded discount
    running, attributed_cents = 0.0, 0
    for index, value in _allocate_free_units(details, cart):
        running += value
        cents = to_cents(running)
        item_discounts[index] = (cents - attributed_cents) / 100
        attributed_cents = cents
    return _updated_cart(cart, item_discounts, discount)


CART_WISE = Strategy(cart_wise_is_applicable, cart_wise_calculate_discount, cart_wise_apply_to_cart)
PRODUCT_WISE = Strategy(product_wise_is_applicable, product_wise_calculate_discount, product_wise_apply_to_cart)
BXGY = Strategy(bxgy_is_applicable, bxgy_calculate_discount, bxgy_apply_to_cart)
