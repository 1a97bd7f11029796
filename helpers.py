import math
from typing import Iterable, Optional

from models import Cart, CartItem, ProductQuantity


def cart_total(cart: Cart) -> float:
    return sum(item.price * item.quantity for item in cart.items)


def to_cents(value: float) -> int:
    # Half-up on the scaled value, so 0.125 -> 13 and -2.5 -> -2
    return math.floor(value * 100 + 0.5)


def round_money(value: float) -> float:
    return to_cents(value) / 100


def percentage_of(amount: float, percentage: float) -> float:
    return amount * percentage / 100


def find_cart_item(cart: Cart, product_id: int) -> Optional[CartItem]:
    return next((item for item in cart.items if item.product_id == product_id), None)


def count_quantity(cart: Cart, product_ids: Iterable[int]) -> int:
    """Total quantity of every cart line whose product is in `product_ids`."""
    ids = set(product_ids)
    return sum(item.quantity for item in cart.items if item.product_id in ids)


def required_quantity(specs: Iterable[ProductQuantity]) -> int:
    return sum(spec.quantity for spec in specs)
