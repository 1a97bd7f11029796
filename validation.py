"""
Input validation for coupons and carts.

Both validators are pure: they never touch the input and report every problem
they find as a "field: message" string instead of raising.
"""

from typing import Any, List, NamedTuple, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from models import DETAILS_MODELS, Cart


class ValidationResult(NamedTuple):
    is_valid: bool
    errors: List[str]


def _field_path(loc, prefix: str = "") -> str:
    path = prefix
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _collect_errors(model: Type[BaseModel], data: Any, prefix: str = "") -> List[str]:
    try:
        model.model_validate(data)
    except PydanticValidationError as e:
        return [f"{_field_path(err['loc'], prefix)}: {err['msg']}" for err in e.errors()]
    return []


def validate_coupon(data: Any) -> ValidationResult:
    if not isinstance(data, dict):
        return ValidationResult(False, ["coupon must be an object"])

    coupon_type = data.get("type")
    if not isinstance(coupon_type, str) or coupon_type not in DETAILS_MODELS:
        allowed = ", ".join(DETAILS_MODELS)
        return ValidationResult(False, [f"type must be one of: {allowed}"])

    details = data.get("details")
    if not isinstance(details, dict):
        return ValidationResult(False, ["details must be an object"])

    errors = _collect_errors(DETAILS_MODELS[coupon_type], details, prefix="details")

    if "isActive" in data and not isinstance(data["isActive"], bool):
        errors.append("isActive must be a boolean")

    return ValidationResult(not errors, errors)


def validate_cart(data: Any) -> ValidationResult:
    if not isinstance(data, dict):
        return ValidationResult(False, ["cart must be an object"])
    if not isinstance(data.get("items"), list):
        return ValidationResult(False, ["items must be an array"])
    if not data["items"]:
        return ValidationResult(False, ["items cannot be empty"])

    errors = _collect_errors(Cart, data)
    return ValidationResult(not errors, errors)
