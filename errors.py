from typing import List, Optional


class CouponAPIError(Exception):
    """Base error carrying the HTTP status it should be reported with."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CouponAPIError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(CouponAPIError):
    status_code = 404


class BusinessLogicError(CouponAPIError):
    status_code = 400
