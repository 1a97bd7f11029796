import os
from datetime import datetime, timezone
from typing import List, Optional

import firebase_admin
from dotenv import load_dotenv
from firebase_admin import credentials, db

from logging_config import get_logger

# Load environment variables
load_dotenv()

# Path to Firebase service account JSON
FIREBASE_CRED_PATH = os.getenv("FIREBASE_CRED_JSON", "./firebase-adminsdk.json")
FIREBASE_DB_URL = os.getenv("FIREBASE_DB_URL", "")

COUPONS_PATH = "coupons"

log = get_logger(__name__)


def get_db_ref(path: str = "/"):
    """Returns a Realtime Database reference, initializing the Firebase app on first use."""
    if not firebase_admin._apps:
        try:
            cred = credentials.Certificate(FIREBASE_CRED_PATH)
            firebase_admin.initialize_app(cred, {
                'databaseURL': FIREBASE_DB_URL
            })
        except Exception as e:
            raise RuntimeError(f"Firebase initialization failed: {e}")
        log.info("Firebase app initialized.")
    return db.reference(path)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CouponStore:
    """
    Keyed coupon store on the Realtime Database. Each coupon lives under
    /coupons/<push key>; the push key is the coupon's id.
    """

    def __init__(self, ref=None):
        self.ref = ref if ref is not None else get_db_ref().child(COUPONS_PATH)

    @staticmethod
    def _with_id(coupon_id: str, data: dict) -> dict:
        return {"id": coupon_id, **data}

    def get_all(self, coupon_type: Optional[str] = None, is_active: Optional[bool] = None) -> List[dict]:
        records = self.ref.get() or {}
        coupons = []
        for coupon_id, data in records.items():
            if coupon_type is not None and data.get("type") != coupon_type:
                continue
            if is_active is not None and data.get("isActive", True) != is_active:
                continue
            coupons.append(self._with_id(coupon_id, data))
        return coupons

    def get_by_id(self, coupon_id: str) -> Optional[dict]:
        data = self.ref.child(coupon_id).get()
        if not data:
            return None
        return self._with_id(coupon_id, data)

    def create(self, coupon_data: dict) -> dict:
        now = utc_now()
        data = {
            "type": coupon_data["type"],
            "details": coupon_data["details"],
            "isActive": coupon_data.get("isActive", True),
            "created_at": now,
            "updated_at": now,
        }
        new_ref = self.ref.push(data)
        log.info(f"[Coupon: {new_ref.key}] Created ({data['type']}).")
        return self._with_id(new_ref.key, data)

    def update(self, coupon_id: str, update_data: dict) -> Optional[dict]:
        coupon_ref = self.ref.child(coupon_id)
        if not coupon_ref.get():
            return None
        changes = {k: v for k, v in update_data.items() if k in ("type", "details", "isActive")}
        changes["updated_at"] = utc_now()
        coupon_ref.update(changes)
        log.info(f"[Coupon: {coupon_id}] Updated fields: {sorted(changes)}")
        return self.get_by_id(coupon_id)

    def delete(self, coupon_id: str) -> bool:
        coupon_ref = self.ref.child(coupon_id)
        if not coupon_ref.get():
            return False
        coupon_ref.delete()
        log.info(f"[Coupon: {coupon_id}] Deleted.")
        return True

    def seed(self) -> int:
        """Adds the sample coupons to an empty store. Returns how many were added."""
        existing = self.get_all()
        if existing:
            log.info(f"Store already has {len(existing)} coupon(s), skipping seed.")
            return 0

        samples = [
            # 10% off carts over 100
            {"type": "cart-wise",
             "details": {"threshold": 100, "discount": 10, "discountType": "percentage"}},
            # 20% off product 1
            {"type": "product-wise",
             "details": {"product_id": 1, "discount": 20, "discountType": "percentage"}},
            # Buy 6 of products 1/2, get one product 3 free, at most twice
            {"type": "bxgy",
             "details": {
                 "buy_products": [{"product_id": 1, "quantity": 3}, {"product_id": 2, "quantity": 3}],
                 "get_products": [{"product_id": 3, "quantity": 1}],
                 "repetition_limit": 2,
             }},
        ]
        for sample in samples:
            self.create(sample)
        log.info(f"Store seeded with {len(samples)} sample coupons.")
        return len(samples)
