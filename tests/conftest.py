import copy
import itertools

import pytest
from fastapi.testclient import TestClient

from coupon_service import CouponService
from firebase_util import CouponStore
from main import app, get_coupon_service


class FakeDatabase:
    """In-memory stand-in for a Realtime Database instance."""

    def __init__(self):
        self.data = {}
        self.push_ids = itertools.count(1)


class FakeReference:
    """Implements the slice of firebase_admin.db.Reference the store uses."""

    def __init__(self, database, path=()):
        self._db = database
        self._path = path
        self.key = path[-1] if path else None

    def child(self, path):
        parts = tuple(p for p in path.split("/") if p)
        return FakeReference(self._db, self._path + parts)

    def _node(self, path, create=False):
        node = self._db.data
        for part in path:
            if part not in node or not isinstance(node[part], dict):
                if not create:
                    return None
                node[part] = {}
            node = node[part]
        return node

    def get(self):
        node = self._db.data
        for part in self._path:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def set(self, value):
        parent = self._node(self._path[:-1], create=True)
        parent[self._path[-1]] = copy.deepcopy(value)

    def push(self, value):
        ref = self.child(f"-N{next(self._db.push_ids):08d}")
        ref.set(value)
        return ref

    def update(self, value):
        node = self._node(self._path, create=True)
        for k, v in value.items():
            node[k] = copy.deepcopy(v)

    def delete(self):
        parent = self._node(self._path[:-1])
        if parent is not None:
            parent.pop(self._path[-1], None)


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def store(fake_db):
    return CouponStore(FakeReference(fake_db).child("coupons"))


@pytest.fixture
def service(store):
    return CouponService(store)


@pytest.fixture
def client(service, monkeypatch):
    monkeypatch.delenv("ADMIN_API_KEY", raising=False)
    app.dependency_overrides[get_coupon_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_cart():
    # 300 + 90 + 50 = 440
    return {
        "items": [
            {"product_id": 1, "quantity": 6, "price": 50},
            {"product_id": 2, "quantity": 3, "price": 30},
            {"product_id": 3, "quantity": 2, "price": 25},
        ]
    }


@pytest.fixture
def cart_wise_data():
    return {"type": "cart-wise", "details": {"threshold": 100, "discount": 10, "discountType": "percentage"}}


@pytest.fixture
def product_wise_data():
    return {"type": "product-wise", "details": {"product_id": 1, "discount": 20, "discountType": "percentage"}}


@pytest.fixture
def bxgy_data():
    return {
        "type": "bxgy",
        "details": {
            "buy_products": [{"product_id": 1, "quantity": 3}, {"product_id": 2, "quantity": 3}],
            "get_products": [{"product_id": 3, "quantity": 1}],
            "repetition_limit": 2,
        },
    }
