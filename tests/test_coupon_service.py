import pytest

from errors import BusinessLogicError, NotFoundError, ValidationError


def test_create_assigns_id_and_defaults(service, cart_wise_data):
    coupon = service.create_coupon(cart_wise_data)

    assert coupon.id
    assert coupon.is_active is True
    assert coupon.created_at is not None
    assert coupon.created_at == coupon.updated_at
    assert service.get_coupon_by_id(coupon.id) == coupon


def test_create_rejects_invalid(service):
    with pytest.raises(ValidationError) as exc:
        service.create_coupon({"type": "cart-wise", "details": {"threshold": -5, "discount": 10}})
    assert exc.value.message == "Invalid coupon data"
    assert exc.value.errors[0].startswith("details.threshold")
    assert service.get_all_coupons() == []


def test_get_missing_coupon(service):
    with pytest.raises(NotFoundError, match="Coupon with ID nope not found"):
        service.get_coupon_by_id("nope")


def test_filters(service, cart_wise_data, product_wise_data, bxgy_data):
    service.create_coupon(cart_wise_data)
    service.create_coupon({**product_wise_data, "isActive": False})
    service.create_coupon(bxgy_data)

    assert len(service.get_all_coupons()) == 3
    assert [c.type for c in service.get_all_coupons(coupon_type="bxgy")] == ["bxgy"]
    assert [c.type for c in service.get_all_coupons(is_active=False)] == ["product-wise"]
    assert [c.type for c in service.get_all_coupons(is_active=True)] == ["cart-wise", "bxgy"]


def test_update_merges_and_revalidates(service, cart_wise_data):
    coupon = service.create_coupon(cart_wise_data)

    updated = service.update_coupon(coupon.id, {"isActive": False})
    assert updated.is_active is False
    assert updated.details == cart_wise_data["details"]

    with pytest.raises(ValidationError):
        service.update_coupon(coupon.id, {"type": "bxgy"})
    assert service.get_coupon_by_id(coupon.id).type == "cart-wise"


def test_update_missing(service):
    with pytest.raises(NotFoundError):
        service.update_coupon("nope", {"isActive": False})


def test_delete(service, cart_wise_data):
    coupon = service.create_coupon(cart_wise_data)
    service.delete_coupon(coupon.id)
    with pytest.raises(NotFoundError):
        service.get_coupon_by_id(coupon.id)
    with pytest.raises(NotFoundError):
        service.delete_coupon(coupon.id)


def test_applicable_coupons(service, sample_cart, cart_wise_data, product_wise_data, bxgy_data):
    cw = service.create_coupon(cart_wise_data)
    service.create_coupon({**product_wise_data, "isActive": False})
    bx = service.create_coupon(bxgy_data)

    result = service.get_applicable_coupons(sample_cart)
    assert [(c.coupon_id, c.discount) for c in result] == [(cw.id, 44), (bx.id, 25)]


def test_applicable_coupons_skips_unreadable_records(service, store, sample_cart, cart_wise_data):
    store.ref.child("broken").set({"type": "cart-wise", "isActive": True})
    cw = service.create_coupon(cart_wise_data)
    assert [c.coupon_id for c in service.get_applicable_coupons(sample_cart)] == [cw.id]


def test_applicable_coupons_rejects_bad_cart(service):
    with pytest.raises(ValidationError) as exc:
        service.get_applicable_coupons({"items": []})
    assert exc.value.errors == ["items cannot be empty"]


def test_apply_coupon(service, sample_cart, product_wise_data):
    coupon = service.create_coupon(product_wise_data)
    updated = service.apply_coupon(coupon.id, sample_cart)
    assert updated.total_discount == 60
    assert updated.final_price == 380


def test_apply_coupon_errors(service, sample_cart, product_wise_data):
    with pytest.raises(NotFoundError):
        service.apply_coupon("nope", sample_cart)

    inactive = service.create_coupon({**product_wise_data, "isActive": False})
    with pytest.raises(BusinessLogicError):
        service.apply_coupon(inactive.id, sample_cart)

    absent = service.create_coupon({"type": "product-wise", "details": {"product_id": 50, "discount": 5}})
    with pytest.raises(BusinessLogicError):
        service.apply_coupon(absent.id, sample_cart)


def test_seed_only_fills_empty_store(store):
    assert store.seed() == 3
    assert store.seed() == 0
    assert sorted(c["type"] for c in store.get_all()) == ["bxgy", "cart-wise", "product-wise"]


def test_unreadable_record_by_id_is_a_business_error(service, store):
    store.ref.child("broken").set({"type": "cart-wise", "isActive": True})
    with pytest.raises(BusinessLogicError, match="Coupon broken has invalid details"):
        service.get_coupon_by_id("broken")


def test_unreadable_record_left_out_of_listing(service, store, cart_wise_data):
    store.ref.child("broken").set({"type": "cart-wise", "isActive": True})
    cw = service.create_coupon(cart_wise_data)
    assert [c.id for c in service.get_all_coupons()] == [cw.id]
