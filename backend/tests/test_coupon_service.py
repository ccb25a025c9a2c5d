from datetime import date, datetime
from decimal import Decimal

import pytest

from app.services.billing.billing_models import DiscountCoupon, DiscountType
from app.services.billing.coupon_service import (
    create_coupon,
    evaluate,
    evaluate_code,
    find_coupon,
    is_applicable,
    list_coupons,
    update_coupon,
)
from app.services.billing.errors import (
    CouponNotFoundByIdError,
    CouponNotFoundError,
    DuplicateCouponError,
    InvalidCouponError,
)


def _coupon(**overrides):
    data = dict(
        id="c-1",
        code="summer20",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("20"),
        valid_from=date(2024, 6, 1),
        valid_until=date(2024, 6, 30),
        is_active=True,
        applicable_software_ids=["sw-crm"],
    )
    data.update(overrides)
    return DiscountCoupon(**data)


def test_no_coupon_returns_amount_unchanged():
    assert evaluate(None, "sw-crm", 150000, date(2024, 6, 15)) == 150000


def test_percentage_discount():
    assert evaluate(_coupon(), "sw-crm", 150000, date(2024, 6, 15)) == 120000


def test_percentage_discount_rounds_half_up():
    coupon = _coupon(discount_value=Decimal("12.5"))
    # 333 * 0.875 = 291.375
    assert evaluate(coupon, "sw-crm", 333, date(2024, 6, 15)) == 291
    # 1 * 0.5 = 0.5
    assert evaluate(_coupon(discount_value=Decimal("50")), "sw-crm", 1, date(2024, 6, 15)) == 1


def test_fixed_amount_discount_never_goes_negative():
    coupon = _coupon(discount_type=DiscountType.FIXED_AMOUNT, discount_value=Decimal("50000"),
                     applicable_software_ids=[])
    assert evaluate(coupon, "sw-project", 150000, date(2024, 6, 15)) == 100000
    assert evaluate(coupon, "sw-project", 20000, date(2024, 6, 15)) == 0


def test_last_moment_of_valid_until_still_applies():
    coupon = _coupon()
    assert evaluate(coupon, "sw-crm", 100000, datetime(2024, 6, 30, 23, 59, 59)) == 80000
    assert evaluate(coupon, "sw-crm", 100000, datetime(2024, 7, 1, 0, 0, 0)) == 100000


def test_valid_from_is_inclusive():
    assert is_applicable(_coupon(), "sw-crm", date(2024, 6, 1))
    assert not is_applicable(_coupon(), "sw-crm", date(2024, 5, 31))


def test_inactive_coupon_does_not_apply():
    assert evaluate(_coupon(is_active=False), "sw-crm", 100000, date(2024, 6, 15)) == 100000


def test_coupon_restricted_to_other_software_does_not_apply():
    assert evaluate(_coupon(), "sw-project", 100000, date(2024, 6, 15)) == 100000


def test_empty_software_list_applies_to_everything():
    assert is_applicable(_coupon(applicable_software_ids=[]), "sw-anything", date(2024, 6, 15))


def test_lookup_is_case_insensitive(store):
    assert find_coupon(store, "summer20").id == "coupon-1"
    assert find_coupon(store, " Summer20 ").id == "coupon-1"
    assert evaluate_code(store, "newuser500", "sw-project", 180000, date(2024, 3, 1)) == 130000


def test_unknown_code_raises(store):
    with pytest.raises(CouponNotFoundError):
        find_coupon(store, "NOPE")


def test_create_coupon(store):
    coupon = create_coupon(
        store, " Diwali15 ", "PERCENTAGE", "15", date(2024, 10, 20), date(2024, 11, 5),
        applicable_software_ids=["sw-project"],
    )

    assert coupon.id.startswith("coupon-")
    assert coupon.code == "Diwali15"
    assert coupon.discount_value == Decimal("15")
    assert find_coupon(store, "DIWALI15").id == coupon.id
    assert evaluate_code(store, "diwali15", "sw-project", 180000, date(2024, 10, 25)) == 153000


def test_coupon_codes_are_unique_ignoring_case(store):
    with pytest.raises(DuplicateCouponError):
        create_coupon(store, "summer20", "FIXED_AMOUNT", 100, date(2024, 1, 1), date(2024, 12, 31))

    assert len(list_coupons(store)) == 2


@pytest.mark.parametrize("discount_type, value, valid_from, valid_until", [
    ("PERCENTAGE", 0, date(2024, 1, 1), date(2024, 1, 31)),
    ("PERCENTAGE", 120, date(2024, 1, 1), date(2024, 1, 31)),
    ("FIXED_AMOUNT", 500, date(2024, 2, 1), date(2024, 1, 31)),
    ("BOGO", 10, date(2024, 1, 1), date(2024, 1, 31)),
])
def test_invalid_coupons_are_rejected(store, discount_type, value, valid_from, valid_until):
    with pytest.raises(InvalidCouponError):
        create_coupon(store, "BROKEN", discount_type, value, valid_from, valid_until)
    assert store.coupons.get_by_code("BROKEN") is None


def test_deactivated_coupon_stops_applying(store):
    update_coupon(store, "coupon-1", is_active=False)

    assert not find_coupon(store, "SUMMER20").is_active
    assert evaluate_code(store, "SUMMER20", "sw-crm", 100000, date(2024, 7, 1)) == 100000

    update_coupon(store, "coupon-1", is_active=True)
    assert evaluate_code(store, "SUMMER20", "sw-crm", 100000, date(2024, 7, 1)) == 80000


def test_update_window_and_software_list(store):
    updated = update_coupon(
        store, "coupon-1",
        valid_until=date(2024, 9, 30),
        applicable_software_ids=["sw-crm", "sw-project"],
    )

    assert updated.valid_from == date(2024, 6, 1)
    assert updated.valid_until == date(2024, 9, 30)
    assert evaluate_code(store, "SUMMER20", "sw-project", 100000, date(2024, 9, 15)) == 80000


def test_update_cannot_take_another_code(store):
    with pytest.raises(DuplicateCouponError):
        update_coupon(store, "coupon-1", code="NewUser500")
    assert store.coupons.get("coupon-1").code == "SUMMER20"


def test_update_rejects_bad_edits(store):
    with pytest.raises(CouponNotFoundByIdError):
        update_coupon(store, "coupon-missing", is_active=False)
    with pytest.raises(InvalidCouponError):
        update_coupon(store, "coupon-1", id="coupon-9")
    with pytest.raises(InvalidCouponError):
        update_coupon(store, "coupon-1", valid_from=date(2024, 12, 1))
    assert store.coupons.get("coupon-1").valid_from == date(2024, 6, 1)
