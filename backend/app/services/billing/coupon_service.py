"""
Coupon evaluation and catalog administration.

A coupon is a filter, not a validator: if it does not apply, the amount comes
back unchanged. Only one coupon is evaluated per call; choosing between several
entered coupons is up to the caller.
"""
import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Union

from app.services.billing.billing_models import DiscountCoupon, DiscountType
from app.services.billing.errors import (
    CouponNotFoundByIdError,
    CouponNotFoundError,
    InvalidCouponError,
)

logger = logging.getLogger(__name__)


def _as_date(on_date: Union[date, datetime]) -> date:
    # validity bounds are whole days, so any time on valid_until still counts
    if isinstance(on_date, datetime):
        return on_date.date()
    return on_date


def is_applicable(
    coupon: DiscountCoupon,
    software_id: str,
    on_date: Union[date, datetime]
) -> bool:
    """Check whether a coupon applies to a purchase of software_id on on_date."""
    if not coupon.is_active:
        return False
    day = _as_date(on_date)
    if not (coupon.valid_from <= day <= coupon.valid_until):
        return False
    if coupon.applicable_software_ids and software_id not in coupon.applicable_software_ids:
        return False
    return True


def evaluate(
    coupon: Optional[DiscountCoupon],
    software_id: str,
    amount: int,
    on_date: Union[date, datetime]
) -> int:
    """
    Apply a coupon to an amount.

    Args:
        coupon: Coupon to apply (None means no coupon)
        software_id: Software being purchased
        amount: Amount in minor units
        on_date: Evaluation date (datetimes are compared by calendar day)

    Returns:
        Discounted amount in minor units, never below 0. Percentage results are
        rounded half-up to the nearest minor unit.
    """
    if coupon is None or not is_applicable(coupon, software_id, on_date):
        return amount

    value = Decimal(coupon.discount_value)
    if coupon.discount_type == DiscountType.PERCENTAGE:
        discounted = Decimal(amount) * (Decimal(100) - value) / Decimal(100)
        discounted = int(discounted.to_integral_value(rounding=ROUND_HALF_UP))
    elif coupon.discount_type == DiscountType.FIXED_AMOUNT:
        discounted = amount - int(value.to_integral_value(rounding=ROUND_HALF_UP))
    else:
        raise ValueError(f"Unknown discount type: {coupon.discount_type}")

    return max(0, discounted)


def find_coupon(store, code: str) -> DiscountCoupon:
    """Look up a coupon by code (case-insensitive), raising CouponNotFoundError."""
    coupon = store.coupons.get_by_code(code)
    if not coupon:
        raise CouponNotFoundError(code)
    return coupon


def evaluate_code(
    store,
    code: str,
    software_id: str,
    amount: int,
    on_date: Union[date, datetime]
) -> int:
    """Evaluate the coupon with the given code against an amount."""
    return evaluate(find_coupon(store, code), software_id, amount, on_date)


# Catalog administration. Coupons are created and updated, never deleted;
# switching is_active off retires one.

_EDITABLE_FIELDS = (
    "code",
    "discount_type",
    "discount_value",
    "valid_from",
    "valid_until",
    "is_active",
    "applicable_software_ids",
)


def _discount_type(value) -> DiscountType:
    try:
        return DiscountType(value)
    except ValueError:
        raise InvalidCouponError(f"Unknown discount type: {value!r}") from None


def _validate(coupon: DiscountCoupon) -> DiscountCoupon:
    code = (coupon.code or "").strip()
    if not code:
        raise InvalidCouponError("Coupon code is required")
    if coupon.discount_value <= 0:
        raise InvalidCouponError("Discount value must be positive")
    if coupon.discount_type == DiscountType.PERCENTAGE and coupon.discount_value > 100:
        raise InvalidCouponError("Percentage discount cannot exceed 100")
    if coupon.valid_from > coupon.valid_until:
        raise InvalidCouponError("valid_from must not be after valid_until")
    return replace(coupon, code=code, applicable_software_ids=list(coupon.applicable_software_ids or []))


def list_coupons(store) -> List[DiscountCoupon]:
    return store.coupons.list_all()


def create_coupon(
    store,
    code: str,
    discount_type,
    discount_value,
    valid_from: date,
    valid_until: date,
    applicable_software_ids: Optional[List[str]] = None,
    is_active: bool = True,
) -> DiscountCoupon:
    """
    Add a coupon to the catalog.

    Raises:
        InvalidCouponError: Empty code, non-positive value, percentage over 100 or an inverted window
        DuplicateCouponError: The code is taken (codes are compared ignoring case)
    """
    coupon = _validate(DiscountCoupon(
        id=f"coupon-{uuid.uuid4().hex[:12]}",
        code=code,
        discount_type=_discount_type(discount_type),
        discount_value=Decimal(str(discount_value)),
        valid_from=valid_from,
        valid_until=valid_until,
        is_active=is_active,
        applicable_software_ids=applicable_software_ids or [],
    ))
    with store.transaction():
        created = store.coupons.add(coupon)

    logger.info(f"Created coupon {created.id} ({created.code})")
    return created


def update_coupon(store, coupon_id: str, **changes) -> DiscountCoupon:
    """
    Edit a coupon in place.

    Accepts any of the editable fields (code, discount_type, discount_value,
    valid_from, valid_until, is_active, applicable_software_ids); fields left
    out keep their stored value.

    Raises:
        CouponNotFoundByIdError
        InvalidCouponError: Unknown field, or the edited coupon fails validation
        DuplicateCouponError: The new code is taken by another coupon
    """
    unknown = set(changes) - set(_EDITABLE_FIELDS)
    if unknown:
        raise InvalidCouponError(f"Cannot edit coupon field(s): {', '.join(sorted(unknown))}")

    with store.transaction():
        coupon = store.coupons.get(coupon_id)
        if not coupon:
            raise CouponNotFoundByIdError(coupon_id)
        if "discount_type" in changes:
            changes["discount_type"] = _discount_type(changes["discount_type"])
        if "discount_value" in changes:
            changes["discount_value"] = Decimal(str(changes["discount_value"]))
        updated = store.coupons.update(_validate(replace(coupon, **changes)))

    logger.info(f"Updated coupon {coupon_id}: {', '.join(sorted(changes))}")
    return updated
