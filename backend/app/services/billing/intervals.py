"""
Billing interval arithmetic.

Months and years are calendar-aware. When the day of month does not exist in the
target month the result is clamped to that month's last day (Jan 31 + 1 month is
Feb 29 in a leap year, Feb 28 otherwise). Clamping is not undone by later steps:
advancing Feb 29 by another month gives Mar 29.
"""
from datetime import date

from dateutil.relativedelta import relativedelta

from app.services.billing.billing_models import SubscriptionPlan
from app.services.billing.errors import InvalidPlanError

PLAN_INTERVALS = {
    SubscriptionPlan.MONTHLY: relativedelta(months=1),
    SubscriptionPlan.QUARTERLY: relativedelta(months=3),
    SubscriptionPlan.YEARLY: relativedelta(years=1),
}


def parse_plan(plan) -> SubscriptionPlan:
    """Coerce a plan name or enum into SubscriptionPlan, raising InvalidPlanError."""
    try:
        return SubscriptionPlan(plan)
    except ValueError:
        raise InvalidPlanError(plan) from None


def advance(day: date, plan) -> date:
    """Return the date one billing interval of `plan` after `day`."""
    return day + PLAN_INTERVALS[parse_plan(plan)]


def months_between(start: date, end: date) -> int:
    """Whole calendar months elapsed from start to end."""
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months
