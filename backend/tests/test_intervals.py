from datetime import date, timedelta

import pytest

from app.services.billing import SubscriptionPlan, advance, parse_plan
from app.services.billing.errors import InvalidPlanError
from app.services.billing.intervals import months_between


@pytest.mark.parametrize("plan, start, expected", [
    (SubscriptionPlan.MONTHLY, date(2024, 1, 10), date(2024, 2, 10)),
    (SubscriptionPlan.QUARTERLY, date(2024, 1, 10), date(2024, 4, 10)),
    (SubscriptionPlan.YEARLY, date(2024, 1, 10), date(2025, 1, 10)),
    (SubscriptionPlan.MONTHLY, date(2024, 12, 15), date(2025, 1, 15)),
])
def test_advance_by_plan(plan, start, expected):
    assert advance(start, plan) == expected


def test_month_end_is_clamped():
    assert advance(date(2024, 1, 31), SubscriptionPlan.MONTHLY) == date(2024, 2, 29)
    assert advance(date(2023, 1, 31), SubscriptionPlan.MONTHLY) == date(2023, 2, 28)
    assert advance(date(2024, 11, 30), SubscriptionPlan.QUARTERLY) == date(2025, 2, 28)
    assert advance(date(2024, 2, 29), SubscriptionPlan.YEARLY) == date(2025, 2, 28)


def test_clamping_is_not_undone_later():
    clamped = advance(date(2024, 1, 31), SubscriptionPlan.MONTHLY)
    assert advance(clamped, SubscriptionPlan.MONTHLY) == date(2024, 3, 29)


def test_plan_names_are_accepted():
    assert advance(date(2024, 3, 1), "QUARTERLY") == date(2024, 6, 1)
    assert parse_plan("YEARLY") is SubscriptionPlan.YEARLY


def test_unknown_plan_is_rejected():
    with pytest.raises(InvalidPlanError):
        advance(date(2024, 3, 1), "WEEKLY")


def test_months_between():
    assert months_between(date(2024, 1, 1), date(2024, 3, 15)) == 2
    assert months_between(date(2023, 8, 15), date(2024, 8, 15)) == 12


def _three_monthly(start):
    return advance(advance(advance(start, SubscriptionPlan.MONTHLY), SubscriptionPlan.MONTHLY), SubscriptionPlan.MONTHLY)


@pytest.mark.parametrize("start", [
    date(2024, 1, 15),
    date(2024, 1, 28),
    date(2024, 2, 29),
    date(2024, 3, 31),
    date(2023, 8, 31),
    date(2023, 11, 30),
])
def test_three_monthly_steps_equal_one_quarter(start):
    assert months_between(start, _three_monthly(start)) == months_between(start, advance(start, SubscriptionPlan.QUARTERLY))
    assert months_between(start, advance(start, SubscriptionPlan.QUARTERLY)) == 3


@pytest.mark.parametrize("start, monthly_end, quarterly_end", [
    (date(2024, 1, 31), date(2024, 4, 29), date(2024, 4, 30)),
    (date(2023, 12, 31), date(2024, 3, 29), date(2024, 3, 31)),
    (date(2023, 1, 30), date(2023, 4, 28), date(2023, 4, 30)),
    (date(2024, 5, 31), date(2024, 8, 30), date(2024, 8, 31)),
])
def test_clamped_monthly_steps_fall_short_of_a_quarter(start, monthly_end, quarterly_end):
    # A clamp in an intermediate short month carries forward, so the monthly chain
    # lands a few days early and one whole month short of the quarter.
    assert _three_monthly(start) == monthly_end
    assert advance(start, SubscriptionPlan.QUARTERLY) == quarterly_end
    assert months_between(start, monthly_end) == 2
    assert months_between(start, quarterly_end) == 3


def test_three_monthly_steps_never_pass_the_quarter():
    start = date(2023, 1, 1)
    while start < date(2025, 1, 1):
        monthly_end = _three_monthly(start)
        quarterly_end = advance(start, SubscriptionPlan.QUARTERLY)
        assert monthly_end <= quarterly_end
        if start.day <= 28:
            assert monthly_end == quarterly_end
        start += timedelta(days=1)
