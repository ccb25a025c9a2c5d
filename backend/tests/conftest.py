import random
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.dependencies import get_gateway
from app.main import app
from app.models import Customer as CustomerRow
from app.models import DiscountCoupon as DiscountCouponRow
from app.models import Software as SoftwareRow
from app.models import SupportTicket as SupportTicketRow
from app.models import User as UserRow
from app.repositories.memory import InMemoryBillingStore
from app.repositories.sql import SqlBillingStore
from app.services.billing.billing_models import (
    Customer,
    DiscountCoupon,
    DiscountType,
    ProjectStatus,
    Software,
    Subscription,
    SubscriptionPlan,
)
from app.services.billing.payment_gateway import SimulatedPaymentGateway

# Prices in paise
CRM_MONTHLY = 100000
CRM_QUARTERLY = 270000
CRM_YEARLY = 1000000
CRM_SETUP_FEE = 50000


@pytest.fixture
def approving_gateway():
    return SimulatedPaymentGateway(decline_rate=0.0, rng=random.Random(7))


@pytest.fixture
def declining_gateway():
    return SimulatedPaymentGateway(decline_rate=1.0, rng=random.Random(7))


@pytest.fixture
def store():
    """In-memory store with a small catalog, two customers and one admin."""
    store = InMemoryBillingStore()
    store.add_software(Software(
        id="sw-crm",
        name="NexusCRM",
        price_monthly=CRM_MONTHLY,
        price_quarterly=CRM_QUARTERLY,
        price_yearly=CRM_YEARLY,
        setup_fee=CRM_SETUP_FEE,
    ))
    store.add_software(Software(
        id="sw-project",
        name="TaskMaster",
        price_monthly=180000,
        price_quarterly=500000,
        price_yearly=1800000,
        setup_fee=300000,
    ))
    store.add_customer(Customer(
        id="cust-referred",
        name="Ravi Kumar",
        email="ravi@customer.com",
        referred_by_user_id="user-sales-1",
    ))
    store.add_customer(Customer(id="cust-direct", name="Priya Sharma", email="priya@customer.com"))
    store.add_admin_user("user-admin")
    store.coupons.add(DiscountCoupon(
        id="coupon-1",
        code="SUMMER20",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("20"),
        valid_from=date(2024, 6, 1),
        valid_until=date(2024, 8, 31),
        applicable_software_ids=["sw-crm"],
    ))
    store.coupons.add(DiscountCoupon(
        id="coupon-2",
        code="NEWUSER500",
        discount_type=DiscountType.FIXED_AMOUNT,
        discount_value=Decimal("50000"),
        valid_from=date(2024, 1, 1),
        valid_until=date(2024, 12, 31),
    ))
    return store


def _make_subscription(
    sub_id="sub-1",
    customer_id="cust-referred",
    plan=SubscriptionPlan.MONTHLY,
    start=date(2023, 12, 1),
    next_billing=date(2024, 1, 1),
    renewal_amount=CRM_MONTHLY,
):
    return Subscription(
        id=sub_id,
        customer_id=customer_id,
        software_id="sw-crm",
        plan=plan,
        start_date=start,
        next_renewal_date=next_billing,
        next_billing_date=next_billing,
        renewal_amount=renewal_amount,
        status=ProjectStatus.PENDING,
        onboarding_date=start,
        training_date=start,
    )


@pytest.fixture
def make_subscription():
    """Factory for subscriptions with explicit billing dates."""
    return _make_subscription


@pytest.fixture
def db_session():
    """SQLite in-memory session with the schema created and reference rows seeded."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()

    db.add_all([
        UserRow(id="user-admin", name="Admin User", email="admin@saas.com", role="ADMIN", is_active=True),
        UserRow(id="user-sales-1", name="Sales Team A", email="sales1@saas.com", role="USER",
                referral_code="sales1", is_active=True),
        SoftwareRow(
            id="sw-crm",
            name="NexusCRM",
            price_monthly=CRM_MONTHLY,
            price_quarterly=CRM_QUARTERLY,
            price_yearly=CRM_YEARLY,
            setup_fee=CRM_SETUP_FEE,
        ),
        CustomerRow(id="cust-referred", name="Ravi Kumar", email="ravi@customer.com",
                    signup_date=date(2024, 1, 1), referred_by_user_id="user-sales-1"),
        CustomerRow(id="cust-direct", name="Priya Sharma", email="priya@customer.com",
                    signup_date=date(2024, 1, 1)),
        DiscountCouponRow(
            id="coupon-2",
            code="newuser500",
            discount_type="FIXED_AMOUNT",
            discount_value=Decimal("50000"),
            valid_from=date(2024, 1, 1),
            valid_until=date(2024, 12, 31),
            is_active=True,
            applicable_software_ids=[],
        ),
        SupportTicketRow(
            id="ticket-1",
            creator_id="user-admin",
            subject="Cannot login to NexusCRM",
            status="OPEN",
            priority="HIGH",
            assigned_to_id="user-sales-1",
            due_date=date(2024, 7, 10),
        ),
    ])
    db.commit()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def sql_store(db_session):
    return SqlBillingStore(db_session)


@pytest.fixture
def client(db_session, approving_gateway):
    """API client bound to the seeded SQLite session."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: approving_gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
