"""
Seed demo billing data.

This script seeds:
- Users (admin, two sales users)
- Software price catalog (NexusCRM, TaskMaster, Insightify)
- Customers, two of them referred by a sales user
- Subscriptions with their first paid invoices
- Discount coupons (SUMMER20, NEWUSER500, EXPIRED10)
- A support ticket with a due date

Prices are in rupees below and stored in paise. Existing rows are left alone,
so the script can be re-run safely.

Usage: python scripts/seed_billing_data.py
"""
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import CURRENCY_MINOR_UNITS
from app.core.database import SessionLocal, init_db
from app.services.billing.commission_service import commission_amount
from app.models import (
    Commission,
    Customer,
    DiscountCoupon,
    Invoice,
    Software,
    Subscription,
    SupportTicket,
    User,
)


def rupees(amount: int) -> int:
    return amount * CURRENCY_MINOR_UNITS


USERS = [
    {"id": "user-admin", "name": "Admin User", "email": "admin@saas.com", "role": "ADMIN"},
    {"id": "user-sales-1", "name": "Sales Team A", "email": "sales1@saas.com", "role": "USER", "referral_code": "sales1"},
    {"id": "user-sales-2", "name": "Sales Team B", "email": "sales2@saas.com", "role": "USER", "referral_code": "sales2"},
    {"id": "user-customer-1", "name": "Ravi Kumar", "email": "ravi@customer.com", "role": "CUSTOMER"},
]

SOFTWARE = [
    {"id": "sw-crm", "name": "NexusCRM", "category": "CRM",
     "prices": (2500, 7000, 25000), "setup_fee": 5000},
    {"id": "sw-project", "name": "TaskMaster", "category": "Project Management",
     "prices": (1800, 5000, 18000), "setup_fee": 3000},
    {"id": "sw-analytics", "name": "Insightify", "category": "Data Analytics",
     "prices": (4000, 11000, 40000), "setup_fee": 8000},
]

CUSTOMERS = [
    {"id": "cust-1", "name": "Ravi Kumar", "email": "ravi@customer.com", "company": "Innovate Solutions",
     "signup_date": date(2023, 8, 15), "assigned_to_user_id": "user-sales-1", "referred_by_user_id": "user-sales-1"},
    {"id": "cust-2", "name": "Priya Sharma", "email": "priya@customer.com", "company": "Creative Minds Inc.",
     "signup_date": date(2023, 9, 1), "assigned_to_user_id": "user-sales-2", "referred_by_user_id": None},
    {"id": "cust-3", "name": "Amit Singh", "email": "amit@customer.com", "company": "Tech Giants Ltd.",
     "signup_date": date(2023, 10, 20), "assigned_to_user_id": "user-sales-1", "referred_by_user_id": "user-sales-1"},
]

# (id, customer, software, plan, start, next renewal, status)
SUBSCRIPTIONS = [
    ("sub-1", "cust-1", "sw-crm", "YEARLY", date(2023, 8, 15), date(2024, 8, 15), "PENDING"),
    ("sub-2", "cust-1", "sw-project", "MONTHLY", date(2023, 11, 1), date(2024, 7, 1), "TRAINING"),
    ("sub-3", "cust-2", "sw-project", "QUARTERLY", date(2023, 9, 1), date(2024, 6, 15), "COMPLETE"),
    ("sub-4", "cust-3", "sw-crm", "MONTHLY", date(2023, 10, 20), date(2024, 7, 20), "REVIEW"),
]

COUPONS = [
    {"id": "coupon-1", "code": "summer20", "discount_type": "PERCENTAGE", "discount_value": Decimal("20"),
     "valid_from": date(2024, 6, 1), "valid_until": date(2024, 8, 31), "is_active": True,
     "applicable_software_ids": ["sw-crm"]},
    {"id": "coupon-2", "code": "newuser500", "discount_type": "FIXED_AMOUNT", "discount_value": Decimal(rupees(500)),
     "valid_from": date(2024, 1, 1), "valid_until": date(2024, 12, 31), "is_active": True,
     "applicable_software_ids": []},
    {"id": "coupon-3", "code": "expired10", "discount_type": "PERCENTAGE", "discount_value": Decimal("10"),
     "valid_from": date(2023, 1, 1), "valid_until": date(2023, 12, 31), "is_active": False,
     "applicable_software_ids": []},
]


def seed_users(db):
    for data in USERS:
        if db.get(User, data["id"]):
            continue
        db.add(User(is_active=True, **data))
        print(f"✅ Added user {data['id']}")


def seed_software(db):
    for data in SOFTWARE:
        if db.get(Software, data["id"]):
            continue
        monthly, quarterly, yearly = data["prices"]
        db.add(Software(
            id=data["id"],
            name=data["name"],
            category=data["category"],
            price_monthly=rupees(monthly),
            price_quarterly=rupees(quarterly),
            price_yearly=rupees(yearly),
            setup_fee=rupees(data["setup_fee"]),
        ))
        print(f"✅ Added software {data['id']}")


def seed_customers(db):
    for data in CUSTOMERS:
        if db.get(Customer, data["id"]):
            continue
        db.add(Customer(**data))
        print(f"✅ Added customer {data['id']}")


def seed_subscriptions(db):
    prices = {sw["id"]: sw for sw in SOFTWARE}
    plan_index = {"MONTHLY": 0, "QUARTERLY": 1, "YEARLY": 2}

    for sub_id, customer_id, software_id, plan, start, next_renewal, status in SUBSCRIPTIONS:
        if db.get(Subscription, sub_id):
            continue
        renewal_amount = rupees(prices[software_id]["prices"][plan_index[plan]])
        db.add(Subscription(
            id=sub_id,
            customer_id=customer_id,
            software_id=software_id,
            plan=plan,
            start_date=start,
            next_renewal_date=next_renewal,
            next_billing_date=next_renewal,
            renewal_amount=renewal_amount,
            status=status,
            onboarding_date=start,
            training_date=start,
            version=1,
        ))
        # First invoice: plan price + setup fee, paid at checkout
        invoice_id = f"inv-{sub_id}-first"
        amount = renewal_amount + rupees(prices[software_id]["setup_fee"])
        db.add(Invoice(
            id=invoice_id,
            subscription_id=sub_id,
            customer_id=customer_id,
            amount=amount,
            issue_date=start,
            payment_date=start,
            period_start=start,
        ))
        referrer = next(c["referred_by_user_id"] for c in CUSTOMERS if c["id"] == customer_id)
        if referrer:
            db.add(Commission(
                id=f"com-{sub_id}-first",
                user_id=referrer,
                customer_id=customer_id,
                invoice_id=invoice_id,
                amount=commission_amount(amount),
                date=start,
            ))
        print(f"✅ Added subscription {sub_id} ({software_id}, {plan})")


def seed_coupons(db):
    for data in COUPONS:
        if db.get(DiscountCoupon, data["id"]):
            continue
        db.add(DiscountCoupon(**data))
        print(f"✅ Added coupon {data['code'].upper()}")


def seed_tickets(db):
    if db.get(SupportTicket, "ticket-1"):
        return
    db.add(SupportTicket(
        id="ticket-1",
        creator_id="user-customer-1",
        related_customer_id="cust-1",
        subject="Cannot login to NexusCRM",
        description="The password reset link is not working.",
        status="OPEN",
        priority="HIGH",
        assigned_to_id="user-sales-1",
        due_date=date.today() + timedelta(days=1),
    ))
    print("✅ Added ticket ticket-1")


def main():
    init_db()
    db = SessionLocal()
    try:
        seed_users(db)
        seed_software(db)
        seed_customers(db)
        db.flush()
        seed_subscriptions(db)
        seed_coupons(db)
        seed_tickets(db)
        db.commit()
        print("✅ Billing data seeded")
    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding billing data: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == '__main__':
    main()
