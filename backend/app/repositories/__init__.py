"""
Record stores for the billing engine.
"""
from app.repositories.base import BillingStore
from app.repositories.memory import InMemoryBillingStore
from app.repositories.sql import SqlBillingStore

__all__ = [
    "BillingStore",
    "InMemoryBillingStore",
    "SqlBillingStore",
]
