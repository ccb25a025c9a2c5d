"""
Payment gateway abstraction.
"""
import enum
import logging
import random
from abc import ABC, abstractmethod
from typing import Optional

from app.core.config import PAYMENT_DECLINE_RATE

logger = logging.getLogger(__name__)


class ChargeResult(str, enum.Enum):
    APPROVED = "approved"
    DECLINED = "declined"


class PaymentGateway(ABC):
    """Abstract base class for payment gateways."""

    @abstractmethod
    def charge(self, amount: int, reference: str) -> ChargeResult:
        """
        Charge an amount.

        Args:
            amount: Amount in minor units
            reference: Caller reference (subscription ID) for gateway logs

        Returns:
            ChargeResult.APPROVED or ChargeResult.DECLINED
        """
        pass


class SimulatedPaymentGateway(PaymentGateway):
    """Gateway double that declines a fixed fraction of charges at random."""

    def __init__(self, decline_rate: float = PAYMENT_DECLINE_RATE, rng: Optional[random.Random] = None):
        if not 0.0 <= decline_rate <= 1.0:
            raise ValueError("decline_rate must be between 0 and 1")
        self.decline_rate = decline_rate
        self.rng = rng or random.Random()

    def charge(self, amount: int, reference: str) -> ChargeResult:
        if self.rng.random() < self.decline_rate:
            logger.info(f"Simulating failed payment of {amount} for {reference}")
            return ChargeResult.DECLINED
        logger.info(f"Simulated payment of {amount} approved for {reference}")
        return ChargeResult.APPROVED


_gateway: Optional[PaymentGateway] = None


def get_payment_gateway() -> PaymentGateway:
    """Get or create the configured gateway (FastAPI dependency)."""
    global _gateway
    if _gateway is None:
        _gateway = SimulatedPaymentGateway()
    return _gateway
