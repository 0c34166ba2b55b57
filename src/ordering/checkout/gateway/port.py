"""Payment gateway port (abstract interface).

Checkout charges through this contract, so the fake adapter used in
development and tests can be swapped for a real gateway without touching
the ordering code. Amounts are integer paise.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ChargeResult:
    """Result of a payment charge attempt."""

    success: bool
    gateway_transaction_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def create_charge(
        self,
        amount_paise: int,
        currency: str,
        payment_method: str,
        idempotency_key: str,
    ) -> ChargeResult:
        """Charge the shopper once per idempotency key."""
        ...
