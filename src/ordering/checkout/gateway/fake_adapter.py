"""Configurable fake payment gateway for development and testing.

No external calls are made. The gateway succeeds by default and can be told
to decline, which is how checkout's failure path is exercised.
"""

from uuid import uuid4

from ordering.checkout.gateway.port import ChargeResult, PaymentGateway


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []
        self._charges: dict[str, ChargeResult] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_charge(
        self,
        amount_paise: int,
        currency: str,
        payment_method: str,
        idempotency_key: str,
    ) -> ChargeResult:
        self.calls.append(
            {
                "method": "create_charge",
                "amount_paise": amount_paise,
                "currency": currency,
                "payment_method": payment_method,
                "idempotency_key": idempotency_key,
            }
        )

        # A repeated key returns the original successful charge
        if idempotency_key in self._charges:
            return self._charges[idempotency_key]

        if not self.should_succeed:
            return ChargeResult(success=False, gateway_status="failed", failure_reason=self.failure_reason)

        result = ChargeResult(
            success=True,
            gateway_transaction_id=f"fake_txn_{uuid4().hex[:12]}",
            gateway_status="succeeded",
        )
        self._charges[idempotency_key] = result
        return result
