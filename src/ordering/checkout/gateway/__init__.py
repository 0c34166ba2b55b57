"""Payment gateway factory.

get_gateway() / set_gateway() swap implementations; FakeGateway is the only
adapter shipped and the default.
"""

from ordering.checkout.gateway.fake_adapter import FakeGateway
from ordering.checkout.gateway.port import PaymentGateway
from ordering.settings import get_settings

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        name = get_settings().payment_gateway
        if name != "fake":
            raise ValueError(f"Unknown payment gateway {name!r}")
        _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
