"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- SimulatedGateway for the running storefront (configured delay and success rate)
- FakeGateway for tests
"""

from storefront.payments.gateway.port import PaymentGateway
from storefront.payments.gateway.simulated_adapter import SimulatedGateway

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to SimulatedGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = SimulatedGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
