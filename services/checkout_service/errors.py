import enum
from typing import Any


class CheckoutFailureKind(str, enum.Enum):
    INVALID_PAYLOAD = "invalid_payload"
    OUT_OF_STOCK = "out_of_stock"
    PAYMENT_FAILED = "payment_failed"
    GATEWAY_TIMEOUT = "gateway_timeout"
    INTERNAL = "internal"


class CheckoutError(Exception):
    """Expected checkout failure; carries the client-facing message."""

    kind: CheckoutFailureKind = CheckoutFailureKind.INTERNAL
    message: str = "Internal server error"

    def __init__(self, details: Any = None):
        super().__init__(self.message)
        self.details = details


class InvalidPayload(CheckoutError):
    kind = CheckoutFailureKind.INVALID_PAYLOAD
    message = "Invalid payload"


class StockUnavailable(CheckoutError):
    kind = CheckoutFailureKind.OUT_OF_STOCK
    message = "Some items are out of stock"


class GatewayRejected(CheckoutError):
    """The processor declined or errored; ``details`` is its payload, untouched."""

    kind = CheckoutFailureKind.PAYMENT_FAILED
    message = "Payment failed"


class GatewayTimeout(CheckoutError):
    kind = CheckoutFailureKind.GATEWAY_TIMEOUT
    message = "Payment gateway timeout"
