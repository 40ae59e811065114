import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional
from uuid import uuid4

log = logging.getLogger("bakery.payment")


class PaymentDeclined(Exception):
    """Raised by a gateway that refuses the authorization."""
    pass


@dataclass
class PaymentResult:
    success: bool
    transaction_id: Optional[str] = None
    message: Optional[str] = None


class PaymentGateway:
    """
    Port for the payment step of checkout. Real gateways subclass this and
    implement ``authorize``; the order transaction only depends on this shape.
    """

    def authorize(self, amount_cents: int, payment_details: Optional[Dict] = None) -> PaymentResult:
        raise NotImplementedError

    def health_check(self) -> bool:
        return True


class MockPaymentAdapter(PaymentGateway):
    """
    Stand-in gateway: every authorization succeeds with a fresh transaction id.
    """

    def __init__(self, delay_ms: int = 200):
        # Convert delay from milliseconds to seconds for time.sleep
        self.delay_seconds = delay_ms / 1000.0

    def authorize(self, amount_cents: int, payment_details: Optional[Dict] = None) -> PaymentResult:
        """
        Simulates a payment authorization.

        Args:
            amount_cents: The amount to authorize.
            payment_details: Card/wallet details from the checkout form. Ignored.

        Returns:
            A successful PaymentResult carrying a ``txn_`` transaction id.
        """
        # Simulate network latency / gateway processing
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        txn_id = f"txn_{uuid4().hex[:16]}"
        log.info("mock payment authorized amount_cents=%s txn=%s", amount_cents, txn_id)
        return PaymentResult(success=True, transaction_id=txn_id)
