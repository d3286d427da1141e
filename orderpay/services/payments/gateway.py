"""Simulated payment gateway and id generation.

No real provider is contacted. Outcomes can be forced per order for manual
fault injection: customer emails starting with `force-decline` are always
declined. Otherwise a configurable share of charges is declined at random.
"""

import random
import secrets
from collections.abc import Iterable
from uuid import uuid4

from orderpay.common.logging import logger
from orderpay.domain.order import Order
from orderpay.services.payments.ports import ChargeResult, IdGenerator, PaymentGateway

DEFAULT_CURRENCIES = ("USD", "EUR", "GBP", "CAD", "AUD")
DECLINE_REASON = "Card declined"


class SimulatedPaymentGateway(PaymentGateway):
    """Stripe-like gateway that settles charges locally."""

    def __init__(
        self,
        name: str = "stripe",
        currencies: Iterable[str] = DEFAULT_CURRENCIES,
        decline_rate: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= decline_rate <= 1.0:
            raise ValueError("decline_rate must be between 0 and 1")
        self._name = name
        self._currencies = frozenset(code.upper() for code in currencies)
        self.decline_rate = decline_rate
        self.rng = rng or random.Random()

    @property
    def name(self) -> str:
        return self._name

    def supports_currency(self, currency: str) -> bool:
        return currency.upper() in self._currencies

    def charge(self, order: Order) -> ChargeResult:
        transaction_id = "ch_" + secrets.token_hex(12)
        force_decline = order.customer_email.lower().startswith("force-decline")
        if force_decline or (self.decline_rate and self.rng.random() < self.decline_rate):
            logger.warning(
                "gateway declined order_id=%s transaction_id=%s forced=%s",
                order.id,
                transaction_id,
                force_decline,
            )
            return ChargeResult.failure(transaction_id, DECLINE_REASON)
        return ChargeResult.success(transaction_id)


class UuidIdGenerator(IdGenerator):
    def generate(self) -> str:
        return str(uuid4())
