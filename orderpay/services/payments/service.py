"""Payment orchestration.

Validates an order, charges it through the gateway, records every attempt as a
Payment, and advances the order to PAID only after a completed charge.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from orderpay.common.logging import logger, order_id_ctx
from orderpay.common.metrics import (
    payment_failure_total,
    payment_latency_seconds,
    payment_rejections_total,
    payment_requests_total,
    payment_success_total,
)
from orderpay.domain.errors import PaymentFailure, PaymentRejectedError
from orderpay.domain.order import Order
from orderpay.domain.payment import Payment
from orderpay.domain.timestamps import utcnow
from orderpay.services.payments.ports import IdGenerator, OrderStore, PaymentGateway, PaymentStore

UNKNOWN_FAILURE_REASON = "Unknown error"
DECLINED_REASON = "Payment declined"
SUCCESS_MESSAGE = "Payment processed successfully"


@dataclass(frozen=True, slots=True)
class PaymentReceipt:
    """Snapshots returned after a completed charge."""

    order: dict[str, Any]
    payment: dict[str, Any]
    success: bool = True
    message: str = SUCCESS_MESSAGE

    @classmethod
    def for_payment(cls, order: Order, payment: Payment) -> PaymentReceipt:
        return cls(order=order.to_dict(), payment=payment.to_dict())

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, "order": self.order, "payment": self.payment}


@dataclass(frozen=True, slots=True)
class PaymentOutcome:
    """Either a receipt or a typed failure; exactly one is set.

    `payment` holds the recorded attempt whenever the gateway was called,
    including declined charges.
    """

    receipt: PaymentReceipt | None = None
    failure: PaymentFailure | None = None
    payment: Payment | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> PaymentReceipt:
        if self.failure is not None:
            raise PaymentRejectedError(self.failure)
        return self.receipt


class PaymentOrchestrator:
    """Owns the charge sequence for a single order."""

    def __init__(
        self,
        order_store: OrderStore,
        payment_store: PaymentStore,
        gateway: PaymentGateway,
        id_generator: IdGenerator,
        clock: Callable[[], datetime] = utcnow,
        service_name: str = "orderpay",
    ) -> None:
        self.order_store = order_store
        self.payment_store = payment_store
        self.gateway = gateway
        self.id_generator = id_generator
        self.clock = clock
        self.service_name = service_name

    def process_payment(self, order_id: str) -> PaymentOutcome:
        """Charge `order_id` once.

        Lookup, status and currency checks run before anything is written, so
        rejected requests are free to retry. Once the gateway has been called
        the attempt is always recorded; a declined charge is reported as
        GATEWAY_FAILED and leaves the order untouched.
        """

        token = order_id_ctx.set(order_id)
        payment_requests_total.labels(service=self.service_name).inc()
        try:
            with payment_latency_seconds.labels(service=self.service_name).time():
                return self._process(order_id)
        finally:
            order_id_ctx.reset(token)

    def _process(self, order_id: str) -> PaymentOutcome:
        order = self.order_store.find(order_id)
        if order is None:
            return self._reject(PaymentFailure.order_not_found(order_id))

        if order.status.is_paid():
            return self._reject(PaymentFailure.already_paid(order_id))
        if not order.can_be_paid():
            return self._reject(PaymentFailure.not_payable(order_id, order.status.value))

        gateway_name = self.gateway.name
        if not self.gateway.supports_currency(order.currency):
            return self._reject(PaymentFailure.currency_unsupported(order_id, order.currency, gateway_name))

        logger.info(
            "payment_attempt order_id=%s amount=%s currency=%s gateway=%s",
            order.id,
            order.amount,
            order.currency,
            gateway_name,
        )
        charged_at = self.clock()
        result = self.gateway.charge(order)

        if result.successful:
            payment = Payment.successful(
                id=self.id_generator.generate(),
                order_id=order.id,
                amount=order.amount,
                currency=order.currency,
                gateway_transaction_id=result.transaction_id,
                gateway_name=gateway_name,
                created_at=charged_at,
            )
        else:
            payment = Payment.failed(
                id=self.id_generator.generate(),
                order_id=order.id,
                amount=order.amount,
                currency=order.currency,
                gateway_transaction_id=result.transaction_id,
                gateway_name=gateway_name,
                failure_reason=result.failure_reason or UNKNOWN_FAILURE_REASON,
                created_at=charged_at,
            )
        self.payment_store.save(payment)

        if not payment.is_successful():
            payment_failure_total.labels(service=self.service_name, gateway=gateway_name).inc()
            logger.warning(
                "payment_failed order_id=%s payment_id=%s reason=%s",
                order.id,
                payment.id,
                payment.failure_reason,
            )
            return self._reject(
                PaymentFailure.gateway_failed(order_id, result.failure_reason or DECLINED_REASON), payment
            )

        order.mark_as_paid(max(self.clock(), charged_at))
        self.order_store.save(order)
        payment_success_total.labels(service=self.service_name).inc()
        logger.info(
            "payment_completed order_id=%s payment_id=%s transaction_id=%s",
            order.id,
            payment.id,
            payment.gateway_transaction_id,
        )
        return PaymentOutcome(receipt=PaymentReceipt.for_payment(order, payment), payment=payment)

    def _reject(self, failure: PaymentFailure, payment: Payment | None = None) -> PaymentOutcome:
        payment_rejections_total.labels(service=self.service_name, kind=failure.kind.value).inc()
        logger.info("payment_rejected order_id=%s kind=%s", failure.order_id, failure.kind.value)
        return PaymentOutcome(failure=failure, payment=payment)
