"""Error types for orders and payments.

Hierarchy:
    DomainError
    ├── InvalidAmountError            (construction with amount <= 0)
    ├── InvalidStateTransitionError   (illegal lifecycle move)
    ├── InvariantViolationError       (inconsistent persisted state)
    └── PaymentRejectedError          (business outcome raised via unwrap())
    StoreError
    ├── OrderConflictError            (conditional order write lost a race)
    └── DuplicatePaymentError         (payment id inserted twice)

The first three are programming/data-integrity errors and subclass
`ValueError`; they are never converted into HTTP 4xx responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class InvalidAmountError(DomainError, ValueError):
    """Raised when an Order or Payment is built with a non-positive amount."""


class InvalidStateTransitionError(DomainError, ValueError):
    """Raised when an order status change violates the state machine."""


class InvariantViolationError(DomainError, ValueError):
    """Raised when entity fields contradict each other (e.g. paid_at without PAID)."""


class PaymentErrorKind(str, Enum):
    """Business reasons a payment request does not end in a completed charge."""

    ORDER_NOT_FOUND = "order_not_found"
    ALREADY_PAID = "already_paid"
    NOT_PAYABLE = "not_payable"
    CURRENCY_UNSUPPORTED = "currency_unsupported"
    GATEWAY_FAILED = "gateway_failed"


@dataclass(frozen=True, slots=True)
class PaymentFailure:
    """Typed description of a rejected or declined payment request."""

    kind: PaymentErrorKind
    message: str
    order_id: str

    @classmethod
    def order_not_found(cls, order_id: str) -> PaymentFailure:
        return cls(PaymentErrorKind.ORDER_NOT_FOUND, f"Order not found: {order_id}", order_id)

    @classmethod
    def already_paid(cls, order_id: str) -> PaymentFailure:
        return cls(PaymentErrorKind.ALREADY_PAID, f"Order {order_id} has already been paid", order_id)

    @classmethod
    def not_payable(cls, order_id: str, status: str) -> PaymentFailure:
        return cls(
            PaymentErrorKind.NOT_PAYABLE,
            f"Order {order_id} cannot be paid (status: {status})",
            order_id,
        )

    @classmethod
    def currency_unsupported(cls, order_id: str, currency: str, gateway: str) -> PaymentFailure:
        return cls(
            PaymentErrorKind.CURRENCY_UNSUPPORTED,
            f"Currency {currency} is not supported by {gateway} gateway",
            order_id,
        )

    @classmethod
    def gateway_failed(cls, order_id: str, reason: str) -> PaymentFailure:
        return cls(PaymentErrorKind.GATEWAY_FAILED, f"Payment gateway error: {reason}", order_id)


class PaymentRejectedError(DomainError):
    """Raised by `PaymentOutcome.unwrap()` when the outcome is a failure."""

    def __init__(self, failure: PaymentFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure

    @property
    def kind(self) -> PaymentErrorKind:
        return self.failure.kind


class StoreError(Exception):
    """Base exception for persistence-level failures the service can classify."""


class OrderConflictError(StoreError):
    """Raised when an order was modified concurrently since it was read."""

    def __init__(self, order_id: str, expected_version: int) -> None:
        super().__init__(
            f"optimistic concurrency conflict for order {order_id} (expected version {expected_version})"
        )
        self.order_id = order_id
        self.expected_version = expected_version


class DuplicatePaymentError(StoreError):
    """Raised when a payment id is inserted twice; payments are insert-only."""
