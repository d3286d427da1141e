"""Lifecycle statuses for orders and payments."""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    def is_paid(self) -> bool:
        return self is OrderStatus.PAID

    def can_be_paid(self) -> bool:
        return self is OrderStatus.PENDING

    def can_be_refunded(self) -> bool:
        return self is OrderStatus.PAID


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

    def is_successful(self) -> bool:
        return self is PaymentStatus.COMPLETED
