"""Payment entity: an immutable record of one charge attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from orderpay.domain.enums import PaymentStatus
from orderpay.domain.errors import InvalidAmountError, InvariantViolationError
from orderpay.domain.timestamps import format_timestamp, normalize, parse_timestamp, utcnow


@dataclass(frozen=True, slots=True)
class Payment:
    """Historical charge record; a retried charge is a new Payment, never an update.

    `failure_reason` is present exactly when the status is FAILED.
    """

    id: str
    order_id: str
    amount: int
    currency: str
    status: PaymentStatus
    gateway_transaction_id: str
    gateway_name: str
    created_at: datetime = field(default_factory=utcnow)
    failure_reason: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount <= 0:
            raise InvalidAmountError("Payment amount must be positive")
        status = PaymentStatus(self.status)
        if (self.failure_reason is not None) != (status is PaymentStatus.FAILED):
            raise InvariantViolationError(
                f"Payment {self.id}: failure_reason must be set exactly when status is failed"
            )
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "currency", self.currency.upper())
        object.__setattr__(self, "created_at", normalize(self.created_at))

    @classmethod
    def successful(
        cls,
        id: str,
        order_id: str,
        amount: int,
        currency: str,
        gateway_transaction_id: str,
        gateway_name: str,
        created_at: datetime | None = None,
    ) -> Payment:
        return cls(
            id=id,
            order_id=order_id,
            amount=amount,
            currency=currency,
            status=PaymentStatus.COMPLETED,
            gateway_transaction_id=gateway_transaction_id,
            gateway_name=gateway_name,
            created_at=created_at or utcnow(),
        )

    @classmethod
    def failed(
        cls,
        id: str,
        order_id: str,
        amount: int,
        currency: str,
        gateway_transaction_id: str,
        gateway_name: str,
        failure_reason: str,
        created_at: datetime | None = None,
    ) -> Payment:
        return cls(
            id=id,
            order_id=order_id,
            amount=amount,
            currency=currency,
            status=PaymentStatus.FAILED,
            gateway_transaction_id=gateway_transaction_id,
            gateway_name=gateway_name,
            created_at=created_at or utcnow(),
            failure_reason=failure_reason,
        )

    def is_successful(self) -> bool:
        return self.status.is_successful()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "amount": self.amount,
            "currency": self.currency,
            "status": self.status.value,
            "gateway_transaction_id": self.gateway_transaction_id,
            "gateway_name": self.gateway_name,
            "created_at": format_timestamp(self.created_at),
            "failure_reason": self.failure_reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Payment:
        return cls(
            id=data["id"],
            order_id=data["order_id"],
            amount=data["amount"],
            currency=data["currency"],
            status=PaymentStatus(data["status"]),
            gateway_transaction_id=data["gateway_transaction_id"],
            gateway_name=data["gateway_name"],
            created_at=parse_timestamp(data["created_at"]),
            failure_reason=data.get("failure_reason"),
        )
