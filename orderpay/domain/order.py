"""Order entity and its lifecycle.

Status only changes through the transition methods below, which consult the
table in `orderpay.common.state_machine`:

    pending -> paid        (mark_as_paid, records paid_at)
    pending -> cancelled   (cancel)
    paid    -> refunded    (mark_as_refunded)

`paid_at` is set if and only if the order is PAID, so refunding clears it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from orderpay.common.state_machine import validate_transition
from orderpay.domain.enums import OrderStatus
from orderpay.domain.errors import InvalidAmountError, InvalidStateTransitionError, InvariantViolationError
from orderpay.domain.timestamps import format_timestamp, normalize, parse_timestamp, utcnow


class Order:
    """A purchasable unit with a lifecycle status."""

    __slots__ = ("_id", "_amount", "_currency", "_customer_email", "_status", "_paid_at", "_created_at", "_version")

    def __init__(
        self,
        id: str,
        amount: int,
        currency: str,
        customer_email: str,
        status: OrderStatus = OrderStatus.PENDING,
        created_at: datetime | None = None,
    ) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError("Order amount must be positive")
        status = OrderStatus(status)
        if status is OrderStatus.PAID:
            # A PAID order without its payment time cannot exist; use rehydrate().
            raise InvariantViolationError("Paid orders must be rehydrated with their paid_at timestamp")

        self._id = id
        self._amount = amount
        self._currency = currency.upper()
        self._customer_email = customer_email
        self._status = status
        self._paid_at: datetime | None = None
        self._created_at = normalize(created_at) if created_at is not None else utcnow()
        self._version = 0

    @classmethod
    def rehydrate(
        cls,
        id: str,
        amount: int,
        currency: str,
        customer_email: str,
        status: OrderStatus | str,
        created_at: datetime,
        paid_at: datetime | None = None,
        version: int = 0,
    ) -> Order:
        """Rebuild an order from persisted state, re-checking every invariant."""

        status = OrderStatus(status)
        if (paid_at is not None) != (status is OrderStatus.PAID):
            raise InvariantViolationError(
                f"Order {id}: paid_at must be set exactly when status is paid (status: {status.value})"
            )
        order = cls(
            id=id,
            amount=amount,
            currency=currency,
            customer_email=customer_email,
            status=OrderStatus.PENDING if status is OrderStatus.PAID else status,
            created_at=created_at,
        )
        order._status = status
        order._paid_at = normalize(paid_at) if paid_at is not None else None
        order._version = version
        return order

    @property
    def id(self) -> str:
        return self._id

    @property
    def amount(self) -> int:
        return self._amount

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def customer_email(self) -> str:
        return self._customer_email

    @property
    def status(self) -> OrderStatus:
        return self._status

    @property
    def paid_at(self) -> datetime | None:
        return self._paid_at

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def version(self) -> int:
        """Concurrency token of the last persisted state; owned by the stores."""

        return self._version

    def record_persisted(self, version: int) -> None:
        self._version = version

    def can_be_paid(self) -> bool:
        return self._status.can_be_paid()

    def can_be_refunded(self) -> bool:
        return self._status.can_be_refunded()

    def mark_as_paid(self, paid_at: datetime | None = None) -> None:
        """Move PENDING -> PAID.

        Paying twice raises: duplicate charges must be stopped before the
        gateway is called, so reaching this a second time is a caller bug.
        """

        if not self.can_be_paid():
            raise InvalidStateTransitionError(f"Cannot pay order with status: {self._status.value}")
        self._transition(OrderStatus.PAID)
        self._paid_at = normalize(paid_at) if paid_at is not None else utcnow()

    def cancel(self) -> None:
        if self._status is not OrderStatus.PENDING:
            raise InvalidStateTransitionError(f"Cannot cancel order with status: {self._status.value}")
        self._transition(OrderStatus.CANCELLED)

    def mark_as_refunded(self) -> None:
        if not self.can_be_refunded():
            raise InvalidStateTransitionError(f"Cannot refund order with status: {self._status.value}")
        self._transition(OrderStatus.REFUNDED)
        self._paid_at = None

    def _transition(self, new_status: OrderStatus) -> None:
        validate_transition(self._status.value, new_status.value)
        self._status = new_status

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "amount": self._amount,
            "currency": self._currency,
            "customer_email": self._customer_email,
            "status": self._status.value,
            "paid_at": format_timestamp(self._paid_at),
            "created_at": format_timestamp(self._created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Order:
        return cls.rehydrate(
            id=data["id"],
            amount=data["amount"],
            currency=data["currency"],
            customer_email=data["customer_email"],
            status=data["status"],
            created_at=parse_timestamp(data["created_at"]),
            paid_at=parse_timestamp(data.get("paid_at")),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    def __repr__(self) -> str:
        return f"Order(id={self._id!r}, amount={self._amount}, currency={self._currency!r}, status={self._status.value!r})"
