"""Collaborator ports consumed by the payment orchestrator.

The orchestrator only sees these interfaces; SQL, in-memory and simulated
implementations live in `store.py`, `memory.py` and `gateway.py`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orderpay.domain.order import Order
    from orderpay.domain.payment import Payment


@dataclass(frozen=True, slots=True)
class ChargeResult:
    """Outcome of one gateway charge. There are no partial or pending states."""

    successful: bool
    transaction_id: str
    failure_reason: str | None = None

    @classmethod
    def success(cls, transaction_id: str) -> ChargeResult:
        return cls(successful=True, transaction_id=transaction_id)

    @classmethod
    def failure(cls, transaction_id: str, reason: str | None) -> ChargeResult:
        return cls(successful=False, transaction_id=transaction_id, failure_reason=reason)


class PaymentGateway(ABC):
    """External charge execution, treated as a black box."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Gateway identifier recorded on every Payment (e.g. 'stripe')."""

    @abstractmethod
    def supports_currency(self, currency: str) -> bool:
        """Whether `currency` (ISO 4217) can be charged through this gateway."""

    @abstractmethod
    def charge(self, order: Order) -> ChargeResult:
        """Attempt to charge the order's full amount.

        Declines are reported through `ChargeResult`; I/O faults raise.
        """


class IdGenerator(ABC):
    @abstractmethod
    def generate(self) -> str:
        """Return an identifier unique for the lifetime of the system."""


class OrderStore(ABC):
    """Port for order persistence.

    Contract:
    - find() returns None if the order does not exist (no exception)
    - save() upserts: inserts new orders, otherwise updates status/paid_at
    - save() is a conditional write on the order's version and raises
      OrderConflictError when the stored row changed since it was read
    - returned orders are detached copies; mutations need save()
    """

    @abstractmethod
    def find(self, order_id: str) -> Order | None:
        ...

    @abstractmethod
    def save(self, order: Order) -> None:
        ...

    @abstractmethod
    def all(self) -> list[Order]:
        """All orders, newest first."""


class PaymentStore(ABC):
    """Port for payment persistence. Insert-only: payments are never updated."""

    @abstractmethod
    def save(self, payment: Payment) -> None:
        """Insert `payment`; raises DuplicatePaymentError if the id exists."""

    @abstractmethod
    def find(self, payment_id: str) -> Payment | None:
        ...

    @abstractmethod
    def find_by_order_id(self, order_id: str) -> list[Payment]:
        """All attempts recorded for an order, newest first."""
