"""In-memory stores for tests and local runs.

Implementation notes:
- Stored and returned entities are deep copies, mimicking ORM detachment:
  code that mutates an order without calling save() is not persisted.
- Orders follow the same versioned conditional write as `SqlOrderStore`.
- A lock serializes each call so concurrent request threads see whole writes.
- Payments carry an insertion sequence that orders attempts sharing a timestamp.
"""

import copy
from itertools import count
from threading import Lock

from orderpay.domain.errors import DuplicatePaymentError, OrderConflictError
from orderpay.domain.order import Order
from orderpay.domain.payment import Payment
from orderpay.services.payments.ports import OrderStore, PaymentStore


class InMemoryOrderStore(OrderStore):
    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._lock = Lock()

    def find(self, order_id: str) -> Order | None:
        with self._lock:
            order = self._orders.get(order_id)
            return copy.deepcopy(order) if order is not None else None

    def all(self) -> list[Order]:
        with self._lock:
            orders = [copy.deepcopy(order) for order in self._orders.values()]
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def save(self, order: Order) -> None:
        with self._lock:
            current_version = order.version
            stored = self._orders.get(order.id)
            if stored is not None and stored.version != current_version:
                raise OrderConflictError(order.id, current_version)
            order.record_persisted(current_version + 1)
            self._orders[order.id] = copy.deepcopy(order)


class InMemoryPaymentStore(PaymentStore):
    def __init__(self) -> None:
        self._payments: dict[str, Payment] = {}
        self._sequence: dict[str, int] = {}
        self._counter = count(1)
        self._lock = Lock()

    def save(self, payment: Payment) -> None:
        with self._lock:
            if payment.id in self._payments:
                raise DuplicatePaymentError(f"payment {payment.id} already recorded")
            self._payments[payment.id] = payment
            self._sequence[payment.id] = next(self._counter)

    def find(self, payment_id: str) -> Payment | None:
        with self._lock:
            return self._payments.get(payment_id)

    def find_by_order_id(self, order_id: str) -> list[Payment]:
        with self._lock:
            payments = [p for p in self._payments.values() if p.order_id == order_id]
            return sorted(
                payments,
                key=lambda payment: (payment.created_at, self._sequence[payment.id]),
                reverse=True,
            )

    def __len__(self) -> int:
        return len(self._payments)
