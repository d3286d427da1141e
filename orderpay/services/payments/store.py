"""SQLAlchemy-backed order and payment stores.

Each call opens its own session from the injected factory and commits before
returning, so a saved Payment is durable before the order is advanced.
"""

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from orderpay.domain.errors import DuplicatePaymentError, OrderConflictError
from orderpay.domain.order import Order
from orderpay.domain.payment import Payment
from orderpay.services.payments.models import OrderRow, PaymentRow
from orderpay.services.payments.ports import OrderStore, PaymentStore


def _order_from_row(row: OrderRow) -> Order:
    return Order.rehydrate(
        id=row.id,
        amount=row.amount,
        currency=row.currency,
        customer_email=row.customer_email,
        status=row.status,
        created_at=row.created_at,
        paid_at=row.paid_at,
        version=row.version,
    )


def _payment_from_row(row: PaymentRow) -> Payment:
    return Payment(
        id=row.id,
        order_id=row.order_id,
        amount=row.amount,
        currency=row.currency,
        status=row.status,
        gateway_transaction_id=row.gateway_transaction_id,
        gateway_name=row.gateway_name,
        created_at=row.created_at,
        failure_reason=row.failure_reason,
    )


class SqlOrderStore(OrderStore):
    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def find(self, order_id: str) -> Order | None:
        with self.session_factory() as db:
            row = db.get(OrderRow, order_id)
            return _order_from_row(row) if row else None

    def all(self) -> list[Order]:
        with self.session_factory() as db:
            rows = db.execute(select(OrderRow).order_by(OrderRow.created_at.desc(), OrderRow.id)).scalars().all()
            return [_order_from_row(row) for row in rows]

    def save(self, order: Order) -> None:
        """Insert a new order or apply a status change with optimistic concurrency.

        Updates are guarded by `(id, version)`; a concurrent writer that got
        there first makes the rowcount 0 and the save raises.
        """

        with self.session_factory() as db:
            current_version = order.version
            result = db.execute(
                update(OrderRow)
                .where(OrderRow.id == order.id, OrderRow.version == current_version)
                .values(status=order.status.value, paid_at=order.paid_at, version=current_version + 1)
            )
            if result.rowcount == 1:
                db.commit()
                order.record_persisted(current_version + 1)
                return

            if db.get(OrderRow, order.id) is not None:
                db.rollback()
                raise OrderConflictError(order.id, current_version)

            db.add(
                OrderRow(
                    id=order.id,
                    amount=order.amount,
                    currency=order.currency,
                    customer_email=order.customer_email,
                    status=order.status.value,
                    paid_at=order.paid_at,
                    created_at=order.created_at,
                    version=current_version + 1,
                )
            )
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise OrderConflictError(order.id, current_version) from exc
            order.record_persisted(current_version + 1)


class SqlPaymentStore(PaymentStore):
    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def save(self, payment: Payment) -> None:
        """Insert the attempt with the next per-order attempt number."""

        next_attempt = (
            select(func.coalesce(func.max(PaymentRow.attempt_number), 0) + 1)
            .where(PaymentRow.order_id == payment.order_id)
            .correlate(None)
            .scalar_subquery()
        )
        with self.session_factory() as db:
            db.add(
                PaymentRow(
                    id=payment.id,
                    order_id=payment.order_id,
                    attempt_number=next_attempt,
                    amount=payment.amount,
                    currency=payment.currency,
                    status=payment.status.value,
                    gateway_transaction_id=payment.gateway_transaction_id,
                    gateway_name=payment.gateway_name,
                    created_at=payment.created_at,
                    failure_reason=payment.failure_reason,
                )
            )
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise DuplicatePaymentError(f"payment {payment.id} already recorded") from exc

    def find(self, payment_id: str) -> Payment | None:
        with self.session_factory() as db:
            row = db.get(PaymentRow, payment_id)
            return _payment_from_row(row) if row else None

    def find_by_order_id(self, order_id: str) -> list[Payment]:
        with self.session_factory() as db:
            rows = (
                db.execute(
                    select(PaymentRow)
                    .where(PaymentRow.order_id == order_id)
                    .order_by(PaymentRow.created_at.desc(), PaymentRow.attempt_number.desc())
                )
                .scalars()
                .all()
            )
            return [_payment_from_row(row) for row in rows]
