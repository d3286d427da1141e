"""Shared pytest fixtures for the test suite."""

from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from orderpay.common.config import Settings
from orderpay.common.db import build_engine, build_session_factory, init_schema
from orderpay.domain.enums import OrderStatus
from orderpay.domain.order import Order
from orderpay.services.payments.main import create_app
from orderpay.services.payments.memory import InMemoryOrderStore, InMemoryPaymentStore
from orderpay.services.payments.ports import ChargeResult, IdGenerator, PaymentGateway
from orderpay.services.payments.service import PaymentOrchestrator


class RecordingGateway(PaymentGateway):
    """Gateway double that records charges and returns a preset result."""

    def __init__(self, result: ChargeResult | None = None, currencies=("USD", "EUR", "GBP")) -> None:
        self.result = result or ChargeResult.success("ch_test_0001")
        self.currencies = {code.upper() for code in currencies}
        self.charged: list[str] = []

    @property
    def name(self) -> str:
        return "fakepay"

    def supports_currency(self, currency: str) -> bool:
        return currency.upper() in self.currencies

    def charge(self, order: Order) -> ChargeResult:
        self.charged.append(order.id)
        return self.result


class SequentialIdGenerator(IdGenerator):
    def __init__(self) -> None:
        self._counter = count(1)

    def generate(self) -> str:
        return f"pay-{next(self._counter):04d}"


class CountingOrderStore(InMemoryOrderStore):
    """In-memory store that counts writes made after seeding."""

    def __init__(self) -> None:
        super().__init__()
        self.saves = 0

    def seed(self, order: Order) -> Order:
        super().save(order)
        return order

    def save(self, order: Order) -> None:
        self.saves += 1
        super().save(order)


@pytest.fixture
def fixed_time() -> datetime:
    """A fixed timestamp for deterministic testing."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def order_store() -> CountingOrderStore:
    return CountingOrderStore()


@pytest.fixture
def payment_store() -> InMemoryPaymentStore:
    return InMemoryPaymentStore()


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def orchestrator(order_store, payment_store, gateway, fixed_time) -> PaymentOrchestrator:
    return PaymentOrchestrator(
        order_store=order_store,
        payment_store=payment_store,
        gateway=gateway,
        id_generator=SequentialIdGenerator(),
        clock=lambda: fixed_time,
    )


@pytest.fixture
def make_order(fixed_time):
    """Build orders in any status; PAID orders get a paid_at."""

    def _make(
        id: str = "o1",
        amount: int = 5000,
        currency: str = "USD",
        customer_email: str = "customer@example.com",
        status: OrderStatus = OrderStatus.PENDING,
    ) -> Order:
        return Order.rehydrate(
            id=id,
            amount=amount,
            currency=currency,
            customer_email=customer_email,
            status=status,
            created_at=fixed_time,
            paid_at=fixed_time if status is OrderStatus.PAID else None,
        )

    return _make


@pytest.fixture
def session_factory():
    """Session factory over a fresh in-memory SQLite database."""
    engine = build_engine("sqlite://")
    init_schema(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    app = create_app(
        Settings(service_name="orderpay-test", database_dsn="sqlite://"),
        session_factory=session_factory,
    )
    with TestClient(app) as test_client:
        yield test_client
