"""HTTP surface tests for order lookup and `POST /orders/{order_id}/pay`."""

from fastapi.testclient import TestClient

from orderpay.common.config import Settings
from orderpay.domain.enums import OrderStatus, PaymentStatus
from orderpay.domain.order import Order
from orderpay.services.payments.main import create_app
from orderpay.services.payments.ports import ChargeResult

from conftest import RecordingGateway


def _seed(client, order: Order) -> Order:
    client.app.state.order_store.save(order)
    return order


def _pending(id: str, **overrides) -> Order:
    fields = dict(id=id, amount=5000, currency="USD", customer_email="customer@example.com")
    fields.update(overrides)
    return Order(**fields)


def test_pay_pending_order(client):
    """o1 through HTTP: 200 with paid order and completed payment snapshots."""

    _seed(client, _pending("o1"))

    resp = client.post("/orders/o1/pay")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Payment processed successfully"
    assert body["order"]["status"] == "paid"
    assert body["order"]["paid_at"] is not None
    assert body["payment"]["status"] == "completed"
    assert body["payment"]["amount"] == 5000
    assert body["payment"]["currency"] == "USD"
    assert body["payment"]["gateway_name"] == "stripe"
    assert body["payment"]["gateway_transaction_id"].startswith("ch_")


def test_pay_response_structure(client):
    _seed(client, _pending("o1"))

    body = client.post("/orders/o1/pay").json()

    assert set(body) == {"success", "message", "order", "payment"}
    assert set(body["order"]) == {"id", "amount", "currency", "customer_email", "status", "paid_at", "created_at"}
    assert set(body["payment"]) == {
        "id",
        "order_id",
        "amount",
        "currency",
        "status",
        "gateway_transaction_id",
        "gateway_name",
        "created_at",
        "failure_reason",
    }
    assert len(body["order"]["created_at"]) == len("YYYY-MM-DD HH:MM:SS")


def test_payment_persists_order_and_record(client):
    _seed(client, _pending("o1", amount=7500, currency="EUR"))

    client.post("/orders/o1/pay")

    stored = client.app.state.order_store.find("o1")
    assert stored.status is OrderStatus.PAID
    assert stored.paid_at is not None
    payments = client.app.state.payment_store.find_by_order_id("o1")
    assert len(payments) == 1
    assert payments[0].amount == 7500
    assert payments[0].currency == "EUR"
    assert payments[0].status is PaymentStatus.COMPLETED


def test_missing_order_is_404(client):
    resp = client.post("/orders/non-existent-order/pay")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Order not found: non-existent-order"}


def test_already_paid_is_422(client):
    order = _seed(client, _pending("o2"))
    order.mark_as_paid()
    client.app.state.order_store.save(order)

    resp = client.post("/orders/o2/pay")

    assert resp.status_code == 422
    assert resp.json()["success"] is False
    assert "already been paid" in resp.json()["error"]


def test_cancelled_is_422(client):
    order = _pending("o3")
    order.cancel()
    _seed(client, order)

    resp = client.post("/orders/o3/pay")

    assert resp.status_code == 422
    assert "cannot be paid (status: cancelled)" in resp.json()["error"]


def test_unsupported_currency_is_422_without_payment(client):
    _seed(client, _pending("o4", currency="XYZ"))

    resp = client.post("/orders/o4/pay")

    assert resp.status_code == 422
    assert resp.json()["error"] == "Currency XYZ is not supported by stripe gateway"
    assert client.app.state.payment_store.find_by_order_id("o4") == []


def test_declined_charge_is_422_and_recorded(client):
    _seed(client, _pending("o5", customer_email="force-decline@example.com"))

    resp = client.post("/orders/o5/pay")

    assert resp.status_code == 422
    assert resp.json()["error"] == "Payment gateway error: Card declined"
    payments = client.get("/orders/o5/payments").json()["payments"]
    assert len(payments) == 1
    assert payments[0]["status"] == "failed"
    assert payments[0]["failure_reason"] == "Card declined"
    assert client.get("/orders/o5").json()["order"]["status"] == "pending"


def test_unclassified_error_is_500(session_factory):
    """Collaborator faults surface as a generic server error."""

    class ExplodingGateway(RecordingGateway):
        def charge(self, order):
            raise RuntimeError("socket closed")

    app = create_app(Settings(database_dsn="sqlite://"), session_factory=session_factory, gateway=ExplodingGateway())
    with TestClient(app) as client:
        _seed(client, _pending("o6"))

        resp = client.post("/orders/o6/pay")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "An unexpected error occurred"}


def test_concurrent_modification_is_409(session_factory):
    """A status change between lookup and save loses the conditional write."""

    class RacingGateway(RecordingGateway):
        def __init__(self, order_store):
            super().__init__(ChargeResult.success("ch_race"))
            self.order_store = order_store

        def charge(self, order):
            # Another request pays the same order while this charge is in flight.
            competing = self.order_store.find(order.id)
            competing.mark_as_paid()
            self.order_store.save(competing)
            return super().charge(order)

    app = create_app(Settings(database_dsn="sqlite://"), session_factory=session_factory)
    app.state.orchestrator.gateway = RacingGateway(app.state.order_store)
    with TestClient(app) as client:
        _seed(client, _pending("o7"))

        resp = client.post("/orders/o7/pay")

    assert resp.status_code == 409
    assert resp.json()["success"] is False


def test_get_order(client):
    _seed(client, _pending("order-get", amount=3000, currency="GBP", customer_email="get@example.com"))

    resp = client.get("/orders/order-get")

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["order"]["id"] == "order-get"
    assert resp.json()["order"]["amount"] == 3000
    assert resp.json()["order"]["currency"] == "GBP"
    assert resp.json()["order"]["status"] == "pending"


def test_get_missing_order_is_404(client):
    assert client.get("/orders/missing").status_code == 404
    assert client.get("/orders/missing/payments").status_code == 404


def test_list_orders(client):
    for idx in range(3):
        _seed(client, _pending(f"order-list-{idx}"))

    resp = client.get("/orders")

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert len(resp.json()["orders"]) == 3


def test_unsupported_method_is_405(client):
    assert client.delete("/orders/o1/pay").status_code == 405


def test_health_and_metrics(client):
    _seed(client, _pending("o1"))
    client.post("/orders/o1/pay")

    assert client.get("/health").json() == {"ok": True}
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "payment_requests_total" in metrics.text
    assert "http_requests_total" in metrics.text


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"x-request-id": "req-123"})

    assert resp.headers["x-request-id"] == "req-123"
