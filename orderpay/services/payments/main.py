"""HTTP surface for order lookup and payment processing.

Run with `uvicorn orderpay.services.payments.main:create_app --factory`.
Collaborators are built here once per app and handed to the orchestrator;
tests pass their own session factory, gateway or id generator.
"""

from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from orderpay.common.config import Settings, settings as default_settings
from orderpay.common.db import build_engine, build_session_factory, init_schema
from orderpay.common.logging import configure_logging, logger, request_id_ctx
from orderpay.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from orderpay.common.startup import log_startup_config
from orderpay.common.tracing import instrument_app, setup_tracing
from orderpay.domain.errors import OrderConflictError, PaymentErrorKind
from orderpay.services.payments.gateway import SimulatedPaymentGateway, UuidIdGenerator
from orderpay.services.payments.ports import IdGenerator, PaymentGateway
from orderpay.services.payments.schemas import (
    ErrorResponse,
    OrderListResponse,
    OrderResponse,
    PaymentListResponse,
    PaymentResponse,
)
from orderpay.services.payments.service import PaymentOrchestrator
from orderpay.services.payments.store import SqlOrderStore, SqlPaymentStore

STATUS_BY_KIND: dict[PaymentErrorKind, int] = {
    PaymentErrorKind.ORDER_NOT_FOUND: 404,
    PaymentErrorKind.ALREADY_PAID: 422,
    PaymentErrorKind.NOT_PAYABLE: 422,
    PaymentErrorKind.CURRENCY_UNSUPPORTED: 422,
    PaymentErrorKind.GATEWAY_FAILED: 422,
}


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def create_app(
    settings: Settings | None = None,
    *,
    session_factory=None,
    gateway: PaymentGateway | None = None,
    id_generator: IdGenerator | None = None,
) -> FastAPI:
    """Build the FastAPI app and its orchestrator.

    Without an explicit `session_factory`, an engine is created from
    `settings.database_dsn` and the schema is created if missing.
    """

    settings = settings or default_settings
    configure_logging(settings.log_level, settings.service_name)
    setup_tracing(settings.service_name, settings.otel_exporter_otlp_endpoint)
    log_startup_config(settings)

    if session_factory is None:
        engine = build_engine(settings.database_dsn)
        init_schema(engine)
        session_factory = build_session_factory(engine)

    order_store = SqlOrderStore(session_factory)
    payment_store = SqlPaymentStore(session_factory)
    orchestrator = PaymentOrchestrator(
        order_store=order_store,
        payment_store=payment_store,
        gateway=gateway
        or SimulatedPaymentGateway(
            name=settings.gateway_name,
            currencies=settings.supported_currencies,
            decline_rate=settings.gateway_decline_rate,
        ),
        id_generator=id_generator or UuidIdGenerator(),
        service_name=settings.service_name,
    )

    app = FastAPI(title="OrderPay")
    app.state.orchestrator = orchestrator
    app.state.order_store = order_store
    app.state.payment_store = payment_store
    instrument_app(app)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Record request count and latency, and bind a request id for logs."""

        token = request_id_ctx.set(request.headers.get("x-request-id") or str(uuid4()))
        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            response.headers["x-request-id"] = request_id_ctx.get()
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()
            request_id_ctx.reset(token)

    @app.post(
        "/orders/{order_id}/pay",
        response_model=PaymentResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    )
    def pay_order(order_id: str, request: Request):
        """Charge a pending order through the configured gateway."""

        try:
            outcome = request.app.state.orchestrator.process_payment(order_id)
        except OrderConflictError as exc:
            logger.warning("payment_conflict order_id=%s error=%s", order_id, exc)
            return error_response(f"Order {order_id} was modified concurrently", 409)
        except Exception:
            logger.exception("payment_unexpected_error order_id=%s", order_id)
            return error_response("An unexpected error occurred", 500)

        if not outcome.ok:
            return error_response(outcome.failure.message, STATUS_BY_KIND[outcome.failure.kind])
        return outcome.receipt.to_dict()

    @app.get("/orders", response_model=OrderListResponse)
    def list_orders(request: Request):
        """List all orders, newest first."""

        orders = request.app.state.order_store.all()
        return {"success": True, "orders": [order.to_dict() for order in orders]}

    @app.get("/orders/{order_id}", response_model=OrderResponse, responses={404: {"model": ErrorResponse}})
    def get_order(order_id: str, request: Request):
        """Fetch one order."""

        order = request.app.state.order_store.find(order_id)
        if order is None:
            return error_response(f"Order not found: {order_id}", 404)
        return {"success": True, "order": order.to_dict()}

    @app.get(
        "/orders/{order_id}/payments",
        response_model=PaymentListResponse,
        responses={404: {"model": ErrorResponse}},
    )
    def list_order_payments(order_id: str, request: Request):
        """Every recorded charge attempt for an order, newest first."""

        if request.app.state.order_store.find(order_id) is None:
            return error_response(f"Order not found: {order_id}", 404)
        payments = request.app.state.payment_store.find_by_order_id(order_id)
        return {"success": True, "payments": [payment.to_dict() for payment in payments]}

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    return app
