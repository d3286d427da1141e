"""API response schemas for payment service endpoints."""

from pydantic import BaseModel


class OrderSnapshot(BaseModel):
    """Flat order map; timestamps are `YYYY-MM-DD HH:MM:SS` strings."""

    id: str
    amount: int
    currency: str
    customer_email: str
    status: str
    paid_at: str | None = None
    created_at: str


class PaymentSnapshot(BaseModel):
    """Flat payment map for one recorded charge attempt."""

    id: str
    order_id: str
    amount: int
    currency: str
    status: str
    gateway_transaction_id: str
    gateway_name: str
    created_at: str
    failure_reason: str | None = None


class PaymentResponse(BaseModel):
    """Body of a successful `POST /orders/{order_id}/pay`."""

    success: bool
    message: str
    order: OrderSnapshot
    payment: PaymentSnapshot


class OrderResponse(BaseModel):
    success: bool = True
    order: OrderSnapshot


class OrderListResponse(BaseModel):
    success: bool = True
    orders: list[OrderSnapshot]


class PaymentListResponse(BaseModel):
    success: bool = True
    payments: list[PaymentSnapshot]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
