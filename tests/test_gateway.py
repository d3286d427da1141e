"""Simulated gateway and id generator behavior."""

import random

import pytest

from orderpay.domain.order import Order
from orderpay.services.payments.gateway import SimulatedPaymentGateway, UuidIdGenerator


def _order(email="customer@example.com", currency="USD") -> Order:
    return Order(id="o1", amount=100, currency=currency, customer_email=email)


def test_default_currencies_case_insensitive():
    gateway = SimulatedPaymentGateway()

    assert gateway.name == "stripe"
    for code in ("USD", "eur", "Gbp", "CAD", "AUD"):
        assert gateway.supports_currency(code)
    assert not gateway.supports_currency("XYZ")


def test_successful_charge_has_stripe_like_id():
    result = SimulatedPaymentGateway().charge(_order())

    assert result.successful
    assert result.transaction_id.startswith("ch_")
    assert len(result.transaction_id) == 3 + 24
    assert result.failure_reason is None


def test_force_decline_email_is_declined():
    """Manual fault injection through the customer email prefix."""

    result = SimulatedPaymentGateway().charge(_order(email="force-decline-1@example.com"))

    assert not result.successful
    assert result.failure_reason == "Card declined"
    assert result.transaction_id.startswith("ch_")


def test_decline_rate_one_always_declines():
    gateway = SimulatedPaymentGateway(decline_rate=1.0, rng=random.Random(7))

    assert not any(gateway.charge(_order()).successful for _ in range(5))


def test_invalid_decline_rate_rejected():
    with pytest.raises(ValueError):
        SimulatedPaymentGateway(decline_rate=1.5)


def test_custom_name_and_currencies():
    gateway = SimulatedPaymentGateway(name="adyen", currencies=["sek"])

    assert gateway.name == "adyen"
    assert gateway.supports_currency("SEK")
    assert not gateway.supports_currency("USD")


def test_uuid_ids_are_unique():
    generator = UuidIdGenerator()

    ids = {generator.generate() for _ in range(100)}

    assert len(ids) == 100
