"""Unit tests for order state-machine guardrails."""

import pytest

from orderpay.common.state_machine import ALLOWED_TRANSITIONS, validate_transition
from orderpay.domain.enums import OrderStatus
from orderpay.domain.errors import InvalidStateTransitionError


def test_valid_transition():
    """Sanity check: a legal transition should pass."""

    validate_transition("pending", "paid")
    validate_transition("paid", "refunded")


def test_invalid_transition():
    """Illegal transition must raise to protect orchestration correctness."""

    with pytest.raises(InvalidStateTransitionError):
        validate_transition("pending", "refunded")


def test_terminal_states_have_no_exits():
    """Cancelled and refunded orders never move again."""

    for terminal in ("cancelled", "refunded"):
        for target in ALLOWED_TRANSITIONS:
            with pytest.raises(InvalidStateTransitionError):
                validate_transition(terminal, target)


def test_paid_never_returns_to_pending():
    with pytest.raises(InvalidStateTransitionError):
        validate_transition("paid", "pending")


def test_table_covers_every_status():
    assert set(ALLOWED_TRANSITIONS) == {status.value for status in OrderStatus}


def test_invalid_transition_is_a_value_error():
    """Transition bugs fail loudly as ValueError, not as business outcomes."""

    with pytest.raises(ValueError):
        validate_transition("cancelled", "paid")
