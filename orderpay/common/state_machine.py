"""Order state machine transitions enforced by the Order entity."""

from orderpay.domain.errors import InvalidStateTransitionError

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"paid", "cancelled"},
    "paid": {"refunded"},
    "cancelled": set(),
    "refunded": set(),
}


def validate_transition(current: str, new: str) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidStateTransitionError(f"Invalid transition: {current} -> {new}")
