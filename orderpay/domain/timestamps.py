"""Timestamp normalization and the flat-map wire format (`YYYY-MM-DD HH:MM:SS`, UTC).

Entities keep full precision; only the wire format drops sub-second digits.
"""

from datetime import datetime, timezone

WIRE_FORMAT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize(value: datetime) -> datetime:
    """Return `value` as an aware UTC datetime.

    Naive datetimes are taken to be UTC already.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return normalize(value).strftime(WIRE_FORMAT)


def parse_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.strptime(value, WIRE_FORMAT).replace(tzinfo=timezone.utc)
