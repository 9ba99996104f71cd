"""ID parsing and timestamp utilities."""

from datetime import datetime, timezone

from stateflow.errors import InvalidInputError

# ids are stored as SQLite INTEGER (signed 64-bit)
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp with millisecond precision."""
    return format_timestamp(datetime.now(timezone.utc))


def format_timestamp(value: datetime) -> str:
    """Format a datetime the way the API exposes it: ms precision plus offset.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="milliseconds")


def parse_int_id(value: str | int | None, name: str = "id") -> int:
    """Parse a string-encoded 64-bit integer id, raising InvalidInputError if it is not one."""
    if isinstance(value, bool):
        raise InvalidInputError(f"invalid {name}")
    if isinstance(value, int):
        parsed = value
    else:
        text = (value or "").strip()
        try:
            parsed = int(text, 10)
        except ValueError:
            raise InvalidInputError(f"invalid {name}: {value!r}") from None
    if not INT64_MIN <= parsed <= INT64_MAX:
        raise InvalidInputError(f"invalid {name}: {value!r} is out of range")
    return parsed
