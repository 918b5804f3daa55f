"""Time helpers for consistent UTC timestamps across services."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime with timezone attached."""

    return datetime.now(timezone.utc)


def format_wire_timestamp(moment: datetime) -> str:
    """Render an aware datetime in the wire layout, normalized to UTC."""

    if moment.tzinfo is None or moment.utcoffset() is None:
        raise ValueError("cannot format a naive datetime as a wire timestamp")

    utc = moment.astimezone(timezone.utc)
    # strftime("%Y") does not zero-pad years below 1000 on every platform
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d} "
        f"{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}.{utc.microsecond:06d}+00:00"
    )
