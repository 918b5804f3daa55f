"""Deterministic parsing of random.org wire values into typed values.

Every parser here is a pure function of its input: no I/O, no logging, no
shared mutable state. Inputs either decode or raise a WireValueError subclass.
"""

import base64
import math
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any
from urllib.parse import urlsplit

from randomorg_wire.core.errors import FormatError, UnsupportedValueError
from randomorg_wire.core.types import ApiKeyStatus

MAX_FRACTION_DIGITS = 6

_API_KEY_STATUSES: dict[str, ApiKeyStatus] = {
    "stopped": ApiKeyStatus.STOPPED,
    "running": ApiKeyStatus.RUNNING,
}

_TIMESTAMP_PATTERN = (
    r"(?P<year>[0-9]{{4}})-(?P<month>[0-9]{{2}})-(?P<day>[0-9]{{2}})"
    r" (?P<hour>[0-9]{{2}}):(?P<minute>[0-9]{{2}}):(?P<second>[0-9]{{2}})"
    r"\.(?P<fraction>[0-9]{{{min_digits},{max_digits}}})"
    r"(?P<sign>[+-])(?P<offset_hour>[0-9]{{2}}):(?P<offset_minute>[0-9]{{2}})"
)


class WireValueParser:
    """Stateless parser for wire-format values.

    The accepted count of fractional-second digits is bounded by
    ``min_fraction_digits`` and ``max_fraction_digits``; setting both to 6
    gives the strict fixed-width layout.
    """

    __slots__ = ("min_fraction_digits", "max_fraction_digits", "_timestamp_re")

    def __init__(self, min_fraction_digits: int = 1, max_fraction_digits: int = MAX_FRACTION_DIGITS) -> None:
        if not 1 <= min_fraction_digits <= max_fraction_digits <= MAX_FRACTION_DIGITS:
            raise ValueError(
                "fraction digit bounds must satisfy "
                f"1 <= min <= max <= {MAX_FRACTION_DIGITS}, "
                f"got min={min_fraction_digits} max={max_fraction_digits}"
            )
        self.min_fraction_digits = min_fraction_digits
        self.max_fraction_digits = max_fraction_digits
        self._timestamp_re = re.compile(
            _TIMESTAMP_PATTERN.format(min_digits=min_fraction_digits, max_digits=max_fraction_digits)
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(min_fraction_digits={self.min_fraction_digits}, "
            f"max_fraction_digits={self.max_fraction_digits})"
        )

    def parse_timestamp(self, value: Any, field: str | None = None) -> datetime:
        """Parse ``YYYY-MM-DD HH:MM:SS.F±HH:MM`` into an aware UTC datetime."""

        if not isinstance(value, str):
            raise FormatError("timestamp must be a string", value, field)

        match = self._timestamp_re.fullmatch(value)
        if match is None:
            raise FormatError(
                "timestamp does not match YYYY-MM-DD HH:MM:SS.F±HH:MM "
                f"with {self.min_fraction_digits}-{self.max_fraction_digits} fraction digits",
                value,
                field,
            )

        parts = match.groupdict()
        offset_hour = int(parts["offset_hour"])
        offset_minute = int(parts["offset_minute"])
        if offset_hour > 23 or offset_minute > 59:
            raise FormatError("timestamp offset is out of range", value, field)

        offset = timedelta(hours=offset_hour, minutes=offset_minute)
        if parts["sign"] == "-":
            offset = -offset

        try:
            moment = datetime(
                int(parts["year"]),
                int(parts["month"]),
                int(parts["day"]),
                int(parts["hour"]),
                int(parts["minute"]),
                int(parts["second"]),
                int(parts["fraction"].ljust(MAX_FRACTION_DIGITS, "0")),
                tzinfo=timezone(offset),
            )
            return moment.astimezone(timezone.utc)
        except (OverflowError, ValueError) as exc:
            raise FormatError(f"timestamp is not a valid instant: {exc}", value, field) from exc

    def parse_api_key_status(self, value: Any, field: str | None = None) -> ApiKeyStatus:
        """Map an exact ``stopped``/``running`` token to ApiKeyStatus."""

        status = _API_KEY_STATUSES.get(value) if isinstance(value, str) else None
        if status is None:
            raise UnsupportedValueError("unsupported API key status", value, field)
        return status

    def parse_decimal(self, value: Any, field: str | None = None) -> Decimal:
        """Convert a JSON integer or float into a Decimal."""

        if isinstance(value, bool):
            raise FormatError("number must not be a boolean", value, field)
        if isinstance(value, int):
            return Decimal(value)
        if isinstance(value, float):
            if not math.isfinite(value):
                raise FormatError("number must be finite", value, field)
            return Decimal(repr(value))
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise FormatError("number must be finite", value, field)
            return value
        raise FormatError("value is not a JSON number", value, field)

    def parse_milliseconds(self, value: Any, field: str | None = None) -> timedelta:
        """Convert an integer count of milliseconds into a timedelta."""

        if isinstance(value, bool) or not isinstance(value, int):
            raise FormatError("milliseconds must be an integer", value, field)
        try:
            return timedelta(milliseconds=value)
        except OverflowError as exc:
            raise FormatError("milliseconds out of range", value, field) from exc

    def parse_base64(self, value: Any, field: str | None = None) -> bytes:
        """Decode strict standard base64 text."""

        if not isinstance(value, str):
            raise FormatError("base64 value must be a string", value, field)
        try:
            return base64.b64decode(value, validate=True)
        except ValueError as exc:
            raise FormatError(f"invalid base64: {exc}", value, field) from exc

    def parse_uri(self, value: Any, field: str | None = None) -> str:
        """Validate that ``value`` is an absolute URI and return it unchanged."""

        if not isinstance(value, str):
            raise FormatError("URI must be a string", value, field)
        try:
            parts = urlsplit(value)
        except ValueError as exc:
            raise FormatError(f"invalid URI: {exc}", value, field) from exc
        if not parts.scheme or value != value.strip():
            raise FormatError("URI must be absolute", value, field)
        # urn: and mailto: carry no authority, but "scheme://" must name one
        has_authority = value[len(parts.scheme) + 1:].startswith("//")
        if (has_authority and not parts.netloc) or not (parts.netloc or parts.path):
            raise FormatError("URI must be absolute", value, field)
        return value


_DEFAULT_PARSER = WireValueParser()


def default_parser() -> WireValueParser:
    """Return the shared parser with default fraction bounds."""

    return _DEFAULT_PARSER


def parse_timestamp(value: Any, field: str | None = None) -> datetime:
    return _DEFAULT_PARSER.parse_timestamp(value, field)


def parse_api_key_status(value: Any, field: str | None = None) -> ApiKeyStatus:
    return _DEFAULT_PARSER.parse_api_key_status(value, field)


def parse_decimal(value: Any, field: str | None = None) -> Decimal:
    return _DEFAULT_PARSER.parse_decimal(value, field)


def parse_milliseconds(value: Any, field: str | None = None) -> timedelta:
    return _DEFAULT_PARSER.parse_milliseconds(value, field)


def parse_base64(value: Any, field: str | None = None) -> bytes:
    return _DEFAULT_PARSER.parse_base64(value, field)


def parse_uri(value: Any, field: str | None = None) -> str:
    return _DEFAULT_PARSER.parse_uri(value, field)
