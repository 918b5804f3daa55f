"""Error taxonomy for wire-value decoding failures."""

import math
from typing import Any


class WireValueError(Exception):
    """Base class for values that cannot be decoded from the wire."""

    def __init__(self, reason: str, value: Any = None, field: str | None = None) -> None:
        self.reason = reason
        self.value = value
        self.field = field
        message = reason if field is None else f"{field}: {reason}"
        super().__init__(f"{message} (value={value!r})")

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly description of the failure."""

        value = self.value
        if isinstance(value, float) and not math.isfinite(value):
            value = repr(value)
        elif not isinstance(value, (str, int, float, bool, type(None))):
            value = repr(value)
        return {
            "type": type(self).__name__,
            "reason": self.reason,
            "field": self.field,
            "value": value,
        }


class FormatError(WireValueError):
    """Raised when a wire value does not match the expected layout."""


class UnsupportedValueError(WireValueError):
    """Raised when a wire token is well-formed but not a known member of its set.

    Signals a contract mismatch between client and service, so it is kept
    separate from FormatError.
    """
