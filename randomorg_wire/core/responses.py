"""Decoders that turn random.org JSON-RPC ``result`` objects into typed values."""

import base64
import uuid
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from randomorg_wire.core.errors import FormatError, UnsupportedValueError
from randomorg_wire.core.time_utils import format_wire_timestamp
from randomorg_wire.core.types import (
    DecodedResult,
    RandomLicense,
    RandomObject,
    RandomResult,
    RandomUsage,
    SignedRandomObject,
    SignedRandomResult,
)
from randomorg_wire.core.wire import WireValueParser, default_parser

USAGE_METHOD = "getUsage"
_GENERATE_PREFIX = "generate"
_SIGNED_PREFIX = "generateSigned"

# Method name suffix shared by the basic and signed variants.
_KNOWN_KINDS = frozenset(
    {
        "Integers",
        "IntegerSequences",
        "DecimalFractions",
        "Gaussians",
        "Strings",
        "UUIDs",
        "Blobs",
    }
)


def method_kind(method: str) -> tuple[str, bool]:
    """Split an RPC method name into its data kind and whether it is signed."""

    if method.startswith(_SIGNED_PREFIX):
        kind, signed = method[len(_SIGNED_PREFIX):], True
    elif method.startswith(_GENERATE_PREFIX):
        kind, signed = method[len(_GENERATE_PREFIX):], False
    else:
        raise UnsupportedValueError("unsupported RPC method", method, "method")

    if kind not in _KNOWN_KINDS:
        raise UnsupportedValueError("unsupported RPC method", method, "method")
    return kind, signed


def _require(source: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in source:
        raise FormatError("required member is missing", None, _join(path, key))
    return source[key]


def _require_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise FormatError("expected a JSON object", value, path or None)
    return value


def _as_count(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise FormatError("expected a non-negative integer", value, path)
    return value


def _as_int(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise FormatError("expected an integer", value, path)
    return value


def _as_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise FormatError("expected a string", value, path)
    return value


def _as_uuid(value: Any, path: str) -> uuid.UUID:
    if not isinstance(value, str):
        raise FormatError("expected a UUID string", value, path)
    try:
        return uuid.UUID(value)
    except ValueError as exc:
        raise FormatError("invalid UUID", value, path) from exc


def _as_int_sequence(value: Any, path: str) -> tuple[int, ...]:
    if not isinstance(value, list):
        raise FormatError("expected an integer sequence", value, path)
    return tuple(_as_int(item, f"{path}[{index}]") for index, item in enumerate(value))


def _freeze(value: Any) -> Any:
    """Copy passthrough JSON into tuples and read-only mappings."""

    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


class ResponseDecoder:
    """Decode whole ``result`` objects using a WireValueParser for leaf values."""

    def __init__(self, parser: WireValueParser | None = None) -> None:
        self.parser = parser or default_parser()
        self._item_parsers: dict[str, Callable[[Any, str], Any]] = {
            "Integers": _as_int,
            "IntegerSequences": _as_int_sequence,
            "DecimalFractions": self.parser.parse_decimal,
            "Gaussians": self.parser.parse_decimal,
            "Strings": _as_str,
            "UUIDs": _as_uuid,
            "Blobs": _as_str,
        }

    def decode_usage(self, result: Any) -> RandomUsage:
        """Decode a getUsage result."""

        result = _require_mapping(result, "result")
        return RandomUsage(
            status=self.parser.parse_api_key_status(_require(result, "status", "result"), "result.status"),
            bits_left=_as_int(_require(result, "bitsLeft", "result"), "result.bitsLeft"),
            requests_left=_as_int(_require(result, "requestsLeft", "result"), "result.requestsLeft"),
        )

    def decode_random_result(
        self,
        result: Any,
        signed: bool = False,
        kind: str | None = None,
    ) -> RandomResult | SignedRandomResult:
        """Decode a generate* result; ``kind`` selects how data items are parsed.

        Without a kind, data items are kept as they arrived on the wire,
        copied into tuples and read-only mappings.
        """

        result = _require_mapping(result, "result")
        random = _require_mapping(_require(result, "random", "result"), "result.random")

        raw_data = _require(random, "data", "result.random")
        if not isinstance(raw_data, list):
            raise FormatError("expected a JSON array", raw_data, "result.random.data")
        item_parser = self._item_parsers.get(kind) if kind is not None else None
        if item_parser is None:
            data = _freeze(raw_data)
        else:
            data = tuple(
                item_parser(item, f"result.random.data[{index}]") for index, item in enumerate(raw_data)
            )

        completion_time = self.parser.parse_timestamp(
            _require(random, "completionTime", "result.random"),
            "result.random.completionTime",
        )
        bits_used = _as_count(_require(result, "bitsUsed", "result"), "result.bitsUsed")
        bits_left = _as_int(_require(result, "bitsLeft", "result"), "result.bitsLeft")
        requests_left = _as_int(_require(result, "requestsLeft", "result"), "result.requestsLeft")
        advisory_delay = self.parser.parse_milliseconds(
            _require(result, "advisoryDelay", "result"),
            "result.advisoryDelay",
        )

        if not signed:
            return RandomResult(
                random=RandomObject(data=data, completion_time=completion_time),
                bits_used=bits_used,
                bits_left=bits_left,
                requests_left=requests_left,
                advisory_delay=advisory_delay,
            )

        return SignedRandomResult(
            random=SignedRandomObject(
                data=data,
                completion_time=completion_time,
                method=_as_str(_require(random, "method", "result.random"), "result.random.method"),
                hashed_api_key=self.parser.parse_base64(
                    _require(random, "hashedApiKey", "result.random"),
                    "result.random.hashedApiKey",
                ),
                serial_number=_as_count(
                    _require(random, "serialNumber", "result.random"),
                    "result.random.serialNumber",
                ),
                license=self._decode_license(_require(random, "license", "result.random")),
                user_data=_freeze(random.get("userData")),
            ),
            signature=self.parser.parse_base64(_require(result, "signature", "result"), "result.signature"),
            bits_used=bits_used,
            bits_left=bits_left,
            requests_left=requests_left,
            advisory_delay=advisory_delay,
        )

    def decode_response(self, method: Any, result: Any) -> DecodedResult:
        """Decode ``result`` according to the RPC ``method`` that produced it."""

        if not isinstance(method, str):
            raise UnsupportedValueError("unsupported RPC method", method, "method")
        if method == USAGE_METHOD:
            return self.decode_usage(result)

        kind, signed = method_kind(method)
        return self.decode_random_result(result, signed=signed, kind=kind)

    def _decode_license(self, value: Any) -> RandomLicense:
        path = "result.random.license"
        license_obj = _require_mapping(value, path)
        info_url = license_obj.get("infoUrl")
        return RandomLicense(
            type=_as_str(_require(license_obj, "type", path), f"{path}.type"),
            text=_as_str(_require(license_obj, "text", path), f"{path}.text"),
            info_url=None if info_url is None else self.parser.parse_uri(info_url, f"{path}.infoUrl"),
        )


def to_json_value(value: Any) -> Any:
    """Convert decoded values into JSON-serializable primitives."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_wire_timestamp(value)
    if isinstance(value, timedelta):
        return value // timedelta(milliseconds=1)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, uuid.UUID):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        return {field.name: to_json_value(getattr(value, field.name)) for field in fields(value)}
    if isinstance(value, Mapping):
        return {str(key): to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    return value


_DEFAULT_DECODER = ResponseDecoder()


def decode_usage(result: Any) -> RandomUsage:
    return _DEFAULT_DECODER.decode_usage(result)


def decode_random_result(
    result: Any,
    signed: bool = False,
    kind: str | None = None,
) -> RandomResult | SignedRandomResult:
    return _DEFAULT_DECODER.decode_random_result(result, signed=signed, kind=kind)


def decode_response(method: Any, result: Any) -> DecodedResult:
    return _DEFAULT_DECODER.decode_response(method, result)
