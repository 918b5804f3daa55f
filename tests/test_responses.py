"""Whole getUsage and generate* results decode into typed values."""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import pytest

from randomorg_wire.core.errors import FormatError, UnsupportedValueError
from randomorg_wire.core.responses import (
    ResponseDecoder,
    decode_random_result,
    decode_response,
    decode_usage,
    method_kind,
    to_json_value,
)
from randomorg_wire.core.types import ApiKeyStatus, RandomResult, RandomUsage, SignedRandomResult
from randomorg_wire.core.wire import WireValueParser


def _usage_result(**overrides: Any) -> dict[str, Any]:
    result = {
        "status": "running",
        "creationTime": "2013-02-01 17:53:40Z",
        "bitsLeft": 998532,
        "requestsLeft": 199996,
        "totalBits": 1646421,
        "totalRequests": 65036,
    }
    result.update(overrides)
    return result


def _integers_result(**overrides: Any) -> dict[str, Any]:
    result: dict[str, Any] = {
        "random": {
            "data": [1, 5, 4, 6, 6, 4, 2, 3, 5, 1],
            "completionTime": "2011-10-10 13:19:12.000000+00:00",
        },
        "bitsUsed": 16,
        "bitsLeft": 199984,
        "requestsLeft": 9999,
        "advisoryDelay": 1500,
    }
    result.update(overrides)
    return result


def _signed_integers_result() -> dict[str, Any]:
    return {
        "random": {
            "method": "generateSignedIntegers",
            "hashedApiKey": "a2V5LWhhc2g=",
            "n": 6,
            "min": 1,
            "max": 6,
            "replacement": True,
            "base": 10,
            "data": [2, 6, 1, 3, 4, 4],
            "license": {
                "type": "developer",
                "text": "Random values licensed strictly for development and testing only",
                "infoUrl": None,
            },
            "userData": {"draw": 7},
            "completionTime": "2013-09-30 16:58:03.000000+02:00",
            "serialNumber": 4,
        },
        "signature": "c2lnbmF0dXJl",
        "bitsUsed": 16,
        "bitsLeft": 199984,
        "requestsLeft": 9999,
        "advisoryDelay": 0,
    }


def test_decode_usage() -> None:
    assert decode_usage(_usage_result()) == RandomUsage(
        status=ApiKeyStatus.RUNNING,
        bits_left=998532,
        requests_left=199996,
    )


def test_decode_usage_unknown_status_is_unsupported() -> None:
    with pytest.raises(UnsupportedValueError) as exc_info:
        decode_usage(_usage_result(status="paused"))

    assert exc_info.value.field == "result.status"


def test_decode_usage_missing_member_is_format_error() -> None:
    result = _usage_result()
    del result["bitsLeft"]

    with pytest.raises(FormatError) as exc_info:
        decode_usage(result)

    assert exc_info.value.field == "result.bitsLeft"


@pytest.mark.parametrize("bits_left", ["10", 1.5, True, None])
def test_decode_usage_rejects_non_integer_counts(bits_left: object) -> None:
    with pytest.raises(FormatError):
        decode_usage(_usage_result(bitsLeft=bits_left))


def test_decode_usage_requires_object() -> None:
    with pytest.raises(FormatError):
        decode_usage(["running", 1, 2])


def test_decode_integers_response() -> None:
    decoded = decode_response("generateIntegers", _integers_result())

    assert isinstance(decoded, RandomResult)
    assert decoded.random.data == (1, 5, 4, 6, 6, 4, 2, 3, 5, 1)
    assert decoded.random.completion_time == datetime(2011, 10, 10, 13, 19, 12, tzinfo=timezone.utc)
    assert decoded.bits_used == 16
    assert decoded.bits_left == 199984
    assert decoded.requests_left == 9999
    assert decoded.advisory_delay == timedelta(milliseconds=1500)


def test_decode_getusage_response() -> None:
    assert isinstance(decode_response("getUsage", _usage_result()), RandomUsage)


def test_decode_decimal_fractions_response() -> None:
    result = _integers_result(random={"data": [0.0753205, 0.59881], "completionTime": "2011-10-10 13:19:12.000000+00:00"})

    decoded = decode_response("generateDecimalFractions", result)

    assert decoded.random.data == (Decimal("0.0753205"), Decimal("0.59881"))


def test_decode_integer_sequences_response() -> None:
    result = _integers_result(random={"data": [[1, 2], [3]], "completionTime": "2011-10-10 13:19:12.000000+00:00"})

    decoded = decode_response("generateIntegerSequences", result)

    assert decoded.random.data == ((1, 2), (3,))


def test_decode_uuids_response() -> None:
    value = "47849fd4-b790-4c9f-bb3e-b3f62d3cd4e5"
    result = _integers_result(random={"data": [value], "completionTime": "2011-10-10 13:19:12.000000+00:00"})

    decoded = decode_response("generateUUIDs", result)

    assert decoded.random.data == (uuid.UUID(value),)


def test_decode_blobs_keeps_wire_strings() -> None:
    result = _integers_result(random={"data": ["aGVsbG8="], "completionTime": "2011-10-10 13:19:12.000000+00:00"})

    assert decode_response("generateBlobs", result).random.data == ("aGVsbG8=",)


def test_bad_data_item_reports_its_index() -> None:
    result = _integers_result(random={"data": [1, "2"], "completionTime": "2011-10-10 13:19:12.000000+00:00"})

    with pytest.raises(FormatError) as exc_info:
        decode_response("generateIntegers", result)

    assert exc_info.value.field == "result.random.data[1]"


def test_decode_without_kind_keeps_items() -> None:
    decoded = decode_random_result(_integers_result())

    assert decoded.random.data == (1, 5, 4, 6, 6, 4, 2, 3, 5, 1)


def test_bad_completion_time_is_format_error() -> None:
    result = _integers_result(random={"data": [], "completionTime": "2011-10-10T13:19:12Z"})

    with pytest.raises(FormatError) as exc_info:
        decode_response("generateIntegers", result)

    assert exc_info.value.field == "result.random.completionTime"


def test_float_advisory_delay_is_format_error() -> None:
    with pytest.raises(FormatError):
        decode_response("generateIntegers", _integers_result(advisoryDelay=1.5))


def test_decode_signed_integers_response() -> None:
    decoded = decode_response("generateSignedIntegers", _signed_integers_result())

    assert isinstance(decoded, SignedRandomResult)
    assert decoded.random.data == (2, 6, 1, 3, 4, 4)
    assert decoded.random.method == "generateSignedIntegers"
    assert decoded.random.hashed_api_key == b"key-hash"
    assert decoded.random.serial_number == 4
    assert decoded.random.license.type == "developer"
    assert decoded.random.license.info_url is None
    assert decoded.random.user_data == {"draw": 7}
    assert decoded.random.completion_time == datetime(2013, 9, 30, 14, 58, 3, tzinfo=timezone.utc)
    assert decoded.signature == b"signature"


def test_signed_license_info_url_must_be_absolute() -> None:
    result = _signed_integers_result()
    result["random"]["license"]["infoUrl"] = "/licensing/"

    with pytest.raises(FormatError) as exc_info:
        decode_response("generateSignedIntegers", result)

    assert exc_info.value.field == "result.random.license.infoUrl"


def test_signed_result_requires_signature() -> None:
    result = _signed_integers_result()
    del result["signature"]

    with pytest.raises(FormatError):
        decode_response("generateSignedIntegers", result)


def test_invalid_signature_base64_is_format_error() -> None:
    result = _signed_integers_result()
    result["signature"] = "not base64!"

    with pytest.raises(FormatError):
        decode_response("generateSignedIntegers", result)


@pytest.mark.parametrize("method", ["generateFoo", "generateSigned", "verifySignature", "", 42, None])
def test_unknown_methods_are_unsupported(method: object) -> None:
    with pytest.raises(UnsupportedValueError):
        decode_response(method, _integers_result())


def test_method_kind() -> None:
    assert method_kind("generateGaussians") == ("Gaussians", False)
    assert method_kind("generateSignedUUIDs") == ("UUIDs", True)


def test_strict_decoder_rejects_short_fractions() -> None:
    decoder = ResponseDecoder(WireValueParser(min_fraction_digits=6, max_fraction_digits=6))
    result = _integers_result(random={"data": [], "completionTime": "2011-10-10 13:19:12.5+00:00"})

    with pytest.raises(FormatError):
        decoder.decode_response("generateIntegers", result)


def test_to_json_value_renders_signed_result() -> None:
    rendered = to_json_value(decode_response("generateSignedIntegers", _signed_integers_result()))

    assert rendered["signature"] == "c2lnbmF0dXJl"
    assert rendered["advisory_delay"] == 0
    assert rendered["random"]["completion_time"] == "2013-09-30 14:58:03.000000+00:00"
    assert rendered["random"]["hashed_api_key"] == "a2V5LWhhc2g="
    assert rendered["random"]["data"] == [2, 6, 1, 3, 4, 4]
    assert rendered["random"]["license"] == {
        "type": "developer",
        "text": "Random values licensed strictly for development and testing only",
        "info_url": None,
    }


def test_to_json_value_renders_usage_and_decimals() -> None:
    assert to_json_value(decode_usage(_usage_result())) == {
        "status": "running",
        "bits_left": 998532,
        "requests_left": 199996,
    }
    assert to_json_value([Decimal("0.5"), timedelta(seconds=2)]) == ["0.5", 2000]


def test_passthrough_data_is_copied_read_only() -> None:
    result = _integers_result(random={"data": [[1, 2], {"k": [3]}], "completionTime": "2011-10-10 13:19:12.000000+00:00"})

    decoded = decode_random_result(result)
    result["random"]["data"][0].append(99)
    result["random"]["data"][1]["k"].append(4)

    assert decoded.random.data[0] == (1, 2)
    assert decoded.random.data[1]["k"] == (3,)
    with pytest.raises(TypeError):
        decoded.random.data[1]["k"] = ()


def test_signed_user_data_is_isolated_from_input() -> None:
    result = _signed_integers_result()

    decoded = decode_response("generateSignedIntegers", result)
    result["random"]["userData"]["draw"] = 8

    assert decoded.random.user_data == {"draw": 7}
    with pytest.raises(TypeError):
        decoded.random.user_data["draw"] = 9
    assert to_json_value(decoded)["random"]["user_data"] == {"draw": 7}
