"""Immutable value types produced by wire decoding."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any


class ApiKeyStatus(Enum):
    """Whether a service API key is active."""

    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True, slots=True)
class RandomUsage:
    """Decoded result of a getUsage call."""

    status: ApiKeyStatus
    bits_left: int
    requests_left: int


@dataclass(frozen=True, slots=True)
class RandomLicense:
    """License terms attached to signed random data."""

    type: str
    text: str
    info_url: str | None = None


@dataclass(frozen=True, slots=True)
class RandomObject:
    """Random data together with its generation time."""

    data: tuple[Any, ...]
    completion_time: datetime


@dataclass(frozen=True, slots=True)
class SignedRandomObject:
    """Signed random data with the fields needed for later verification."""

    data: tuple[Any, ...]
    completion_time: datetime
    method: str
    hashed_api_key: bytes
    serial_number: int
    license: RandomLicense
    user_data: Any = None


@dataclass(frozen=True, slots=True)
class RandomResult:
    """Decoded result of a basic generate* call."""

    random: RandomObject
    bits_used: int
    bits_left: int
    requests_left: int
    advisory_delay: timedelta


@dataclass(frozen=True, slots=True)
class SignedRandomResult:
    """Decoded result of a generateSigned* call."""

    random: SignedRandomObject
    signature: bytes
    bits_used: int
    bits_left: int
    requests_left: int
    advisory_delay: timedelta


DecodedResult = RandomUsage | RandomResult | SignedRandomResult
