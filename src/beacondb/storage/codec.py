"""
Chain spec value codec.

Chain spec values are stored as text with no type tag. Writing goes
through `encode_spec_value`, a closed dispatch over the supported value
types. Reading goes through `decode_spec_value`, which recovers the type
from the text and the naming conventions of the consensus config keys:

    DOMAIN_BEACON_ATTESTER  "0x01000000"  -> DomainType
    GENESIS_FORK_VERSION    "0x00000000"  -> Version
    DEPOSIT_CONTRACT_...    "0x00000000219ab540356cbb839cbe05303d7705fa" -> bytes
    MIN_GENESIS_TIME        "1606824000"  -> datetime
    SECONDS_PER_SLOT        "12"          -> timedelta
    SLOTS_PER_EPOCH         "32"          -> Uint64
    CONFIG_NAME             "mainnet"     -> str

A stored "0" under a time or duration key decodes to `Uint64(0)`: zero
marks an unset value in rows written so far, so a zero timestamp or
duration cannot be represented.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from functools import singledispatch
from typing import Final, TypeAlias

from beacondb.types import BaseBytes, BaseUint, DomainType, Uint64, Version, parse_hex

from .exceptions import SpecValueTypeError

SpecValue: TypeAlias = BaseUint | int | BaseBytes | bytes | timedelta | datetime | str
"""The closed set of values a chain spec entry can hold."""

DOMAIN_PREFIX: Final = "DOMAIN_"
FORK_VERSION_SUFFIX: Final = "_FORK_VERSION"
TIME_SUFFIX: Final = "_TIME"
DURATION_PREFIX: Final = "SECONDS_PER_"
DELAY_SUFFIX: Final = "_DELAY"

_UNSIGNED_RE = re.compile(r"[0-9]+")
_SIGNED_RE = re.compile(r"[+-]?[0-9]+")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@singledispatch
def encode_spec_value(value: object) -> str:
    """
    Encode a chain spec value to its stored text.

    Concrete specializations are registered below with `@encode_spec_value.register`.

    Raises:
        SpecValueTypeError: If `value` has no registered specialization.
    """
    raise SpecValueTypeError(value)


@encode_spec_value.register
def _encode_int(value: int) -> str:
    """Unsigned integers (slots, epochs, indices, Gwei) are decimal digits."""
    if isinstance(value, bool):
        raise SpecValueTypeError(value, "booleans are not integers here")
    if int(value) < 0:
        raise SpecValueTypeError(value, "integers must be unsigned")
    return str(int(value))


@encode_spec_value.register
def _encode_bytes(value: bytes) -> str:
    """Roots, versions, domain types, keys and raw byte strings are 0x-hex."""
    return "0x" + bytes(value).hex()


@encode_spec_value.register
def _encode_bytearray(value: bytearray) -> str:
    return "0x" + bytes(value).hex()


@encode_spec_value.register
def _encode_duration(value: timedelta) -> str:
    """Durations are whole seconds, truncated toward zero."""
    return str(math.trunc(value.total_seconds()))


@encode_spec_value.register
def _encode_timestamp(value: datetime) -> str:
    """Timestamps are Unix seconds. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return str(math.floor(value.timestamp()))


@encode_spec_value.register
def _encode_text(value: str) -> str:
    return value


def _parse_unsigned(value: str) -> int | None:
    """Parse decimal digits into a uint64, or return None."""
    if not _UNSIGNED_RE.fullmatch(value):
        return None
    n = int(value)
    return n if n <= Uint64.max_value() else None


def _parse_signed(value: str) -> int | None:
    """Parse an optionally signed decimal into an int64, or return None."""
    if not _SIGNED_RE.fullmatch(value):
        return None
    n = int(value)
    return n if _INT64_MIN <= n <= _INT64_MAX else None


def _parse_hex(value: str) -> bytes | None:
    try:
        return parse_hex(value)
    except ValueError:
        return None


def decode_spec_value(key: str, value: str) -> SpecValue:
    """
    Decode stored chain spec text back to a typed value.

    The rules are tried in order and the first that applies wins. A rule
    whose parse fails falls through to the next one, so decoding never
    raises.
    """
    # Signing domain types.
    if key.startswith(DOMAIN_PREFIX):
        raw = _parse_hex(value)
        if raw is not None:
            return DomainType.from_column(raw)

    # Fork versions.
    if key.endswith(FORK_VERSION_SUFFIX):
        raw = _parse_hex(value)
        if raw is not None:
            return Version.from_column(raw)

    # Any other hex string.
    if value.startswith("0x"):
        raw = _parse_hex(value)
        if raw is not None:
            return raw

    # Timestamps; zero means unset and falls through.
    if key.endswith(TIME_SUFFIX):
        n = _parse_signed(value)
        if n:
            try:
                return datetime.fromtimestamp(n, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                pass  # outside datetime's year range

    # Durations; zero means unset and falls through.
    if key.startswith(DURATION_PREFIX) or key.endswith(DELAY_SUFFIX):
        n = _parse_unsigned(value)
        if n:
            try:
                return timedelta(seconds=n)
            except OverflowError:
                pass  # beyond timedelta's range

    # Integers.
    if value == "0":
        return Uint64(0)
    n = _parse_unsigned(value)
    if n:
        return Uint64(n)

    return value
