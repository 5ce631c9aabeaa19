"""
Fixed-width byte array types.

Every hash, root, address and version stored by the database has an exact
width. `BaseBytes` subclasses `bytes`, so values pass straight into the
SQLite driver as BLOBs, and validates that width on construction.
"""

from __future__ import annotations

import re
from typing import Any, ClassVar, Iterable, SupportsIndex

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")


def parse_hex(value: str) -> bytes:
    """
    Parse a hex string, with or without a '0x' prefix, into bytes.

    Stricter than `bytes.fromhex`: whitespace is rejected, so a value
    either is canonical hex or it is not.

    Raises:
        ValueError: If `value` is not an even number of hex digits.
    """
    digits = value.removeprefix("0x")
    if not _HEX_RE.fullmatch(digits):
        raise ValueError(f"invalid hex string: {value!r}")
    return bytes.fromhex(digits)


def _coerce_to_bytes(value: Any) -> bytes:
    """
    Coerce a variety of inputs to raw bytes.

    Accepts:
      - `bytes` / `bytearray` (returned as immutable `bytes`)
      - Iterables of integers in [0, 255]
      - Hex strings, with or without a '0x' prefix (e.g. "0xdeadbeef" or "deadbeef")

    Raises:
      ValueError / TypeError if conversion is not possible or out-of-range.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return parse_hex(value)
    if isinstance(value, Iterable):
        # bytes(bytearray(iterable)) enforces each element is an int in 0..255
        return bytes(bytearray(value))
    return bytes(value)


class BaseBytes(bytes):
    """
    A base class for fixed-length byte types that inherits from `bytes`.

    Subclasses set:
      - `LENGTH`: exact number of bytes the instance must contain.

    Instances are immutable byte objects with strict length checking.
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Create and validate a new Bytes instance.

        Args:
            value: Any value coercible to bytes (see `_coerce_to_bytes`).

        Raises:
            ValueError: If the resulting byte length differs from `LENGTH`.
        """
        if not hasattr(cls, "LENGTH"):
            raise TypeError(f"{cls.__name__} must define LENGTH")

        b = _coerce_to_bytes(value)
        if len(b) != cls.LENGTH:
            raise ValueError(f"{cls.__name__} expects exactly {cls.LENGTH} bytes, got {len(b)}")
        return super().__new__(cls, b)

    @classmethod
    def zero(cls) -> Self:
        """Create a new instance filled with zero bytes."""
        return cls(b"\x00" * cls.LENGTH)

    @classmethod
    def from_column(cls, value: bytes) -> Self:
        """
        Build an instance from a stored BLOB.

        Shorter values are zero-padded on the right and longer values are
        truncated to `LENGTH`. Rows written by older indexer versions were
        copied into fixed arrays the same way.
        """
        return cls(value[: cls.LENGTH].ljust(cls.LENGTH, b"\x00"))

    def is_zero(self) -> bool:
        """Return whether every byte is zero."""
        return not any(self)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        1. If the input is already an instance of the class, accept it.
        2. Otherwise, validate bytes of exactly LENGTH and instantiate the class.
        3. For serialization, emit the 0x-prefixed hex form used by the beacon API.
        """
        from_bytes_validator = core_schema.no_info_plain_validator_function(cls)

        python_schema = core_schema.chain_schema(
            [
                core_schema.bytes_schema(min_length=cls.LENGTH, max_length=cls.LENGTH),
                from_bytes_validator,
            ]
        )

        return core_schema.union_schema(
            [
                core_schema.is_instance_schema(cls),
                python_schema,
            ],
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda x: "0x" + x.hex(), when_used="json"
            ),
        )

    def __repr__(self) -> str:
        """Return a string representation of the bytes."""
        tname = type(self).__name__
        return f"{tname}({self.hex()})"

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return hash((type(self), bytes(self)))

    def hex(self, sep: str | bytes | None = None, bytes_per_sep: SupportsIndex = 1) -> str:
        """Return the hexadecimal string representation of the underlying bytes."""
        return bytes(self).hex() if sep is None else bytes(self).hex(sep, bytes_per_sep)


class Bytes4(BaseBytes):
    """Fixed-size byte array of exactly 4 bytes."""

    LENGTH = 4


class Bytes20(BaseBytes):
    """Fixed-size byte array of exactly 20 bytes (execution-layer address)."""

    LENGTH = 20


class Bytes32(BaseBytes):
    """Fixed-size byte array of exactly 32 bytes."""

    LENGTH = 32


class Bytes48(BaseBytes):
    """Fixed-size byte array of exactly 48 bytes (BLS public key)."""

    LENGTH = 48


class Bytes96(BaseBytes):
    """Fixed-size byte array of exactly 96 bytes (BLS signature)."""

    LENGTH = 96


class Bytes256(BaseBytes):
    """Fixed-size byte array of exactly 256 bytes (logs bloom)."""

    LENGTH = 256


class Version(Bytes4):
    """A 4-byte fork version, e.g. `GENESIS_FORK_VERSION`."""


class DomainType(Bytes4):
    """A 4-byte signing domain type, e.g. `DOMAIN_BEACON_ATTESTER`."""


class ForkDigest(Bytes4):
    """A 4-byte digest of a fork version and genesis validators root."""


ZERO_HASH: Bytes32 = Bytes32.zero()
"""The all-zero 32-byte hash."""
