"""Reusable type definitions for the beacon chain database."""

from .base import CamelModel, StrictBaseModel
from .byte_arrays import (
    ZERO_HASH,
    BaseBytes,
    Bytes4,
    Bytes20,
    Bytes32,
    Bytes48,
    Bytes96,
    Bytes256,
    DomainType,
    ForkDigest,
    Version,
    parse_hex,
)
from .uint import BaseUint, Uint64, Uint256

__all__ = [
    # Core types
    "BaseUint",
    "Uint64",
    "Uint256",
    "BaseBytes",
    "Bytes4",
    "Bytes20",
    "Bytes32",
    "Bytes48",
    "Bytes96",
    "Bytes256",
    "ZERO_HASH",
    # Semantic byte types
    "Version",
    "DomainType",
    "ForkDigest",
    # Models
    "CamelModel",
    "StrictBaseModel",
    # Helpers
    "parse_hex",
]
