"""Test helpers for beacondb unit tests."""

from .builders import (
    make_address,
    make_block,
    make_bytes32,
    make_genesis,
    make_payload,
    make_withdrawal,
)

__all__ = [
    "make_address",
    "make_block",
    "make_bytes32",
    "make_genesis",
    "make_payload",
    "make_withdrawal",
]
