"""Genesis record."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import field_validator

from beacondb.types import Bytes32, StrictBaseModel, Version


class Genesis(StrictBaseModel):
    """
    The parameters fixing the birth of a beacon chain.

    A chain has exactly one genesis. The validators root identifies it,
    the time anchors the slot clock, and the fork version seeds every
    signing domain until the first fork.
    """

    genesis_validators_root: Bytes32
    """Hash tree root of the genesis validator registry."""

    genesis_time: datetime
    """
    Start of slot 0.

    Stored with seconds resolution. Naive datetimes are taken as UTC and
    sub-second precision is dropped on construction.
    """

    genesis_fork_version: Version
    """Fork version in effect at genesis."""

    @field_validator("genesis_time")
    @classmethod
    def _normalize_time(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc).replace(microsecond=0)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Genesis:
        """
        Build a record from a beacon API `/eth/v1/beacon/genesis` data object.

        The API encodes every field as a string:

            {
              "genesis_time": "1606824023",
              "genesis_validators_root": "0x4b363db9...",
              "genesis_fork_version": "0x00000000"
            }

        Raises:
            KeyError: If a field is missing.
            ValueError: If a field is malformed.
        """
        return cls(
            genesis_validators_root=Bytes32(str(data["genesis_validators_root"])),
            genesis_time=datetime.fromtimestamp(int(data["genesis_time"]), tz=timezone.utc),
            genesis_fork_version=Version(str(data["genesis_fork_version"])),
        )
