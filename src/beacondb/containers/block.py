"""Block record."""

from beacondb.types import Bytes32, StrictBaseModel, Uint64

from .execution_payload import ExecutionPayload


class Block(StrictBaseModel):
    """
    The parts of a beacon block the payload and withdrawal stores consume.

    The block itself is persisted by another component; payload rows refer
    to it by root.
    """

    root: Bytes32
    """Hash tree root of the block."""

    slot: Uint64
    """Slot the block was proposed in."""

    execution_payload: ExecutionPayload | None = None
    """Execution payload, absent before the Bellatrix fork."""
