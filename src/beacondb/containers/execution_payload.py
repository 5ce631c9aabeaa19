"""Execution payload and withdrawal records."""

from pydantic import Field

from beacondb.types import Bytes20, Bytes32, Bytes256, StrictBaseModel, Uint64, Uint256


class Withdrawal(StrictBaseModel):
    """A validator withdrawal processed by the execution layer."""

    index: Uint64
    """Global, monotonically increasing withdrawal index."""

    validator_index: Uint64
    """Index of the withdrawing validator."""

    address: Bytes20
    """Execution address receiving the funds."""

    amount: Uint64
    """Amount withdrawn, in Gwei."""


class ExecutionPayload(StrictBaseModel):
    """
    The execution-layer payload carried by a beacon block.

    Field widths follow the execution engine API. `base_fee_per_gas` is the
    only field that does not fit a 64-bit integer.
    """

    block_number: Uint64
    block_hash: Bytes32
    parent_hash: Bytes32
    fee_recipient: Bytes20
    state_root: Bytes32
    receipts_root: Bytes32
    logs_bloom: Bytes256
    prev_randao: Bytes32
    gas_limit: Uint64
    gas_used: Uint64
    base_fee_per_gas: Uint256
    timestamp: Uint64

    extra_data: bytes | None = None
    """Arbitrary proposer data. `None` (not stored) is distinct from `b""`."""

    excess_data_gas: Uint64 = Uint64(0)

    withdrawals: list[Withdrawal] = Field(default_factory=list)
    """
    Withdrawals processed in this payload.

    Persisted separately; payloads read back from the database carry an
    empty list.
    """

    def is_empty(self) -> bool:
        """
        Whether this is a placeholder payload.

        Between the Bellatrix fork and the terminal total difficulty, blocks
        carry a payload whose block hash is all zeros.
        """
        return self.block_hash.is_zero()
