"""
Abstract interfaces of the storage layer.

Defines the Protocols that collaborating components program against.
Uses structural subtyping for flexibility.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from beacondb.containers import Block, ExecutionPayload, Genesis, Withdrawal
    from beacondb.types import Bytes32

    from .codec import SpecValue
    from .transaction import Transaction


class WithdrawalsSetter(Protocol):
    """
    Persists the withdrawals of a block.

    The execution payload store calls this after writing the payload row,
    inside the same transaction.
    """

    def set_withdrawals(self, tx: Transaction | None, block: Block) -> None:
        """
        Store the withdrawals carried by the block's execution payload.

        Args:
            tx: The caller's read-write transaction.
            block: Block whose payload withdrawals are stored.
        """
        ...


class ChainDatabase(Protocol):
    """
    Protocol for the beacon chain database as seen by block processors and
    API handlers.

    Every method takes the transaction as its first argument. Writes
    require a read-write transaction; reads given `None` run in an implicit
    read-only transaction.
    """

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def begin_tx(self) -> Transaction:
        """Begin a read-write transaction owned by the caller."""
        ...

    def begin_ro_tx(self) -> Transaction:
        """Begin a read-only transaction owned by the caller."""
        ...

    # -------------------------------------------------------------------------
    # Chain Spec
    # -------------------------------------------------------------------------

    def set_chain_spec_value(self, tx: Transaction | None, key: str, value: SpecValue) -> None:
        """Store a chain spec value, replacing any previous value."""
        ...

    def set_chain_spec(self, tx: Transaction | None, spec: Mapping[str, SpecValue]) -> None:
        """Store every entry of a chain spec."""
        ...

    def chain_spec(self, tx: Transaction | None) -> dict[str, SpecValue]:
        """Fetch every chain spec value."""
        ...

    def chain_spec_value(self, tx: Transaction | None, key: str) -> SpecValue:
        """Fetch one chain spec value; raises `NotFoundError` if absent."""
        ...

    # -------------------------------------------------------------------------
    # Genesis
    # -------------------------------------------------------------------------

    def set_genesis(self, tx: Transaction | None, genesis: Genesis) -> None:
        """Store the genesis record."""
        ...

    def genesis(self, tx: Transaction | None) -> Genesis:
        """Fetch the genesis record; raises `NotFoundError` if absent."""
        ...

    def genesis_time(self, tx: Transaction | None) -> datetime:
        """Fetch the genesis time; raises `NotFoundError` if absent."""
        ...

    # -------------------------------------------------------------------------
    # Execution Payloads
    # -------------------------------------------------------------------------

    def set_execution_payload(self, tx: Transaction | None, block: Block) -> None:
        """Store a block's execution payload and its withdrawals."""
        ...

    def execution_payload(self, tx: Transaction | None, root: Bytes32) -> ExecutionPayload | None:
        """Fetch the payload of one block, or None if it has none."""
        ...

    def execution_payloads(
        self, tx: Transaction | None, roots: Sequence[Bytes32]
    ) -> dict[Bytes32, ExecutionPayload]:
        """Fetch the payloads of several blocks; blocks without one are absent."""
        ...

    def withdrawals(self, tx: Transaction | None, root: Bytes32) -> list[Withdrawal]:
        """Fetch the withdrawals of one block, in payload order."""
        ...

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Release resources held by the database."""
        ...
