"""
SQLite database implementation for beacon chain indexing data.

This module composes the per-table stores into one database object:

- Chain spec values keyed by config name, stored as untagged text
- The genesis record
- Execution payloads keyed by block root
- Withdrawals keyed by block root and position within the payload

Callers own every read-write transaction and pass it explicitly.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from beacondb.containers import Block, ExecutionPayload, Genesis, Withdrawal
from beacondb.types import Bytes32

from .chain_spec import ChainSpecStore
from .codec import SpecValue
from .config import StorageConfig
from .execution_payload import ExecutionPayloadStore
from .genesis import GenesisStore
from .service import Service
from .transaction import Transaction
from .withdrawals import WithdrawalStore


class SQLiteChainDatabase:
    """
    SQLite implementation of the ChainDatabase protocol.

    Creates missing tables on construction. All stores share one `Service`,
    so a transaction begun here can be passed to any of them.

    Usage::

        with SQLiteChainDatabase("chain.sqlite") as db:
            with db.transaction() as tx:
                db.set_genesis(tx, genesis)
                db.set_execution_payload(tx, block)

            payload = db.execution_payload(None, block.root)
    """

    def __init__(self, config: StorageConfig | Path | str) -> None:
        """
        Open the database and create missing tables.

        Args:
            config: Storage configuration, or a bare database path.
                    Use ":memory:" for an in-memory database.
        """
        self._service = Service(config)
        self._service.init_schema()

        self._chain_spec = ChainSpecStore(self._service)
        self._genesis = GenesisStore(self._service)
        self._withdrawals = WithdrawalStore(self._service)
        self._payloads = ExecutionPayloadStore(self._service, self._withdrawals)

    @property
    def service(self) -> Service:
        """The connection service shared by every store."""
        return self._service

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def begin_tx(self) -> Transaction:
        """Begin a read-write transaction."""
        return self._service.begin_tx()

    def begin_ro_tx(self) -> Transaction:
        """Begin a read-only transaction."""
        return self._service.begin_ro_tx()

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Run a block in a read-write transaction; see `Service.transaction`."""
        with self._service.transaction() as tx:
            yield tx

    # -------------------------------------------------------------------------
    # Chain Spec
    # -------------------------------------------------------------------------

    def set_chain_spec_value(self, tx: Transaction | None, key: str, value: SpecValue) -> None:
        """Store a chain spec value, replacing any previous value."""
        self._chain_spec.set_chain_spec_value(tx, key, value)

    def set_chain_spec(self, tx: Transaction | None, spec: Mapping[str, SpecValue]) -> None:
        """Store every entry of a chain spec."""
        self._chain_spec.set_chain_spec(tx, spec)

    def chain_spec(self, tx: Transaction | None) -> dict[str, SpecValue]:
        """Fetch every chain spec value."""
        return self._chain_spec.chain_spec(tx)

    def chain_spec_value(self, tx: Transaction | None, key: str) -> SpecValue:
        """Fetch one chain spec value."""
        return self._chain_spec.chain_spec_value(tx, key)

    # -------------------------------------------------------------------------
    # Genesis
    # -------------------------------------------------------------------------

    def set_genesis(self, tx: Transaction | None, genesis: Genesis) -> None:
        """Store the genesis record."""
        self._genesis.set_genesis(tx, genesis)

    def genesis(self, tx: Transaction | None) -> Genesis:
        """Fetch the genesis record."""
        return self._genesis.genesis(tx)

    def genesis_time(self, tx: Transaction | None) -> datetime:
        """Fetch the genesis time."""
        return self._genesis.genesis_time(tx)

    # -------------------------------------------------------------------------
    # Execution Payloads
    # -------------------------------------------------------------------------

    def set_execution_payload(self, tx: Transaction | None, block: Block) -> None:
        """Store a block's execution payload and its withdrawals."""
        self._payloads.set_execution_payload(tx, block)

    def execution_payload(self, tx: Transaction | None, root: Bytes32) -> ExecutionPayload | None:
        """Fetch the payload of one block."""
        return self._payloads.execution_payload(tx, root)

    def execution_payloads(
        self, tx: Transaction | None, roots: Sequence[Bytes32]
    ) -> dict[Bytes32, ExecutionPayload]:
        """Fetch the payloads of several blocks."""
        return self._payloads.execution_payloads(tx, roots)

    def withdrawals(self, tx: Transaction | None, root: Bytes32) -> list[Withdrawal]:
        """Fetch the withdrawals of one block, in payload order."""
        return self._withdrawals.withdrawals(tx, root)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the database."""
        self._service.close()

    def __enter__(self) -> SQLiteChainDatabase:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
