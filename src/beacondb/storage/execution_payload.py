"""Execution payload storage."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from decimal import Decimal

from beacondb.containers import Block, ExecutionPayload
from beacondb.types import Bytes20, Bytes32, Bytes256, Uint64, Uint256

from .database import WithdrawalsSetter
from .exceptions import ChainDBError, StoreFailureError
from .namespaces import EXECUTION_PAYLOADS
from .service import Service
from .transaction import Transaction, require_transaction, store_errors

logger = logging.getLogger(__name__)

_COLUMNS = (
    "block_root",
    "block_number",
    "block_hash",
    "parent_hash",
    "fee_recipient",
    "state_root",
    "receipts_root",
    "logs_bloom",
    "prev_randao",
    "gas_limit",
    "gas_used",
    "base_fee_per_gas",
    "timestamp",
    "extra_data",
    "excess_data_gas",
)

_UPSERT = f"""
    INSERT INTO {EXECUTION_PAYLOADS.TABLE_NAME} ({", ".join(_COLUMNS)})
    VALUES ({", ".join("?" for _ in _COLUMNS)})
    ON CONFLICT (block_root) DO UPDATE
    SET {", ".join(f"{col} = excluded.{col}" for col in _COLUMNS[1:])}
"""

_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM {EXECUTION_PAYLOADS.TABLE_NAME}"

BATCH_SIZE = 500
"""Roots bound per query by `execution_payloads`, well under SQLite's variable limit."""


class ExecutionPayloadStore:
    """
    Storage of the execution payloads carried by beacon blocks.

    Payload rows are keyed by block root. Withdrawals are written through
    the `WithdrawalsSetter` collaborator in the same transaction.
    """

    def __init__(self, service: Service, withdrawals: WithdrawalsSetter) -> None:
        self._service = service
        self._withdrawals = withdrawals

    def set_execution_payload(self, tx: Transaction | None, block: Block) -> None:
        """
        Store the execution payload of a block and its withdrawals.

        Nothing is written for blocks without a payload or with a
        placeholder payload (all-zero block hash). A failure leaves the
        transaction open; rolling it back is up to the caller.

        Raises:
            NoActiveTransactionError: If `tx` cannot carry a write.
            StoreFailureError: If the payload or its withdrawals cannot be
                stored.
        """
        tx = require_transaction(tx, "set_execution_payload")

        payload = block.execution_payload
        if payload is None:
            return
        if payload.is_empty():
            logger.debug("Skipping empty execution payload of block %s", block.root.hex())
            return

        with store_errors("set_execution_payload", key=block.root):
            tx.execute(_UPSERT, _to_row(block.root, payload))

        try:
            self._withdrawals.set_withdrawals(tx, block)
        except ChainDBError as e:
            raise StoreFailureError(
                "set_execution_payload", f"withdrawals: {e.message}", key=block.root
            ) from e

        logger.debug(
            "Set execution payload %d for block %s", int(payload.block_number), block.root.hex()
        )

    def execution_payload(self, tx: Transaction | None, root: Bytes32) -> ExecutionPayload | None:
        """Fetch the execution payload of a block, or None if none is stored."""
        with self._service.read_transaction(tx) as rtx:
            with store_errors("execution_payload", key=root):
                row = rtx.execute(f"{_SELECT} WHERE block_root = ?", (bytes(root),)).fetchone()

        if row is None:
            return None
        return _from_row(row)

    def execution_payloads(
        self, tx: Transaction | None, roots: Sequence[Bytes32]
    ) -> dict[Bytes32, ExecutionPayload]:
        """
        Fetch the execution payloads of several blocks.

        Roots without a stored payload are absent from the result. Any number
        of roots may be given; they are fetched `BATCH_SIZE` at a time inside
        one read transaction.
        """
        if not roots:
            return {}

        params = list(dict.fromkeys(bytes(root) for root in roots))
        rows: list[sqlite3.Row] = []
        with self._service.read_transaction(tx) as rtx:
            with store_errors("execution_payloads"):
                for start in range(0, len(params), BATCH_SIZE):
                    batch = params[start : start + BATCH_SIZE]
                    placeholders = ", ".join("?" for _ in batch)
                    rows.extend(
                        rtx.execute(f"{_SELECT} WHERE block_root IN ({placeholders})", batch)
                    )

        return {Bytes32.from_column(row["block_root"]): _from_row(row) for row in rows}


def _to_row(root: Bytes32, payload: ExecutionPayload) -> tuple[object, ...]:
    """Flatten a payload into upsert parameters, in `_COLUMNS` order."""
    extra_data = None if payload.extra_data is None else bytes(payload.extra_data)
    return (
        bytes(root),
        int(payload.block_number),
        bytes(payload.block_hash),
        bytes(payload.parent_hash),
        bytes(payload.fee_recipient),
        bytes(payload.state_root),
        bytes(payload.receipts_root),
        bytes(payload.logs_bloom),
        bytes(payload.prev_randao),
        int(payload.gas_limit),
        int(payload.gas_used),
        str(Decimal(int(payload.base_fee_per_gas))),
        int(payload.timestamp),
        extra_data,
        int(payload.excess_data_gas),
    )


def _from_row(row: sqlite3.Row) -> ExecutionPayload:
    return ExecutionPayload(
        block_number=Uint64(row["block_number"]),
        block_hash=Bytes32.from_column(row["block_hash"]),
        parent_hash=Bytes32.from_column(row["parent_hash"]),
        fee_recipient=Bytes20.from_column(row["fee_recipient"]),
        state_root=Bytes32.from_column(row["state_root"]),
        receipts_root=Bytes32.from_column(row["receipts_root"]),
        logs_bloom=Bytes256.from_column(row["logs_bloom"]),
        prev_randao=Bytes32.from_column(row["prev_randao"]),
        gas_limit=Uint64(row["gas_limit"]),
        gas_used=Uint64(row["gas_used"]),
        base_fee_per_gas=Uint256(int(Decimal(row["base_fee_per_gas"]))),
        timestamp=Uint64(row["timestamp"]),
        extra_data=None if row["extra_data"] is None else bytes(row["extra_data"]),
        excess_data_gas=Uint64(row["excess_data_gas"]),
    )
