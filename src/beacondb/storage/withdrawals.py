"""Withdrawal storage."""

from __future__ import annotations

import logging

from beacondb.containers import Block, Withdrawal
from beacondb.types import Bytes20, Bytes32, Uint64

from .namespaces import WITHDRAWALS
from .service import Service
from .transaction import Transaction, require_transaction, store_errors

logger = logging.getLogger(__name__)


class WithdrawalStore:
    """Storage of the withdrawals processed by each execution payload."""

    def __init__(self, service: Service) -> None:
        self._service = service

    def set_withdrawals(self, tx: Transaction | None, block: Block) -> None:
        """
        Store the withdrawals of a block, replacing any stored before.

        Blocks without a payload, or with an empty placeholder payload,
        have no withdrawals and are skipped.

        Raises:
            NoActiveTransactionError: If `tx` cannot carry a write.
            StoreFailureError: If the store rejects a statement.
        """
        tx = require_transaction(tx, "set_withdrawals")

        payload = block.execution_payload
        if payload is None or payload.is_empty():
            return

        with store_errors("set_withdrawals", key=block.root):
            # The whole set is replaced, so a shorter list leaves no residue.
            tx.execute(
                f"DELETE FROM {WITHDRAWALS.TABLE_NAME} WHERE block_root = ?",
                (bytes(block.root),),
            )
            tx.executemany(
                f"""
                INSERT INTO {WITHDRAWALS.TABLE_NAME} (
                    block_root, position, block_number, withdrawal_index,
                    validator_index, address, amount
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        bytes(block.root),
                        position,
                        int(payload.block_number),
                        int(withdrawal.index),
                        int(withdrawal.validator_index),
                        bytes(withdrawal.address),
                        int(withdrawal.amount),
                    )
                    for position, withdrawal in enumerate(payload.withdrawals)
                ],
            )
        logger.debug(
            "Set %d withdrawals for block %s", len(payload.withdrawals), block.root.hex()
        )

    def withdrawals(self, tx: Transaction | None, root: Bytes32) -> list[Withdrawal]:
        """Fetch the withdrawals of a block in payload order; empty if none."""
        with self._service.read_transaction(tx) as rtx:
            with store_errors("withdrawals", key=root):
                rows = rtx.execute(
                    f"""
                    SELECT withdrawal_index, validator_index, address, amount
                    FROM {WITHDRAWALS.TABLE_NAME}
                    WHERE block_root = ?
                    ORDER BY position
                    """,
                    (bytes(root),),
                ).fetchall()

        return [
            Withdrawal(
                index=Uint64(row["withdrawal_index"]),
                validator_index=Uint64(row["validator_index"]),
                address=Bytes20.from_column(row["address"]),
                amount=Uint64(row["amount"]),
            )
            for row in rows
        ]
