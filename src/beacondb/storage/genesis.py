"""Genesis storage."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from beacondb.containers import Genesis
from beacondb.types import Bytes32, Version

from .exceptions import NotFoundError
from .namespaces import GENESIS
from .service import Service
from .transaction import Transaction, require_transaction, store_errors

logger = logging.getLogger(__name__)


class GenesisStore:
    """Storage of the chain's genesis parameters."""

    def __init__(self, service: Service) -> None:
        self._service = service

    def set_genesis(self, tx: Transaction | None, genesis: Genesis) -> None:
        """
        Store the genesis record.

        Writing the same validators root again overwrites time and fork
        version.

        Raises:
            NoActiveTransactionError: If `tx` cannot carry a write.
            StoreFailureError: If the store rejects the statement.
        """
        tx = require_transaction(tx, "set_genesis")

        with store_errors("set_genesis", key=genesis.genesis_validators_root):
            tx.execute(
                f"""
                INSERT INTO {GENESIS.TABLE_NAME} (validators_root, time, fork_version)
                VALUES (?, ?, ?)
                ON CONFLICT (validators_root) DO UPDATE
                SET time = excluded.time
                   ,fork_version = excluded.fork_version
                """,
                (
                    bytes(genesis.genesis_validators_root),
                    math.floor(genesis.genesis_time.timestamp()),
                    bytes(genesis.genesis_fork_version),
                ),
            )
        logger.debug("Set genesis %s", genesis.genesis_validators_root.hex())

    def genesis(self, tx: Transaction | None) -> Genesis:
        """
        Fetch the genesis record.

        If rows exist under more than one validators root, the one stored
        first is returned.

        Raises:
            NotFoundError: If no genesis has been stored.
        """
        with self._service.read_transaction(tx) as rtx:
            with store_errors("genesis"):
                row = rtx.execute(
                    f"SELECT validators_root, time, fork_version FROM {GENESIS.TABLE_NAME} "
                    "ORDER BY rowid LIMIT 1"
                ).fetchone()

        if row is None:
            raise NotFoundError("genesis")

        return Genesis(
            genesis_validators_root=Bytes32.from_column(row["validators_root"]),
            genesis_time=datetime.fromtimestamp(row["time"], tz=timezone.utc),
            genesis_fork_version=Version.from_column(row["fork_version"]),
        )

    def genesis_time(self, tx: Transaction | None) -> datetime:
        """
        Fetch the genesis time.

        Raises:
            NotFoundError: If no genesis has been stored.
        """
        return self.genesis(tx).genesis_time
