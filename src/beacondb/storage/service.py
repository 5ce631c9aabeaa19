"""
Connection and transaction lifecycle for the SQLite store.

The service owns the database location. Every transaction gets its own
connection; the service never hands one connection to two transactions.
"""

from __future__ import annotations

import logging
import shutil
import sqlite3
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import StorageConfig
from .exceptions import StoreFailureError
from .namespaces import SCHEMA_STATEMENTS
from .transaction import Transaction, store_errors

logger = logging.getLogger(__name__)


class Service:
    """
    Opens transactions against one SQLite database.

    Usage::

        service = Service(StorageConfig(path="chain.sqlite"))
        service.init_schema()

        with service.transaction() as tx:
            genesis_store.set_genesis(tx, genesis)

        genesis = genesis_store.genesis(None)  # implicit read-only transaction
    """

    def __init__(self, config: StorageConfig | Path | str) -> None:
        """
        Initialize the service.

        Args:
            config: Storage configuration, or a bare database path.
                    Use ":memory:" for an in-memory database.
        """
        if not isinstance(config, StorageConfig):
            config = StorageConfig(path=str(config))
        self._config = config
        self._closed = False
        self._scratch_dir: Path | None = None

        journal_mode = config.journal_mode
        if config.is_memory:
            # A private scratch file in WAL mode stands in for ":memory:", so
            # implicit readers get the same snapshot isolation as with a
            # file database. It is deleted on close.
            self._scratch_dir = Path(tempfile.mkdtemp(prefix="beacondb-"))
            self._database = str(self._scratch_dir / "chain.sqlite")
            journal_mode = "wal"
        else:
            self._database = str(Path(config.path))

        try:
            with store_errors("open", key=self._database):
                conn = self._connect()
                try:
                    conn.execute(f"PRAGMA journal_mode = {journal_mode}")
                finally:
                    conn.close()
        except StoreFailureError:
            self.close()
            raise

        logger.debug("Opened database %s", config.path)

    @property
    def config(self) -> StorageConfig:
        """The configuration this service was opened with."""
        return self._config

    def _connect(self) -> sqlite3.Connection:
        # isolation_level=None leaves transaction control to BEGIN/COMMIT.
        conn = sqlite3.connect(
            self._database,
            timeout=self._config.busy_timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        return conn

    def _open(self, operation: str) -> sqlite3.Connection:
        if self._closed:
            raise StoreFailureError(operation, "service is closed")
        with store_errors(operation):
            return self._connect()

    def begin_tx(self) -> Transaction:
        """
        Begin a read-write transaction.

        The write lock is taken immediately, so a conflicting writer fails
        here rather than at its first statement.

        Raises:
            StoreFailureError: If the service is closed or SQLite refuses.
        """
        conn = self._open("begin_tx")
        try:
            with store_errors("begin_tx"):
                conn.execute("BEGIN IMMEDIATE")
        except StoreFailureError:
            conn.close()
            raise
        logger.debug("Began read-write transaction")
        return Transaction(conn, read_only=False)

    def begin_ro_tx(self) -> Transaction:
        """
        Begin a read-only transaction.

        The connection is switched to `query_only`, so any write issued
        through it is rejected by SQLite itself.
        """
        conn = self._open("begin_ro_tx")
        try:
            with store_errors("begin_ro_tx"):
                conn.execute("PRAGMA query_only = ON")
                conn.execute("BEGIN")
        except StoreFailureError:
            conn.close()
            raise
        logger.debug("Began read-only transaction")
        return Transaction(conn, read_only=True)

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Run a block inside a read-write transaction.

        Commits when the block exits normally, rolls back and re-raises
        when it raises. A block may end the transaction itself.
        """
        tx = self.begin_tx()
        try:
            yield tx
        except BaseException:
            if tx.active:
                tx.rollback()
            raise
        else:
            if tx.active:
                tx.commit()

    @contextmanager
    def read_transaction(self, tx: Transaction | None) -> Iterator[Transaction]:
        """
        Resolve the transaction for a read.

        Yields `tx` unchanged when the caller supplied one. Otherwise begins
        a read-only transaction and commits it when the block exits, whether
        or not the read succeeded.
        """
        if tx is not None:
            yield tx
            return

        ro_tx = self.begin_ro_tx()
        try:
            yield ro_tx
        finally:
            ro_tx.commit()

    def init_schema(self) -> None:
        """Create tables and indexes that do not exist yet."""
        with self.transaction() as tx:
            with store_errors("init_schema"):
                for statement in SCHEMA_STATEMENTS:
                    tx.execute(statement)
        logger.info("Initialized schema in %s", self._config.path)

    def close(self) -> None:
        """
        Close the service.

        Transactions already begun keep their connections until they end.
        An in-memory database is discarded here.
        """
        self._closed = True
        if self._scratch_dir is not None:
            shutil.rmtree(self._scratch_dir)
            self._scratch_dir = None

    def __enter__(self) -> Service:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
