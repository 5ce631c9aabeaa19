"""
Transaction handles.

A `Transaction` wraps one SQLite connection for its whole lifetime. The
connection is never shared: it is opened when the transaction begins and
closed when it commits or rolls back. After that the handle refuses every
call, so work issued on an ended transaction fails at once instead of
silently running in autocommit mode.

Store methods take the transaction as an explicit `tx` argument:

- Writes require a read-write transaction (`require_transaction`).
- Reads accept `None` and open an implicit read-only transaction
  (`Service.read_transaction`).
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from .exceptions import NoActiveTransactionError, StoreFailureError, TransactionClosedError

logger = logging.getLogger(__name__)


class Transaction:
    """A read-write or read-only transaction over a dedicated connection."""

    def __init__(self, conn: sqlite3.Connection, *, read_only: bool) -> None:
        self._conn = conn
        self._read_only = read_only
        self._active = True

    @property
    def read_only(self) -> bool:
        """Whether writes are refused by this transaction."""
        return self._read_only

    @property
    def active(self) -> bool:
        """Whether the transaction has neither committed nor rolled back."""
        return self._active

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """
        Execute one statement inside this transaction.

        Raises:
            TransactionClosedError: If the transaction already ended.
            sqlite3.Error: If the statement fails.
        """
        self._check_active("execute")
        return self._conn.execute(sql, params)

    def executemany(self, sql: str, rows: Iterable[Sequence[Any]]) -> sqlite3.Cursor:
        """Execute one statement once per parameter row."""
        self._check_active("executemany")
        return self._conn.executemany(sql, rows)

    def commit(self) -> None:
        """
        Commit and release the connection.

        The connection is released even if the commit fails.

        Raises:
            TransactionClosedError: If the transaction already ended.
            StoreFailureError: If SQLite refuses the commit.
        """
        self._check_active("commit")
        try:
            with store_errors("commit"):
                self._conn.execute("COMMIT")
        finally:
            self._release()
        logger.debug("Committed %s transaction", "read-only" if self._read_only else "read-write")

    def rollback(self) -> None:
        """Roll back and release the connection."""
        self._check_active("rollback")
        try:
            with store_errors("rollback"):
                self._conn.execute("ROLLBACK")
        finally:
            self._release()
        logger.debug("Rolled back %s transaction", "read-only" if self._read_only else "read-write")

    def _check_active(self, operation: str) -> None:
        if not self._active:
            raise TransactionClosedError(operation)

    def _release(self) -> None:
        self._active = False
        self._conn.close()

    def __repr__(self) -> str:
        mode = "ro" if self._read_only else "rw"
        state = "active" if self._active else "ended"
        return f"Transaction({mode}, {state})"


def require_transaction(tx: Transaction | None, operation: str) -> Transaction:
    """
    Return `tx` if it can carry a write.

    Raises:
        NoActiveTransactionError: If `tx` is `None` or read-only.
        TransactionClosedError: If `tx` already ended.
    """
    if tx is None:
        raise NoActiveTransactionError(operation)
    if tx.read_only:
        raise NoActiveTransactionError(operation, read_only=True)
    if not tx.active:
        raise TransactionClosedError(operation)
    return tx


@contextmanager
def store_errors(operation: str, key: Any = None) -> Iterator[None]:
    """
    Translate driver failures into `StoreFailureError`.

    `OverflowError` is raised by the driver for integers beyond SQLite's
    signed 64-bit range.
    """
    try:
        yield
    except (sqlite3.Error, OverflowError) as e:
        raise StoreFailureError(operation, str(e), key=key) from e
