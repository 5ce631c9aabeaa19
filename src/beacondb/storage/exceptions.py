"""Exception hierarchy for the storage layer."""

from __future__ import annotations

from typing import Any


class ChainDBError(Exception):
    """
    Base exception for all storage errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class NoActiveTransactionError(ChainDBError):
    """
    Raised when a write is attempted without a read-write transaction.

    Writes are never implicit. The caller must begin a transaction and
    pass it in; a read-only transaction is rejected the same way.

    Attributes:
        operation: The store operation that was attempted.
    """

    def __init__(self, operation: str, *, read_only: bool = False) -> None:
        self.operation = operation
        self.read_only = read_only

        if read_only:
            msg = f"{operation}: transaction is read-only"
        else:
            msg = f"{operation}: no transaction"
        super().__init__(msg)


class TransactionClosedError(ChainDBError):
    """
    Raised when a transaction handle is used after commit or rollback.

    Attributes:
        operation: What was attempted on the ended transaction.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation}: transaction already ended")


class NotFoundError(ChainDBError):
    """
    Raised when a required single-row lookup finds no row.

    Optional lookups (a payload by block root) return `None` instead.

    Attributes:
        operation: The lookup that was performed.
        key: The key looked up, if the lookup has one.
    """

    def __init__(self, operation: str, key: Any = None) -> None:
        self.operation = operation
        self.key = key

        msg = f"{operation}: not found"
        if key is not None:
            msg = f"{operation}: {key!r} not found"
        super().__init__(msg)


class StoreFailureError(ChainDBError):
    """
    Raised when the store rejects or cannot execute a statement.

    The underlying exception is always chained as `__cause__`.

    Attributes:
        operation: The store operation that failed.
        detail: Description of the underlying failure.
        key: The key or root involved, if any.
    """

    def __init__(self, operation: str, detail: str, *, key: Any = None) -> None:
        self.operation = operation
        self.detail = detail
        self.key = key

        msg = f"{operation} failed: {detail}"
        if key is not None:
            msg = f"{operation} failed for {key!r}: {detail}"
        super().__init__(msg)


class SpecValueTypeError(ChainDBError, TypeError):
    """
    Raised when a chain spec value is outside the supported value types.

    Attributes:
        value: The rejected value (truncated for display).
    """

    def __init__(self, value: Any, detail: str | None = None) -> None:
        self.value = value

        value_repr = repr(value)
        if len(value_repr) > 50:
            value_repr = value_repr[:47] + "..."
        msg = f"unsupported chain spec value {type(value).__name__}: {value_repr}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)
