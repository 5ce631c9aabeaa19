"""
Storage module for beacon chain indexing data.

Provides transactional SQLite persistence for chain spec values, the
genesis record, execution payloads and withdrawals.
"""

from .chain_spec import ChainSpecStore, load_chain_spec_yaml, load_chain_spec_yaml_file
from .codec import SpecValue, decode_spec_value, encode_spec_value
from .config import StorageConfig
from .database import ChainDatabase, WithdrawalsSetter
from .exceptions import (
    ChainDBError,
    NoActiveTransactionError,
    NotFoundError,
    SpecValueTypeError,
    StoreFailureError,
    TransactionClosedError,
)
from .execution_payload import ExecutionPayloadStore
from .genesis import GenesisStore
from .service import Service
from .sqlite import SQLiteChainDatabase
from .transaction import Transaction
from .withdrawals import WithdrawalStore

__all__ = [
    # Database
    "ChainDatabase",
    "SQLiteChainDatabase",
    "Service",
    "StorageConfig",
    "Transaction",
    # Stores
    "ChainSpecStore",
    "GenesisStore",
    "ExecutionPayloadStore",
    "WithdrawalStore",
    "WithdrawalsSetter",
    # Chain spec values
    "SpecValue",
    "encode_spec_value",
    "decode_spec_value",
    "load_chain_spec_yaml",
    "load_chain_spec_yaml_file",
    # Errors
    "ChainDBError",
    "NoActiveTransactionError",
    "NotFoundError",
    "SpecValueTypeError",
    "StoreFailureError",
    "TransactionClosedError",
]
