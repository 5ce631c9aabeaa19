"""
Database namespace definitions for storage tables.

Defines table names and schema constants for SQLite storage.
Each namespace represents a logical grouping of related data.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GenesisNamespace:
    """
    Namespace for the genesis record.

    One row per validators root; in practice a single row.
    """

    TABLE_NAME: str = "genesis"
    """Table name for genesis storage."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS genesis (
            validators_root BLOB PRIMARY KEY,
            time INTEGER NOT NULL,
            fork_version BLOB NOT NULL
        )
    """
    """SQL to create the genesis table."""


@dataclass(frozen=True, slots=True)
class ChainSpecNamespace:
    """
    Namespace for chain spec values.

    Values are stored as text without a type tag.
    The key name determines how a value is decoded.
    """

    TABLE_NAME: str = "chain_spec"
    """Table name for chain spec storage."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS chain_spec (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """
    """SQL to create the chain spec table."""


@dataclass(frozen=True, slots=True)
class ExecutionPayloadNamespace:
    """
    Namespace for execution payloads.

    One row per block, keyed by the block root.
    """

    TABLE_NAME: str = "execution_payloads"
    """Table name for execution payload storage."""

    # base_fee_per_gas holds decimal digits in a TEXT column. NUMERIC
    # affinity would turn values beyond 64 bits into lossy REALs.
    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS execution_payloads (
            block_root BLOB PRIMARY KEY,
            block_number INTEGER NOT NULL,
            block_hash BLOB NOT NULL,
            parent_hash BLOB NOT NULL,
            fee_recipient BLOB NOT NULL,
            state_root BLOB NOT NULL,
            receipts_root BLOB NOT NULL,
            logs_bloom BLOB NOT NULL,
            prev_randao BLOB NOT NULL,
            gas_limit INTEGER NOT NULL,
            gas_used INTEGER NOT NULL,
            base_fee_per_gas TEXT NOT NULL,
            timestamp INTEGER NOT NULL,
            extra_data BLOB,
            excess_data_gas INTEGER NOT NULL
        )
    """
    """SQL to create the execution payloads table."""

    CREATE_INDEX: str = """
        CREATE INDEX IF NOT EXISTS idx_execution_payloads_block_number
        ON execution_payloads(block_number)
    """
    """SQL to create the block number index."""


@dataclass(frozen=True, slots=True)
class WithdrawalNamespace:
    """
    Namespace for withdrawals.

    Rows are keyed by block root and position within the payload.
    """

    TABLE_NAME: str = "withdrawals"
    """Table name for withdrawal storage."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS withdrawals (
            block_root BLOB NOT NULL,
            position INTEGER NOT NULL,
            block_number INTEGER NOT NULL,
            withdrawal_index INTEGER NOT NULL,
            validator_index INTEGER NOT NULL,
            address BLOB NOT NULL,
            amount INTEGER NOT NULL,
            PRIMARY KEY (block_root, position)
        )
    """
    """SQL to create the withdrawals table."""

    CREATE_INDEX: str = """
        CREATE INDEX IF NOT EXISTS idx_withdrawals_validator_index
        ON withdrawals(validator_index)
    """
    """SQL to create the validator index."""


# Singleton instances for convenient access
GENESIS = GenesisNamespace()
CHAIN_SPEC = ChainSpecNamespace()
EXECUTION_PAYLOADS = ExecutionPayloadNamespace()
WITHDRAWALS = WithdrawalNamespace()

SCHEMA_STATEMENTS: tuple[str, ...] = (
    GENESIS.CREATE_TABLE,
    CHAIN_SPEC.CREATE_TABLE,
    EXECUTION_PAYLOADS.CREATE_TABLE,
    EXECUTION_PAYLOADS.CREATE_INDEX,
    WITHDRAWALS.CREATE_TABLE,
    WITHDRAWALS.CREATE_INDEX,
)
"""All statements needed to initialize the schema, in order."""
