"""Tests for transaction handles and the connection service."""

from __future__ import annotations

import sqlite3
import tempfile
from pathlib import Path

import pytest

from beacondb.storage import (
    ChainSpecStore,
    GenesisStore,
    NoActiveTransactionError,
    NotFoundError,
    Service,
    StorageConfig,
    StoreFailureError,
    Transaction,
    TransactionClosedError,
)
from beacondb.types import Uint64
from tests.beacondb.helpers import make_genesis


class TestTransaction:
    """Tests for the transaction handle itself."""

    def test_commit_ends_transaction(self, service: Service) -> None:
        tx = service.begin_tx()
        assert tx.active
        assert not tx.read_only

        tx.commit()
        assert not tx.active
        assert repr(tx) == "Transaction(rw, ended)"

    def test_ended_handle_refuses_work(self, service: Service) -> None:
        tx = service.begin_tx()
        tx.commit()

        with pytest.raises(TransactionClosedError):
            tx.execute("SELECT 1")
        with pytest.raises(TransactionClosedError):
            tx.commit()
        with pytest.raises(TransactionClosedError):
            tx.rollback()

    def test_ended_handle_rejected_by_writes(
        self, service: Service, genesis_store: GenesisStore
    ) -> None:
        tx = service.begin_tx()
        tx.rollback()

        with pytest.raises(TransactionClosedError):
            genesis_store.set_genesis(tx, make_genesis())

    def test_read_only_transaction_refuses_raw_writes(self, service: Service) -> None:
        """SQLite itself rejects writes through a read-only transaction."""
        tx = service.begin_ro_tx()
        try:
            assert tx.read_only
            with pytest.raises(sqlite3.OperationalError):
                tx.execute("INSERT INTO chain_spec (key, value) VALUES ('A', 'B')")
        finally:
            tx.commit()

    def test_rollback_discards_writes(
        self, service: Service, chain_spec_store: ChainSpecStore
    ) -> None:
        tx = service.begin_tx()
        chain_spec_store.set_chain_spec_value(tx, "SLOTS_PER_EPOCH", Uint64(32))
        assert chain_spec_store.chain_spec_value(tx, "SLOTS_PER_EPOCH") == Uint64(32)
        tx.rollback()

        with pytest.raises(NotFoundError):
            chain_spec_store.chain_spec_value(None, "SLOTS_PER_EPOCH")


class TestServiceTransaction:
    """Tests for the `Service.transaction` context manager."""

    def test_commits_on_success(self, service: Service, chain_spec_store: ChainSpecStore) -> None:
        with service.transaction() as tx:
            chain_spec_store.set_chain_spec_value(tx, "CONFIG_NAME", "mainnet")

        assert not tx.active
        assert chain_spec_store.chain_spec_value(None, "CONFIG_NAME") == "mainnet"

    def test_rolls_back_on_error(self, service: Service, chain_spec_store: ChainSpecStore) -> None:
        with pytest.raises(RuntimeError):
            with service.transaction() as tx:
                chain_spec_store.set_chain_spec_value(tx, "CONFIG_NAME", "mainnet")
                raise RuntimeError("abort")

        assert not tx.active
        assert chain_spec_store.chain_spec(None) == {}

    def test_block_may_end_transaction(self, service: Service) -> None:
        with service.transaction() as tx:
            tx.rollback()
        assert not tx.active


class TestImplicitReads:
    """Reads given no transaction open and close their own."""

    def test_implicit_read_is_closed(
        self, service: Service, chain_spec_store: ChainSpecStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        opened: list[Transaction] = []
        begin_ro_tx = service.begin_ro_tx

        def recording_begin_ro_tx() -> Transaction:
            tx = begin_ro_tx()
            opened.append(tx)
            return tx

        monkeypatch.setattr(service, "begin_ro_tx", recording_begin_ro_tx)

        chain_spec_store.chain_spec(None)
        with pytest.raises(NotFoundError):
            chain_spec_store.chain_spec_value(None, "MISSING")

        assert len(opened) == 2
        assert all(tx.read_only and not tx.active for tx in opened)

    def test_explicit_transaction_is_left_open(
        self, service: Service, chain_spec_store: ChainSpecStore
    ) -> None:
        tx = service.begin_ro_tx()
        try:
            chain_spec_store.chain_spec(tx)
            assert tx.active
        finally:
            tx.commit()

    def test_read_while_writer_open(
        self, service: Service, chain_spec_store: ChainSpecStore
    ) -> None:
        """Implicit reads see committed data while another writer is open."""
        with service.transaction() as tx:
            chain_spec_store.set_chain_spec_value(tx, "CONFIG_NAME", "mainnet")

        with service.transaction() as tx:
            chain_spec_store.set_chain_spec_value(tx, "CONFIG_NAME", "sepolia")
            assert chain_spec_store.chain_spec_value(None, "CONFIG_NAME") == "mainnet"
            assert chain_spec_store.chain_spec_value(tx, "CONFIG_NAME") == "sepolia"


class TestService:
    """Tests for opening and closing the service."""

    def test_second_writer_fails_when_locked(self, db_path: Path) -> None:
        service = Service(StorageConfig(path=str(db_path), busy_timeout=0.0))
        try:
            service.init_schema()
            tx = service.begin_tx()
            try:
                with pytest.raises(StoreFailureError) as exc_info:
                    service.begin_tx()
                assert exc_info.value.operation == "begin_tx"
            finally:
                tx.rollback()
        finally:
            service.close()

    def test_closed_service_refuses_transactions(self, db_path: Path) -> None:
        service = Service(db_path)
        service.close()

        with pytest.raises(StoreFailureError, match="closed"):
            service.begin_tx()
        with pytest.raises(StoreFailureError, match="closed"):
            service.begin_ro_tx()

    def test_init_schema_is_idempotent(self, service: Service) -> None:
        service.init_schema()
        service.init_schema()

    def test_accepts_bare_path(self, db_path: Path) -> None:
        with Service(db_path) as service:
            assert service.config.path == str(db_path)
            assert not service.config.is_memory

    def test_data_survives_reopen(self, db_path: Path) -> None:
        with Service(db_path) as service:
            service.init_schema()
            with service.transaction() as tx:
                ChainSpecStore(service).set_chain_spec_value(tx, "CONFIG_NAME", "mainnet")

        with Service(db_path) as service:
            assert ChainSpecStore(service).chain_spec_value(None, "CONFIG_NAME") == "mainnet"


class TestMemoryService:
    """Tests for the in-memory database."""

    def test_shared_between_transactions(self) -> None:
        with Service(":memory:") as service:
            assert service.config.is_memory
            service.init_schema()
            store = ChainSpecStore(service)

            with service.transaction() as tx:
                store.set_chain_spec_value(tx, "SLOTS_PER_EPOCH", Uint64(32))

            assert store.chain_spec_value(None, "SLOTS_PER_EPOCH") == Uint64(32)

    def test_services_are_isolated(self) -> None:
        with Service(":memory:") as first, Service(":memory:") as second:
            first.init_schema()
            second.init_schema()

            with first.transaction() as tx:
                ChainSpecStore(first).set_chain_spec_value(tx, "CONFIG_NAME", "mainnet")

            assert ChainSpecStore(second).chain_spec(None) == {}

    def test_write_requires_transaction(self) -> None:
        with Service(":memory:") as service:
            service.init_schema()
            with pytest.raises(NoActiveTransactionError):
                GenesisStore(service).set_genesis(None, make_genesis())

    def test_scratch_files_removed_on_close(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))

        with Service(":memory:") as service:
            service.init_schema()
            assert list(tmp_path.iterdir()) != []

        assert list(tmp_path.iterdir()) == []

    def test_implicit_read_while_writer_open(self) -> None:
        with Service(":memory:") as service:
            service.init_schema()
            store = GenesisStore(service)
            genesis = make_genesis()

            with service.transaction() as tx:
                store.set_genesis(tx, genesis)
                with pytest.raises(NotFoundError):
                    store.genesis(None)

            assert store.genesis(None) == genesis
