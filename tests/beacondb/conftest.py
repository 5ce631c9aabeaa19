"""
Shared pytest fixtures for all beacondb tests.

Stores run against a file database in the test's temporary directory, so
implicit read transactions can proceed while a writer is open.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from beacondb.storage import (
    ChainSpecStore,
    ExecutionPayloadStore,
    GenesisStore,
    Service,
    SQLiteChainDatabase,
    StorageConfig,
    WithdrawalStore,
)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Location of the test database."""
    return tmp_path / "chain.sqlite"


@pytest.fixture
def service(db_path: Path) -> Generator[Service, None, None]:
    """A service with the schema created."""
    svc = Service(StorageConfig(path=str(db_path)))
    svc.init_schema()
    yield svc
    svc.close()


@pytest.fixture
def chain_spec_store(service: Service) -> ChainSpecStore:
    return ChainSpecStore(service)


@pytest.fixture
def genesis_store(service: Service) -> GenesisStore:
    return GenesisStore(service)


@pytest.fixture
def withdrawal_store(service: Service) -> WithdrawalStore:
    return WithdrawalStore(service)


@pytest.fixture
def payload_store(service: Service, withdrawal_store: WithdrawalStore) -> ExecutionPayloadStore:
    return ExecutionPayloadStore(service, withdrawal_store)


@pytest.fixture
def db(db_path: Path) -> Generator[SQLiteChainDatabase, None, None]:
    """A complete database."""
    database = SQLiteChainDatabase(db_path)
    yield database
    database.close()
