"""Tests for storage configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from beacondb.storage import StorageConfig


class TestStorageConfig:
    """Tests for the configuration model."""

    def test_defaults(self) -> None:
        config = StorageConfig(path="chain.sqlite")
        assert config.busy_timeout == 5.0
        assert config.journal_mode == "wal"
        assert not config.is_memory

    def test_memory(self) -> None:
        assert StorageConfig(path=":memory:").is_memory

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(path="chain.sqlite", busy_timeout=-1.0)

    def test_unknown_journal_mode_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(path="chain.sqlite", journal_mode="truncate")  # type: ignore[arg-type]


class TestFromYaml:
    """Tests for YAML configuration."""

    def test_full(self) -> None:
        config = StorageConfig.from_yaml(
            "DB_PATH: /var/lib/beacondb/chain.sqlite\nBUSY_TIMEOUT: 2.5\nJOURNAL_MODE: delete\n"
        )
        assert config.path == "/var/lib/beacondb/chain.sqlite"
        assert config.busy_timeout == 2.5
        assert config.journal_mode == "delete"

    def test_path_only(self) -> None:
        config = StorageConfig.from_yaml("DB_PATH: ':memory:'\n")
        assert config.is_memory

    def test_missing_path(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig.from_yaml("BUSY_TIMEOUT: 1.0\n")

    def test_unknown_key(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig.from_yaml("DB_PATH: a.sqlite\nCACHE_SIZE: 10\n")

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.yaml"
        path.write_text("DB_PATH: chain.sqlite\n", encoding="utf-8")
        assert StorageConfig.from_yaml_file(path).path == "chain.sqlite"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            StorageConfig.from_yaml_file(tmp_path / "absent.yaml")


class TestFromEnv:
    """Tests for environment configuration."""

    def test_full(self) -> None:
        config = StorageConfig.from_env(
            {
                "BEACONDB_PATH": "chain.sqlite",
                "BEACONDB_BUSY_TIMEOUT": "0.5",
                "BEACONDB_JOURNAL_MODE": "DELETE",
            }
        )
        assert config.path == "chain.sqlite"
        assert config.busy_timeout == 0.5
        assert config.journal_mode == "delete"

    def test_path_required(self) -> None:
        with pytest.raises(KeyError):
            StorageConfig.from_env({})

    def test_bad_timeout(self) -> None:
        with pytest.raises(ValueError):
            StorageConfig.from_env({"BEACONDB_PATH": "a", "BEACONDB_BUSY_TIMEOUT": "soon"})

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BEACONDB_PATH", ":memory:")
        assert StorageConfig.from_env().is_memory
