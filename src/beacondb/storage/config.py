"""
Storage configuration loader.

Configuration can come from a YAML file using the uppercase convention of
the other chain configuration files:

    DB_PATH: /var/lib/beacondb/chain.sqlite
    BUSY_TIMEOUT: 5
    JOURNAL_MODE: wal

or from `BEACONDB_*` environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Mapping

import yaml
from pydantic import Field

from beacondb.types import StrictBaseModel

MEMORY_PATH = ":memory:"
"""Path selecting an in-memory database that lives as long as its service."""

ENV_PREFIX = "BEACONDB_"
"""Prefix of the environment variables read by `StorageConfig.from_env`."""


class StorageConfig(StrictBaseModel):
    """Where the database lives and how SQLite connections are opened."""

    path: str = Field(alias="DB_PATH")
    """Database file path, or `:memory:`."""

    busy_timeout: float = Field(default=5.0, ge=0, alias="BUSY_TIMEOUT")
    """
    Seconds a connection waits on a locked database before failing.

    This is the driver's own lock wait; the storage layer adds no retries.
    """

    journal_mode: Literal["wal", "delete", "memory"] = Field(default="wal", alias="JOURNAL_MODE")
    """
    SQLite journal mode for file databases.

    WAL lets implicit read-only transactions proceed while a writer holds
    the database. In-memory databases always use WAL.
    """

    @property
    def is_memory(self) -> bool:
        """Whether this configuration selects an in-memory database."""
        return self.path == MEMORY_PATH

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> StorageConfig:
        """
        Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, content: str) -> StorageConfig:
        """Load configuration from a YAML string."""
        return cls.model_validate(yaml.safe_load(content))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StorageConfig:
        """
        Load configuration from environment variables.

        Reads `BEACONDB_PATH`, `BEACONDB_BUSY_TIMEOUT` and
        `BEACONDB_JOURNAL_MODE`. Only the path is required.

        Raises:
            KeyError: If `BEACONDB_PATH` is not set.
            ValueError: If `BEACONDB_BUSY_TIMEOUT` is not a number.
        """
        env = os.environ if environ is None else environ

        data: dict[str, object] = {"path": env[f"{ENV_PREFIX}PATH"]}
        if f"{ENV_PREFIX}BUSY_TIMEOUT" in env:
            data["busy_timeout"] = float(env[f"{ENV_PREFIX}BUSY_TIMEOUT"])
        if f"{ENV_PREFIX}JOURNAL_MODE" in env:
            data["journal_mode"] = env[f"{ENV_PREFIX}JOURNAL_MODE"].lower()
        return cls(**data)
