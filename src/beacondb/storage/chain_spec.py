"""Chain spec storage."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

import yaml

from .codec import SpecValue, decode_spec_value, encode_spec_value
from .exceptions import NotFoundError
from .namespaces import CHAIN_SPEC
from .service import Service
from .transaction import Transaction, require_transaction, store_errors

logger = logging.getLogger(__name__)


class ChainSpecStore:
    """
    Key/value storage of the chain's configuration constants.

    Values are encoded on write and decoded per row on read; see
    `beacondb.storage.codec` for the text format.
    """

    def __init__(self, service: Service) -> None:
        self._service = service

    def set_chain_spec_value(self, tx: Transaction | None, key: str, value: SpecValue) -> None:
        """
        Store the value of `key`, replacing any previous value.

        Raises:
            NoActiveTransactionError: If `tx` cannot carry a write.
            SpecValueTypeError: If `value` is not a supported value type.
            StoreFailureError: If the store rejects the statement.
        """
        tx = require_transaction(tx, "set_chain_spec_value")
        encoded = encode_spec_value(value)

        with store_errors("set_chain_spec_value", key=key):
            tx.execute(
                f"""
                INSERT INTO {CHAIN_SPEC.TABLE_NAME} (key, value)
                VALUES (?, ?)
                ON CONFLICT (key) DO UPDATE
                SET value = excluded.value
                """,
                (key, encoded),
            )
        logger.debug("Set chain spec %s = %s", key, encoded)

    def set_chain_spec(self, tx: Transaction | None, spec: Mapping[str, SpecValue]) -> None:
        """Store every entry of `spec`, in iteration order."""
        tx = require_transaction(tx, "set_chain_spec")
        for key, value in spec.items():
            self.set_chain_spec_value(tx, key, value)
        logger.info("Stored %d chain spec values", len(spec))

    def chain_spec(self, tx: Transaction | None) -> dict[str, SpecValue]:
        """Fetch and decode every chain spec value."""
        with self._service.read_transaction(tx) as rtx:
            with store_errors("chain_spec"):
                rows = rtx.execute(f"SELECT key, value FROM {CHAIN_SPEC.TABLE_NAME}").fetchall()

        return {row["key"]: decode_spec_value(row["key"], row["value"]) for row in rows}

    def chain_spec_value(self, tx: Transaction | None, key: str) -> SpecValue:
        """
        Fetch and decode the value of `key`.

        Raises:
            NotFoundError: If no value is stored for `key`.
        """
        with self._service.read_transaction(tx) as rtx:
            with store_errors("chain_spec_value", key=key):
                row = rtx.execute(
                    f"SELECT value FROM {CHAIN_SPEC.TABLE_NAME} WHERE key = ?",
                    (key,),
                ).fetchone()

        if row is None:
            raise NotFoundError("chain_spec_value", key)
        return decode_spec_value(key, row["value"])


def load_chain_spec_yaml(content: str) -> dict[str, SpecValue]:
    """
    Parse a consensus `config.yaml` into typed chain spec values.

    Scalars are read as strings, so `0x00000000` keeps its width instead of
    collapsing to the integer 0, and then decoded with the same rules used
    for stored rows. Non-scalar entries (such as `BLOB_SCHEDULE`) are
    skipped.

    Raises:
        yaml.YAMLError: If the content is not valid YAML.
        ValueError: If the document is not a mapping.
    """
    # BaseLoader resolves no tags: every scalar stays a string.
    data = yaml.load(content, Loader=yaml.BaseLoader)
    if not isinstance(data, dict):
        raise ValueError(f"chain spec must be a mapping, got {type(data).__name__}")

    spec: dict[str, SpecValue] = {}
    for key, raw in data.items():
        if not isinstance(raw, str):
            logger.debug("Skipping non-scalar chain spec entry %s", key)
            continue
        spec[key] = decode_spec_value(key, raw)
    return spec


def load_chain_spec_yaml_file(path: Path | str) -> dict[str, SpecValue]:
    """Parse a consensus `config.yaml` file; see `load_chain_spec_yaml`."""
    return load_chain_spec_yaml(Path(path).read_text(encoding="utf-8"))
