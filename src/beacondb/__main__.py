"""
Beacon chain database CLI entry point.

Inspect and seed a beacon chain database from the command line.

Usage::

    python -m beacondb --db chain.sqlite init
    python -m beacondb --db chain.sqlite load-spec config.yaml
    python -m beacondb --db chain.sqlite show-spec SECONDS_PER_SLOT
    python -m beacondb --db chain.sqlite load-genesis genesis.json
    python -m beacondb --db chain.sqlite show-genesis

Options:
    --db          Path to the SQLite database (default: $BEACONDB_PATH)
    -v            Enable debug logging
    --no-color    Disable colored logging output
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import yaml

from beacondb.containers import Genesis
from beacondb.storage import (
    ChainDBError,
    SQLiteChainDatabase,
    StorageConfig,
    encode_spec_value,
    load_chain_spec_yaml_file,
)

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{timestamp} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging for the CLI with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    # Logs go to stderr so command output on stdout stays parseable.
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def load_genesis_file(path: Path) -> Genesis:
    """
    Read a genesis record from a beacon API response saved to disk.

    Accepts either the full `/eth/v1/beacon/genesis` response or its bare
    `data` object, as JSON or YAML.
    """
    # BaseLoader keeps "0x00000000" a string instead of the integer 0.
    with path.open(encoding="utf-8") as f:
        document = yaml.load(f, Loader=yaml.BaseLoader)
    if not isinstance(document, dict):
        raise ValueError(f"genesis document must be a mapping: {path}")
    return Genesis.from_api(document.get("data", document))


def cmd_init(db: SQLiteChainDatabase, args: argparse.Namespace) -> None:
    """Tables are created when the database opens; nothing else to do."""
    logger.info("Database ready at %s", db.service.config.path)


def cmd_load_spec(db: SQLiteChainDatabase, args: argparse.Namespace) -> None:
    spec = load_chain_spec_yaml_file(args.file)
    with db.transaction() as tx:
        db.set_chain_spec(tx, spec)
    logger.info("Loaded %d chain spec values from %s", len(spec), args.file)


def cmd_show_spec(db: SQLiteChainDatabase, args: argparse.Namespace) -> None:
    if args.key is not None:
        spec = {args.key: db.chain_spec_value(None, args.key)}
    else:
        spec = db.chain_spec(None)
    for key in sorted(spec):
        value = spec[key]
        print(f"{key}: {encode_spec_value(value)} ({type(value).__name__})")


def cmd_load_genesis(db: SQLiteChainDatabase, args: argparse.Namespace) -> None:
    genesis = load_genesis_file(args.file)
    with db.transaction() as tx:
        db.set_genesis(tx, genesis)
    logger.info("Stored genesis %s", genesis.genesis_validators_root.hex())


def cmd_show_genesis(db: SQLiteChainDatabase, args: argparse.Namespace) -> None:
    genesis = db.genesis(None)
    print(f"genesis_validators_root: 0x{genesis.genesis_validators_root.hex()}")
    print(f"genesis_time: {genesis.genesis_time.isoformat()}")
    print(f"genesis_fork_version: 0x{genesis.genesis_fork_version.hex()}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every subcommand."""
    parser = argparse.ArgumentParser(
        prog="beacondb",
        description="Beacon chain database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--db",
        default=None,
        help="Path to the SQLite database (default: $BEACONDB_PATH)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init", help="Create missing tables").set_defaults(func=cmd_init)

    load_spec = commands.add_parser("load-spec", help="Load a consensus config.yaml")
    load_spec.add_argument("file", type=Path, help="Path to config.yaml")
    load_spec.set_defaults(func=cmd_load_spec)

    show_spec = commands.add_parser("show-spec", help="Print chain spec values")
    show_spec.add_argument("key", nargs="?", default=None, help="Print only this key")
    show_spec.set_defaults(func=cmd_show_spec)

    load_genesis = commands.add_parser("load-genesis", help="Load a beacon API genesis document")
    load_genesis.add_argument("file", type=Path, help="Path to the JSON or YAML document")
    load_genesis.set_defaults(func=cmd_load_genesis)

    commands.add_parser("show-genesis", help="Print the genesis record").set_defaults(
        func=cmd_show_genesis
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    if args.db is not None:
        config = StorageConfig(path=args.db)
    else:
        try:
            config = StorageConfig.from_env()
        except KeyError:
            parser.error("--db is required when BEACONDB_PATH is not set")

    try:
        with SQLiteChainDatabase(config) as db:
            args.func(db, args)
    except ChainDBError as e:
        logger.error("%s", e.message)
        return 1
    except (OSError, KeyError, ValueError, yaml.YAMLError) as e:
        # Unreadable or malformed input files.
        logger.error("%s: %s", args.command, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
