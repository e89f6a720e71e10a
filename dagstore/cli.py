"""
DAG Store Inspection Tool

Prints a JSON summary of a store file: schema version, entity count and,
for each requested channel, its message count and leaf hashes.

The file must already exist. A store written by an older schema version is
refused rather than opened, since opening it would erase it.
"""

from __future__ import annotations
import argparse
import asyncio
import json
import sys
from typing import List, Optional

from dagstore.config import StoreConfig, setup_logging
from dagstore.constants import CURRENT_VERSION
from dagstore.storage import schema
from dagstore.storage.store import Storage


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect a DAG store file")
    parser.add_argument("--config", "-c", type=str, help="Path to config file")
    parser.add_argument("--file", "-f", type=str, help="Store file (overrides config)")
    parser.add_argument(
        "--channel", action="append", default=[], metavar="HEX",
        help="Channel id in hex (repeatable)",
    )
    parser.add_argument("--log-level", type=str, help="Log level")
    return parser


async def summarize(config: StoreConfig, channels: List[bytes]) -> dict:
    """Collect the summary for a store."""
    async with Storage(config.storage) as storage:
        summary = {
            "file": config.storage.file,
            "version": await storage.get_version(),
            "entities": await storage.get_entity_count(),
            "channels": {},
        }
        for channel_id in channels:
            leaves = await storage.get_leaf_hashes(channel_id)
            summary["channels"][channel_id.hex()] = {
                "messages": await storage.get_message_count(channel_id),
                "leaves": sorted(leaf.hex() for leaf in leaves),
            }
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = StoreConfig.load(args.config) if args.config else StoreConfig()
    if args.file:
        config.storage.file = args.file
    if args.log_level:
        config.log.level = args.log_level

    errors = config.validate()
    if not config.storage.file:
        errors.append("a store file is required (--file or config storage.file)")
    if errors:
        for error in errors:
            print(f"error: {error}", file=sys.stderr)
        return 2

    try:
        channels = [bytes.fromhex(channel) for channel in args.channel]
    except ValueError as e:
        print(f"error: invalid channel id: {e}", file=sys.stderr)
        return 2

    path = config.storage.path
    if not path.is_file():
        print(f"error: store file not found: {path}", file=sys.stderr)
        return 2

    setup_logging(config.log)

    version = asyncio.run(schema.peek_version(path))
    if version < CURRENT_VERSION:
        print(
            f"error: store schema version {version} is older than {CURRENT_VERSION}, "
            f"opening it would erase it",
            file=sys.stderr,
        )
        return 1

    summary = asyncio.run(summarize(config, channels))
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
