#!/usr/bin/env python3
"""Management commands for the Branch Office API.

Usage:
    cd api
    python -m cli migrate          # alembic upgrade head
    python -m cli create-tables    # create_all from the models, local setup only
"""

import argparse
import asyncio
import sys
from collections.abc import Callable

from core.logger import configure_logging, get_logger

logger = get_logger(__name__)


def cmd_migrate() -> int:
    from scripts.migrate import main as migrate_main

    logger.info("cli.migrate.started")
    migrate_main(["upgrade", "head"])
    logger.info("cli.migrate.complete")
    return 0


def cmd_create_tables() -> int:
    from scripts.create_tables import main as create_tables_main

    asyncio.run(create_tables_main())
    logger.info("cli.create_tables.complete")
    return 0


COMMANDS: dict[str, tuple[Callable[[], int], str]] = {
    "migrate": (cmd_migrate, "Apply Alembic migrations up to head"),
    "create-tables": (cmd_create_tables, "Create missing tables from the models"),
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="cli", description="Branch Office API CLI")
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    for name, (_, help_text) in COMMANDS.items():
        subparsers.add_parser(name, help=help_text)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    configure_logging()
    handler, _ = COMMANDS[args.command]
    return handler()


if __name__ == "__main__":
    sys.exit(main())
