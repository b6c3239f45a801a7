#!/usr/bin/env python3
"""Create the branch_offices table straight from the ORM models.

Handy for a throwaway local database. create_all() skips tables that already
exist and never alters them; use scripts.migrate for real schema changes.

Usage:
    cd api
    python -m scripts.create_tables
"""

import asyncio

from core.database import create_engine, create_tables, dispose_engine
from core.logger import configure_logging, get_logger

logger = get_logger(__name__)


async def main() -> None:
    engine = create_engine()
    logger.info("db.tables.creating", dialect=engine.dialect.name)
    try:
        await create_tables(engine)
    finally:
        await dispose_engine(engine)


if __name__ == "__main__":
    configure_logging()
    asyncio.run(main())
