# src/hottakes/init_db.py
"""Create (or recreate) the database tables for the configured database."""

from __future__ import annotations

import argparse
import asyncio
import logging

from hottakes.core.settings import settings
from hottakes.db.session import create_engine_for, create_tables, drop_tables

logger = logging.getLogger(__name__)


async def init_db(database_url: str, *, drop: bool = False) -> None:
    """Create all tables, dropping existing ones first when ``drop`` is set."""
    engine = create_engine_for(database_url)
    try:
        if drop:
            await drop_tables(engine)
            logger.warning("Dropped all tables in %s", database_url)
        await create_tables(engine)
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    asyncio.run(init_db(settings.database_url, drop=args.drop))
    print("Database initialized.")


if __name__ == "__main__":
    main()
