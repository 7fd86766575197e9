"""
create_tables.py
----------------
One-shot script to create all database tables from DATABASE_URL.
Use this for quick setup. For production migrations, use Alembic instead.

Usage:
    python create_tables.py           # create missing tables
    python create_tables.py --drop    # drop everything first (destroys data)
"""

import argparse
import asyncio

from taskhub.core.config import get_settings
from taskhub.core.logging import configure_logging, get_logger
from taskhub.db.session import create_engine, create_schema

logger = get_logger(__name__)


async def main(drop: bool) -> None:
    settings = get_settings()
    configure_logging(settings)
    engine = create_engine(settings)
    try:
        tables = await create_schema(engine, drop=drop)
    finally:
        await engine.dispose()
    logger.info("Schema ready", tables=len(tables), dropped=drop)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the TaskHub database schema")
    parser.add_argument("--drop", action="store_true", help="drop all tables first")
    args = parser.parse_args()
    asyncio.run(main(args.drop))
