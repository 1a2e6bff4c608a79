"""
Schema migration step.

Runs before the service accepts traffic (see ``main.create_app``) and can be
invoked on its own with ``python -m database.migrations``.  Creating the
tables is idempotent: existing tables are left untouched.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from database.models import Base

logger = logging.getLogger(__name__)


async def run_migrations(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        existing = await conn.run_sync(
            lambda sync_conn: set(inspect(sync_conn).get_table_names())
        )
        await conn.run_sync(Base.metadata.create_all)

    created = sorted(set(Base.metadata.tables) - existing)
    if created:
        logger.info("Created tables: %s", ", ".join(created))
    else:
        logger.debug("Schema already up to date")


async def _main() -> None:
    from config.settings import config
    from database.session import build_engine

    engine = build_engine(config.database_url)
    try:
        await run_migrations(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s")
    asyncio.run(_main())
