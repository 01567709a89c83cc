"""Script to initialize the database."""

import asyncio

from sqlalchemy import text

from medgestor.database import engine
from medgestor.models import metadata


async def init_db() -> None:
    """Initialize the database by creating all tables."""
    async with engine.begin() as conn:
        # gen_random_uuid() for primary keys
        await conn.execute(text('CREATE EXTENSION IF NOT EXISTS "pgcrypto"'))

        await conn.run_sync(metadata.create_all)

    print("✓ Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_db())
