"""
Create the transport tables if they do not exist.

Run once against a fresh database:
  DATABASE_URL=postgresql+asyncpg://... python -m app.db.init_db
"""
import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

import app.core.models  # noqa: F401  (registers tables on Base.metadata)
from app.db.session import Base, engine


async def create_tables(target: AsyncEngine) -> None:
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    await create_tables(engine)
    await engine.dispose()
    print("Transport tables ready.")


if __name__ == "__main__":
    asyncio.run(main())
