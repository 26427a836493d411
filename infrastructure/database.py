"""
Database engine and session factory
"""
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import DatabaseSettings
from infrastructure.models import Base


def build_async_url(database_url: str) -> str:
    """Make sure the URL names an async driver"""
    url = make_url(database_url)
    drivername = url.drivername

    if "+" in drivername:
        return database_url

    driver_map = {
        "postgresql": "postgresql+asyncpg",
        "postgres": "postgresql+asyncpg",
        "sqlite": "sqlite+aiosqlite",
    }

    if drivername not in driver_map:
        raise ValueError(f"Unsupported database driver: {drivername}. Use an async driver in DATABASE__URL")

    return url.set(drivername=driver_map[drivername]).render_as_string(hide_password=False)


def create_engine(db: DatabaseSettings) -> AsyncEngine:
    url = build_async_url(db.url)
    options = {"echo": db.echo}
    if not make_url(url).drivername.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
