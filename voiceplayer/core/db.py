from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
from .base import Base

def build_engine(dsn: str) -> AsyncEngine:
    return create_async_engine(dsn, pool_pre_ping=True)

def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def init_models(engine: AsyncEngine, manage: str = "migrations"):
    ## Both tables are owned by the recorder app; only create them for local dev databases.
    if manage.lower() == "create_all":
        from voiceplayer.modules.recordings import models  # noqa: F401  registers tables on Base
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
