from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from app.config import settings

# sqlite connections are bound to the loop that opened them, so they are never pooled
engine_options = {"poolclass": NullPool} if settings.DATABASE_URL.startswith("sqlite") else {"pool_pre_ping": True}

async_engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG, **engine_options)
AsyncSessionLocal = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

async def create_tables():
    from app.models import Base

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
