"""
Database configuration and session management
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from pluridesk.config import Settings, get_settings

settings = get_settings()

ASYNC_DRIVERS = {
    "postgres://": "postgresql+asyncpg://",  # Supabase / Heroku style URLs
    "postgresql://": "postgresql+asyncpg://",
    "sqlite:///": "sqlite+aiosqlite:///",
}


def _get_async_url(url: str) -> str:
    """Convert database URL to async variant"""
    for prefix, async_prefix in ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return async_prefix + url[len(prefix):]
    return url


def engine_options(database_url: str, settings: Settings) -> dict:
    options = {"echo": settings.DEBUG}
    # SQLite doesn't support pool_size
    if not database_url.startswith("sqlite"):
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_MAX_OVERFLOW
        options["pool_pre_ping"] = True
    return options


# Create async engine
database_url = _get_async_url(settings.DATABASE_URL)
is_sqlite = database_url.startswith("sqlite")
engine = create_async_engine(database_url, **engine_options(database_url, settings))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base class for models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """Dependency for getting database session.

    Routes commit explicitly once their business operation is complete; any
    exception escaping the route rolls the whole request back.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
