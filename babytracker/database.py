from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from babytracker.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE / SET NULL unless asked per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create the async engine for ``url``.

    PostgreSQL connections are pre-pinged; SQLite (development and tests)
    gets foreign-key enforcement so family and baby deletes cascade the
    same way on both backends.
    """
    if url.startswith("sqlite"):
        new_engine = create_async_engine(url, echo=False, **kwargs)
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return new_engine
    return create_async_engine(url, echo=False, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.DATABASE_URL)

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy ORM models."""
    pass


async def get_db() -> AsyncSession:
    """FastAPI dependency yielding the request's unit of work.

    Services only flush; the session commits once the handler (REST or
    GraphQL) returns and rolls back if anything raised.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
