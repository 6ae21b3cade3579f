"""Async PostgreSQL engine (asyncpg) and the per-request session dependency.

Every table lives in the ``cars`` schema and repositories qualify names
explicitly, so no ``search_path`` is set on the connection.
"""


from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    # asyncpg takes ``ssl`` rather than libpq's ``sslmode``
    connect_args={
        "ssl": settings.db_ssl,
        "server_settings": {"application_name": settings.app_name},
    },
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; committed when the handler returns, rolled back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
