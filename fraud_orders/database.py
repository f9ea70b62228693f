"""
Async SQLAlchemy database engine and session management.
SQLite (aiosqlite) by default; any async driver URL works.
CRITICAL: expire_on_commit=False prevents lazy-loading issues in async contexts.
"""
import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)

_engine = None
_async_session_factory = None


class Base(DeclarativeBase):
    pass


def _get_engine():
    global _engine
    if _engine is None:
        from fraud_orders.config import get_settings
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=False,
        )
    return _engine


def _get_session_factory():
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            _get_engine(), class_=AsyncSession, expire_on_commit=False
        )
    return _async_session_factory


def async_session_factory() -> AsyncSession:
    """Get a new session outside of a request context (scripts, activation)."""
    return _get_session_factory()()


async def create_tables(engine=None) -> None:
    """
    Create the options and blocked attempt log tables if missing.
    Safe to run on every start-up.
    """
    import fraud_orders.models  # noqa: F401  (registers tables on Base.metadata)

    engine = engine or _get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Fraud orders tables ensured")
