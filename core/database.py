"""
Database engine, session factory and dialect helpers (SQLAlchemy async)
"""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from sqlalchemy.dialects import postgresql, sqlite
from core.config import settings
from core.exceptions import RegistryError
import logging

logger = logging.getLogger(__name__)

# Dialects that support INSERT ... ON CONFLICT
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    poolclass=NullPool,
    future=True
)


def make_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    """Session factory used by every component that writes through the ORM"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


def upsert_insert(session: AsyncSession, model):
    """
    Return a dialect-specific INSERT construct supporting ON CONFLICT.
    
    Raises:
        RegistryError: If the bound dialect has no upsert support
    """
    dialect = session.get_bind().dialect.name
    try:
        insert_factory = _UPSERT_INSERTS[dialect]
    except KeyError:
        raise RegistryError(
            "Upsert is not supported for this database dialect",
            context={"dialect": dialect}
        )
    return insert_factory(model)
