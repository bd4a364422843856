"""Database initialization and ORM setup."""
from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from servicetree.config import settings
from servicetree.errors import ConfigurationError, ConnectivityError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def get_database_url() -> str:
    """Get database URL of the monitoring platform's database."""
    return settings.DATABASE_URL


def get_engine() -> Engine:
    """Create the engine on first use.

    Creating it lazily keeps the database driver an optional dependency until
    a command actually needs the store.
    """
    global _engine, _SessionLocal

    if _engine is None:
        try:
            _engine = create_engine(
                get_database_url(),
                echo=False,  # Disable SQL echo to prevent logging
                pool_pre_ping=True,
            )
        except (ArgumentError, ImportError) as e:
            raise ConfigurationError(f"Invalid database configuration: {e}") from e
        _SessionLocal = sessionmaker(_engine, class_=Session, expire_on_commit=False)
        logger.debug(f"Database engine created for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session bound to the platform database."""
    get_engine()
    try:
        session = _SessionLocal()
    except SQLAlchemyError as e:
        raise ConnectivityError(f"Failed to open database session: {e}") from e

    with session:
        yield session
