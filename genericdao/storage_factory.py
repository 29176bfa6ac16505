"""
Engine and session factory for the generic DAO.

Configuration comes from the environment:
- ``DATABASE_URL``: SQLAlchemy database URL (default ``sqlite:///genericdao.db``)
- ``GENERICDAO_SQL_ECHO``: set to ``1`` or ``true`` to log every SQL statement
"""

import logging
import os
from contextlib import contextmanager
from typing import Iterable, Iterator, Union

from sqlalchemy import create_engine
from sqlmodel import Session

from genericdao.mapper import DataMapper
from genericdao.storage.backends.sqlmodel_dao import SQLModelGenericDao

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///genericdao.db"

# Singleton engine
_engine = None


def get_database_url() -> str:
    """The configured database URL."""
    db_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    if not db_url:
        raise ValueError("DATABASE_URL environment variable is empty.")
    return db_url


def _echo_enabled() -> bool:
    return os.getenv("GENERICDAO_SQL_ECHO", "").strip().lower() in ("1", "true", "yes")


def get_engine():
    """Create the engine from DATABASE_URL on first use and reuse it afterwards."""
    global _engine
    if _engine is None:
        db_url = get_database_url()
        _engine = create_engine(db_url, echo=_echo_enabled())
        logger.info("Created database engine for %s", _engine.url.render_as_string(hide_password=True))
    return _engine


@contextmanager
def session_scope(engine=None) -> Iterator[Session]:
    """
    Provide a session which is committed when the block succeeds and rolled
    back when it raises.
    """
    with Session(engine if engine is not None else get_engine()) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


@contextmanager
def dao_scope(models: Iterable[Union[type, DataMapper]], engine=None) -> Iterator[SQLModelGenericDao]:
    """
    Provide a generic DAO bound to a fresh session for the length of the block.

    Example:
        >>> with dao_scope([Owner, Thing]) as dao:
        ...     dao.create(Owner(name="alice"))
    """
    with session_scope(engine) as session:
        yield SQLModelGenericDao(session, models)


def close_engine():
    """Dispose of the shared engine so the next get_engine() re-reads the configuration."""
    global _engine
    if _engine:
        _engine.dispose()
        _engine = None
