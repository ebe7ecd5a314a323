"""Engines and sessions for the import pipeline."""

import os
import logging
from contextlib import contextmanager
from typing import Optional, Iterator
from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from filmroom.models.base import get_database_url

logger = logging.getLogger(__name__)


def get_engine(database_url: Optional[str] = None, **kwargs) -> Engine:
    """Build an engine for the configured database.

    SQLite URLs (tests, local CSV imports) share one connection across
    threads so an in-memory database survives between sessions.
    """
    url = get_database_url(database_url)
    options = {
        'echo': os.getenv('DATABASE_ECHO', 'false').lower() == 'true',
        'pool_pre_ping': True,
    }
    if url.startswith('sqlite'):
        options['poolclass'] = StaticPool
        options['connect_args'] = {'check_same_thread': False}
    options.update(kwargs)
    return create_engine(url, **options)


def get_session(engine: Optional[Engine] = None) -> sessionmaker:
    # Rows stay readable after the importer's per-item commits
    return sessionmaker(bind=engine or get_engine(), autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """Session for one import run.

    Services commit per game and per play, so the scope never commits. An
    exception escaping the block rolls back the item in flight.
    """
    session = (factory or _default_factory())()
    try:
        yield session
    except Exception:
        logger.warning("Import run aborted; rolling back the pending item")
        session.rollback()
        raise
    finally:
        session.close()


_factory: Optional[sessionmaker] = None


def _default_factory() -> sessionmaker:
    global _factory
    if _factory is None:
        _factory = get_session()
    return _factory
