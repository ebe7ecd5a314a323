"""Request middleware: one import session per request, and timing logs."""

import time
import logging
from typing import Callable, Optional
from fastapi import Request, Response
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware

from ..database.config import get_engine, get_session

logger = logging.getLogger(__name__)


def _mark_unsaved(session, flush_context):
    session.info["unsaved"] = True


def _mark_saved(session):
    session.info.pop("unsaved", None)


class DatabaseMiddleware(BaseHTTPMiddleware):
    """Attach a session to request.state for the import routes.

    Import services commit each game and play as they go, so whatever is
    still pending when the request ends belongs to a failed item and is
    rolled back rather than committed.
    """

    def __init__(self, app, database_url: Optional[str] = None):
        super().__init__(app)
        self.database_url = database_url
        self.session_factory: Optional[sessionmaker] = None

    def _factory(self) -> Optional[sessionmaker]:
        if self.session_factory is None:
            try:
                factory = get_session(get_engine(self.database_url))
                event.listen(factory, "after_flush", _mark_unsaved)
                event.listen(factory, "after_commit", _mark_saved)
                event.listen(factory, "after_rollback", _mark_saved)
                self.session_factory = factory
                logger.info("Import session factory ready")
            except (SQLAlchemyError, ImportError) as e:
                # Health and docs routes still answer; the dependency returns 503
                logger.error(f"Database unavailable: {e}")
        return self.session_factory

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        factory = self._factory()
        if factory is None:
            return await call_next(request)

        session = factory()
        request.state.db_session = session
        try:
            return await call_next(request)
        finally:
            if session.info.get("unsaved") or session.new or session.dirty or session.deleted:
                logger.warning(f"Discarding uncommitted changes from {request.method} {request.url.path}")
                session.rollback()
            session.close()


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status and duration in X-Process-Time."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.3f}s)")
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response
