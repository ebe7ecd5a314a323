"""FastAPI dependencies for dependency injection."""

from typing import Generator
from fastapi import Request, HTTPException
from sqlalchemy.orm import Session
import logging

from ..data.config import ImportConfig
from ..data.importer import PlayImporter

logger = logging.getLogger(__name__)


def get_db_session(request: Request) -> Generator[Session, None, None]:
    """Get database session from request state."""
    if not hasattr(request.state, 'db_session'):
        raise HTTPException(
            status_code=503,
            detail="Database connection not available"
        )
    
    yield request.state.db_session


def get_import_config() -> ImportConfig:
    return ImportConfig.from_env()


def build_importer(db: Session) -> PlayImporter:
    """Build a play importer bound to the request's session."""
    return PlayImporter(db, config=get_import_config())
