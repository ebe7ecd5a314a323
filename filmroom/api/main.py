"""Main FastAPI application."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import logging
from typing import Optional

from .routers import data_import, teams
from .middleware import DatabaseMiddleware, LoggingMiddleware
from ..database.config import get_engine

logger = logging.getLogger(__name__)


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    
    app = FastAPI(
        title="Filmroom",
        description="Play-by-play import, standardization and mapping API for film grading",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:8000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.add_middleware(DatabaseMiddleware, database_url=database_url)
    app.add_middleware(LoggingMiddleware)
    
    app.include_router(teams.router, prefix="/api/v1/teams", tags=["teams"])
    app.include_router(data_import.router, prefix="/api/v1/data-import", tags=["data-import"])
    
    @app.get("/api/v1/health")
    async def health_check():
        """Health check endpoint."""
        try:
            get_engine(database_url)
            return {
                "status": "healthy",
                "service": "Filmroom",
                "version": "1.0.0",
                "database": "configured"
            }
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            raise HTTPException(status_code=503, detail="Service unavailable")
    
    return app

# Create the app instance
app = create_app()
