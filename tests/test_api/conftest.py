"""Pytest configuration for API tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from fastapi.middleware.cors import CORSMiddleware

from filmroom.api.routers import data_import, teams
from filmroom.api.dependencies import get_db_session


@pytest.fixture(scope="function")
def test_client(test_session):
    """Create a test client with database session override."""
    
    def override_get_db_session():
        yield test_session
    
    # Built without the database middleware so requests use the test session
    app = FastAPI(title="Filmroom", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:8000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(teams.router, prefix="/api/v1/teams", tags=["teams"])
    app.include_router(data_import.router, prefix="/api/v1/data-import", tags=["data-import"])
    
    app.dependency_overrides[get_db_session] = override_get_db_session
    
    with TestClient(app) as client:
        yield client
