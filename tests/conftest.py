"""Shared pytest fixtures: a throwaway SQLite database per test."""

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import tempfile
import os

from filmroom.models import Base, TeamModel, ExternalGameModel, ExternalPlayModel


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine backed by a temporary file."""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    
    engine = create_engine(
        f"sqlite:///{db_path}",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False
    )
    Base.metadata.create_all(bind=engine)
    
    yield engine
    
    engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture(scope="function")
def test_session(test_engine):
    """Create a test database session with proper cleanup."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()
    
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def michigan(test_session):
    team = TeamModel(name="Michigan Wolverines", abbreviation="MICH", level="COLLEGE", conference="Big Ten")
    test_session.add(team)
    test_session.commit()
    test_session.refresh(team)
    return team


@pytest.fixture
def ohio_state(test_session):
    team = TeamModel(name="Ohio State Buckeyes", abbreviation="OSU", level="COLLEGE", conference="Big Ten")
    test_session.add(team)
    test_session.commit()
    test_session.refresh(team)
    return team


@pytest.fixture
def sample_external_plays_data():
    """Three plays of a Michigan home game against Ohio State."""
    return [
        {
            "external_id": "p1",
            "quarter": 1,
            "time": "15:00",
            "play_type": "Kickoff",
            "description": "Kickoff 65 yards, touchback",
            "offense": "Ohio State",
            "defense": "Michigan",
        },
        {
            "external_id": "p2",
            "quarter": 1,
            "time": "14:21",
            "down": 1,
            "distance": 10,
            "yard_line": 75,
            "play_type": "Rush",
            "description": "Shotgun, handoff up the middle for 4 yards",
            "offense": "Michigan",
            "defense": "Ohio State",
        },
        {
            "external_id": "p3",
            "quarter": 2,
            "time": "7:45",
            "down": 3,
            "distance": 2,
            "yard_line": 2,
            "play_type": "Weird Thing",
            "description": "QB sneak",
            "offense": "Michigan",
            "defense": "Ohio State",
            "raw_data": {"result": {"yards": 2, "points": 6, "success": True}},
        },
    ]


@pytest.fixture
def external_game(test_session, sample_external_plays_data):
    """Stored external game with three plays."""
    game = ExternalGameModel(
        external_id="401520281",
        source="espn",
        season=2023,
        week=13,
        home_team="Michigan",
        away_team="Ohio State",
        home_score=30,
        away_score=24,
        date=datetime(2023, 11, 25, 17, 0),
        venue="Michigan Stadium",
    )
    test_session.add(game)
    test_session.commit()
    
    for play_data in sample_external_plays_data:
        test_session.add(ExternalPlayModel(external_game_id=game.id, source="espn", **play_data))
    test_session.commit()
    test_session.refresh(game)
    return game
