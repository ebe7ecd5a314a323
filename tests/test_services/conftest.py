"""Pytest configuration for service layer tests."""

import pytest

from filmroom.models.external import ExternalGameCreate, ExternalPlayCreate


@pytest.fixture
def game_create():
    return ExternalGameCreate(
        external_id="g1",
        source="ncaa_api",
        season=2023,
        week=13,
        home_team="Michigan",
        away_team="Ohio State",
        home_score=30,
        away_score=24,
    )


@pytest.fixture
def play_creates():
    return [
        ExternalPlayCreate(external_id="p3", source="ncaa_api", quarter=2, time="7:45", description="QB sneak"),
        ExternalPlayCreate(external_id="p1", source="ncaa_api", quarter=1, time="15:00", description="Kickoff"),
        ExternalPlayCreate(external_id="p2", source="ncaa_api", quarter=1, time="14:21", description="Run for 4"),
    ]
