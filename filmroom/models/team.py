"""Team data models for the teams a staff grades and plays against."""

from typing import Optional
from sqlalchemy import Column, String
from pydantic import BaseModel as PydanticBaseModel, Field, field_validator
from filmroom.models.base import BaseModel as SQLBaseModel, BasePydanticModel


TEAM_LEVELS = ('NFL', 'COLLEGE', 'HIGH_SCHOOL')


class TeamModel(SQLBaseModel):
    """SQLAlchemy model for internal teams."""
    __tablename__ = "teams"
    
    name = Column(String(100), nullable=False, index=True)  # e.g., "Ohio State Buckeyes"
    abbreviation = Column(String(10), unique=True, nullable=False, index=True)  # e.g., "OSU"
    level = Column(String(20), nullable=False, default='COLLEGE')
    conference = Column(String(50))
    
    def __repr__(self):
        return f"<Team {self.abbreviation}: {self.name}>"


class TeamBase(BasePydanticModel):
    """Base Pydantic model for team data."""
    name: str = Field(..., min_length=1, max_length=100, description="Full team name")
    abbreviation: str = Field(..., min_length=2, max_length=10, description="Team abbreviation")
    level: str = Field('COLLEGE', description="Competition level")
    conference: Optional[str] = Field(None, max_length=50, description="Conference")
    
    @field_validator('abbreviation')
    @classmethod
    def validate_abbreviation(cls, v):
        """Normalize abbreviation to uppercase."""
        v = v.strip()
        if not v:
            raise ValueError('Abbreviation cannot be empty or whitespace')
        return v.upper()
    
    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate competition level."""
        if v.upper() not in TEAM_LEVELS:
            raise ValueError(f'Level must be one of: {", ".join(TEAM_LEVELS)}')
        return v.upper()


class TeamCreate(TeamBase):
    """Pydantic model for creating teams."""
    pass


class TeamUpdate(PydanticBaseModel):
    """Pydantic model for updating teams."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    conference: Optional[str] = Field(None, max_length=50)


class TeamResponse(TeamBase):
    """Pydantic model for team responses."""
    id: int
