"""Internal game data models."""

from typing import Optional
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from pydantic import Field, field_validator
from filmroom.models.base import BaseModel as SQLBaseModel, BasePydanticModel


class GameModel(SQLBaseModel):
    """SQLAlchemy model for games on a team's grading schedule."""
    __tablename__ = "games"
    
    date = Column(DateTime, nullable=False, index=True)
    season = Column(Integer, index=True)
    week = Column(Integer, index=True)
    
    # Teams
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=False, index=True)
    opponent_id = Column(Integer, ForeignKey('teams.id'), nullable=False, index=True)
    home_away = Column(String(4), nullable=False, default='HOME')  # 'HOME' or 'AWAY'
    
    # Score
    team_score = Column(Integer, default=0)
    opponent_score = Column(Integer, default=0)
    final_quarter = Column(Integer, default=4)
    
    # Relationships
    team = relationship("TeamModel", foreign_keys=[team_id])
    opponent = relationship("TeamModel", foreign_keys=[opponent_id])
    plays = relationship("PlayModel", back_populates="game", cascade="all, delete-orphan",
                         order_by="PlayModel.id")
    
    def __repr__(self):
        return f"<Game {self.id}: team {self.team_id} vs {self.opponent_id} ({self.date})>"


class GameCreate(BasePydanticModel):
    """Pydantic model for creating games."""
    date: datetime = Field(..., description="Kickoff date")
    season: Optional[int] = Field(None, ge=1900, le=2100, description="Season year")
    week: Optional[int] = Field(None, ge=0, le=25, description="Week number")
    team_id: int = Field(..., description="Graded team ID")
    opponent_id: int = Field(..., description="Opponent team ID")
    home_away: str = Field('HOME', description="HOME or AWAY")
    team_score: Optional[int] = Field(0, ge=0, le=200)
    opponent_score: Optional[int] = Field(0, ge=0, le=200)
    final_quarter: Optional[int] = Field(4, ge=1, le=10)
    
    @field_validator('home_away')
    @classmethod
    def validate_home_away(cls, v):
        """Validate home/away marker."""
        if v.upper() not in ('HOME', 'AWAY'):
            raise ValueError('home_away must be HOME or AWAY')
        return v.upper()


class GameResponse(GameCreate):
    """Pydantic model for game responses."""
    id: int
