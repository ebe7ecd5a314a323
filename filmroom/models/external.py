"""External game and play records as reported by third-party providers."""

from typing import Optional, Any, Dict
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Text, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from pydantic import BaseModel as PydanticBaseModel, Field, field_validator
from filmroom.models.base import BaseModel as SQLBaseModel, BasePydanticModel


SOURCES = ('espn', 'kaggle_ncaa', 'sports_reference', 'ncaa_api')


class ExternalGameModel(SQLBaseModel):
    """SQLAlchemy model for a provider's game record.
    
    mapped_game_id points at the internal game created from this record. It is
    a plain lookup column: deleting the internal game neither fails nor
    clears it.
    """
    __tablename__ = "external_games"
    
    external_id = Column(String(64), nullable=False, index=True)
    source = Column(String(30), nullable=False, index=True)
    
    season = Column(Integer, index=True)
    week = Column(Integer, index=True)
    home_team = Column(String(100))
    away_team = Column(String(100))
    home_score = Column(Integer)
    away_score = Column(Integer)
    date = Column(DateTime, index=True)
    venue = Column(String(200))
    raw_data = Column(JSON)
    
    mapped_game_id = Column(Integer, index=True)
    
    __table_args__ = (
        UniqueConstraint('source', 'external_id', name='uq_external_game_source_id'),
    )
    
    external_plays = relationship(
        "ExternalPlayModel",
        back_populates="external_game",
        passive_deletes=True,
        order_by="ExternalPlayModel.id",
    )
    
    @property
    def is_mapped(self) -> bool:
        return self.mapped_game_id is not None
    
    def __repr__(self):
        return f"<ExternalGame {self.source}:{self.external_id}: {self.away_team} @ {self.home_team}>"


class ExternalPlayModel(SQLBaseModel):
    """SQLAlchemy model for a provider's play record, scoped to one external game."""
    __tablename__ = "external_plays"
    
    external_game_id = Column(Integer, ForeignKey('external_games.id'), nullable=False, index=True)
    external_id = Column(String(64), nullable=False)
    source = Column(String(30), nullable=False, index=True)
    
    quarter = Column(Integer)
    time = Column(String(20))
    down = Column(Integer)
    distance = Column(Integer)
    yard_line = Column(Integer)
    play_type = Column(String(50), index=True)
    description = Column(Text)
    offense = Column(String(100))
    defense = Column(String(100))
    raw_data = Column(JSON)
    
    mapped_play_id = Column(Integer, index=True)
    
    __table_args__ = (
        UniqueConstraint('external_game_id', 'external_id', name='uq_external_play_game_id'),
    )
    
    external_game = relationship("ExternalGameModel", back_populates="external_plays")
    
    def __repr__(self):
        return f"<ExternalPlay {self.source}:{self.external_id} Q{self.quarter} {self.time}>"


class ExternalGameCreate(PydanticBaseModel):
    """Provider-neutral game shape produced by every source adapter."""
    external_id: str = Field(..., min_length=1, max_length=64, description="Provider game ID")
    source: str = Field(..., description="Provider tag")
    season: Optional[int] = None
    week: Optional[int] = None
    home_team: Optional[str] = Field(None, max_length=100)
    away_team: Optional[str] = Field(None, max_length=100)
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    date: Optional[datetime] = None
    venue: Optional[str] = Field(None, max_length=200)
    raw_data: Optional[Dict[str, Any]] = None
    
    @field_validator('external_id')
    @classmethod
    def validate_external_id(cls, v):
        """Validate ID format."""
        if not v.strip():
            raise ValueError('External ID cannot be empty or whitespace')
        return v.strip()


class ExternalPlayCreate(PydanticBaseModel):
    """Provider-neutral play shape produced by every source adapter.
    
    provider_game_id carries the provider's own game ID so a batch of plays
    can be grouped under its games before they are persisted.
    """
    external_id: str = Field(..., min_length=1, max_length=64, description="Provider play ID")
    source: str = Field(..., description="Provider tag")
    provider_game_id: Optional[str] = None
    quarter: Optional[int] = None
    time: Optional[str] = Field(None, max_length=20)
    down: Optional[int] = None
    distance: Optional[int] = None
    yard_line: Optional[int] = None
    play_type: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    offense: Optional[str] = Field(None, max_length=100)
    defense: Optional[str] = Field(None, max_length=100)
    raw_data: Optional[Dict[str, Any]] = None


class ExternalGameResponse(BasePydanticModel):
    """Pydantic model for external game responses."""
    id: int
    external_id: str
    source: str
    season: Optional[int] = None
    week: Optional[int] = None
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    date: Optional[datetime] = None
    venue: Optional[str] = None
    mapped_game_id: Optional[int] = None


class ExternalPlayResponse(BasePydanticModel):
    """Pydantic model for external play responses."""
    id: int
    external_game_id: int
    external_id: str
    source: str
    quarter: Optional[int] = None
    time: Optional[str] = None
    down: Optional[int] = None
    distance: Optional[int] = None
    yard_line: Optional[int] = None
    play_type: Optional[str] = None
    description: Optional[str] = None
    offense: Optional[str] = None
    defense: Optional[str] = None
    mapped_play_id: Optional[int] = None
