"""Internal play data models."""

from typing import Optional
from sqlalchemy import Column, String, Integer, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from pydantic import Field, model_validator, ConfigDict
from filmroom.models.base import BaseModel as SQLBaseModel, BasePydanticModel
from filmroom.models.standardized import PlayType, compute_situation_flags


class PlayModel(SQLBaseModel):
    """SQLAlchemy model for graded plays."""
    __tablename__ = "plays"
    
    game_id = Column(Integer, ForeignKey('games.id'), nullable=False, index=True)
    
    # Game situation
    quarter = Column(Integer, nullable=False)
    time = Column(String(20))
    down = Column(Integer)
    distance = Column(Integer)
    yard_line = Column(Integer)  # Yards from opponent's goal line
    
    # Play details
    play_type = Column(String(20), nullable=False, index=True)
    description = Column(Text)
    offense = Column(String(100))
    defense = Column(String(100))
    
    # Result
    yards = Column(Integer)
    points = Column(Integer)
    success = Column(Boolean)
    turnover = Column(Boolean)
    sack = Column(Boolean)
    interception = Column(Boolean)
    fumble = Column(Boolean)
    
    # Scheme
    formation = Column(String(30))
    personnel = Column(String(10))
    blitz = Column(Boolean)
    pressure = Column(Boolean)
    coverage = Column(String(30))
    
    # Situation flags
    is_red_zone = Column(Boolean, default=False, nullable=False)
    is_goal_to_go = Column(Boolean, default=False, nullable=False)
    is_third_down = Column(Boolean, default=False, nullable=False)
    is_fourth_down = Column(Boolean, default=False, nullable=False)
    
    game = relationship("GameModel", back_populates="plays")
    
    def __repr__(self):
        return f"<Play {self.id}: Q{self.quarter} {self.time} {self.play_type}>"


class PlayCreate(BasePydanticModel):
    """Pydantic model for creating plays.
    
    Situation flags are recomputed from down/distance/yard_line on
    validation so stored rows always agree with the standardizer.
    """
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    game_id: int
    quarter: int = Field(..., ge=0, le=10, description="Quarter")
    time: Optional[str] = Field(None, max_length=20)
    down: Optional[int] = None
    distance: Optional[int] = None
    yard_line: Optional[int] = None
    play_type: PlayType = PlayType.RUSH.value
    description: Optional[str] = None
    offense: Optional[str] = Field(None, max_length=100)
    defense: Optional[str] = Field(None, max_length=100)
    yards: Optional[int] = None
    points: Optional[int] = None
    success: Optional[bool] = None
    turnover: Optional[bool] = None
    sack: Optional[bool] = None
    interception: Optional[bool] = None
    fumble: Optional[bool] = None
    formation: Optional[str] = Field(None, max_length=30)
    personnel: Optional[str] = Field(None, max_length=10)
    blitz: Optional[bool] = None
    pressure: Optional[bool] = None
    coverage: Optional[str] = Field(None, max_length=30)
    is_red_zone: bool = False
    is_goal_to_go: bool = False
    is_third_down: bool = False
    is_fourth_down: bool = False
    
    @model_validator(mode='after')
    def recompute_situation_flags(self):
        """Derive the situation flags from down/distance/yard_line."""
        for flag, value in compute_situation_flags(self.down, self.distance, self.yard_line).items():
            setattr(self, flag, value)
        return self


class PlayResponse(BasePydanticModel):
    """Pydantic model for play responses."""
    id: int
    game_id: int
    quarter: int
    time: Optional[str] = None
    down: Optional[int] = None
    distance: Optional[int] = None
    yard_line: Optional[int] = None
    play_type: str
    description: Optional[str] = None
    is_red_zone: bool
    is_goal_to_go: bool
    is_third_down: bool
    is_fourth_down: bool
