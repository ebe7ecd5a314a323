"""Canonical, provider-neutral play representation."""

from enum import Enum
from typing import Optional, Dict
from pydantic import BaseModel as PydanticBaseModel, Field, model_validator, ConfigDict


class PlayType(str, Enum):
    """Play types recognized by the grading schema."""
    RUSH = "RUSH"
    PASS = "PASS"
    PUNT = "PUNT"
    FIELD_GOAL = "FIELD_GOAL"
    KICKOFF = "KICKOFF"
    EXTRA_POINT = "EXTRA_POINT"
    SAFETY = "SAFETY"
    PENALTY = "PENALTY"
    TIMEOUT = "TIMEOUT"
    CHALLENGE = "CHALLENGE"


def normalize_play_type(value: Optional[str]) -> Optional[PlayType]:
    """Map a play type token onto the enumeration.
    
    Args:
        value: Raw token such as "pass", "Field Goal" or "EXTRA_POINT"
        
    Returns:
        Matching PlayType, or None when the token is not a known type
    """
    if value is None:
        return None
    token = str(value).strip().upper().replace('-', '_').replace(' ', '_')
    if not token:
        return None
    if token == 'RUN':
        return PlayType.RUSH
    try:
        return PlayType(token)
    except ValueError:
        return None


def compute_situation_flags(down: Optional[int], distance: Optional[int],
                            yard_line: Optional[int]) -> Dict[str, bool]:
    """Compute the derived situation flags for a down/distance/field position.
    
    yard_line is the distance to the opponent's goal line (0-100).
    
    Args:
        down: Down number
        distance: Yards to go for a first down
        yard_line: Yards from the opponent's goal line
        
    Returns:
        Dict with is_red_zone, is_goal_to_go, is_third_down, is_fourth_down
    """
    return {
        'is_red_zone': yard_line is not None and yard_line <= 20,
        'is_goal_to_go': (
            down is not None and distance is not None and yard_line is not None
            and yard_line <= distance
        ),
        'is_third_down': down == 3,
        'is_fourth_down': down == 4,
    }


class PlayResult(PydanticBaseModel):
    """Outcome of a play; every field is optional."""
    yards: Optional[int] = None
    success: Optional[bool] = None
    points: Optional[int] = None
    turnover: Optional[bool] = None
    sack: Optional[bool] = None
    interception: Optional[bool] = None
    fumble: Optional[bool] = None


class StandardizedPlay(PydanticBaseModel):
    """Provider-neutral play.
    
    The four situation flags are always recomputed from down, distance and
    yard_line; values supplied by the caller are discarded.
    """
    model_config = ConfigDict(from_attributes=True)
    
    id: str = Field(..., description="Provider play ID")
    game_id: str = Field(..., description="Provider game ID")
    source: Optional[str] = Field(None, description="Provider tag")
    quarter: int = Field(..., description="Quarter (1-4 expected)")
    time: str = Field(..., description="Game clock")
    down: Optional[int] = None
    distance: Optional[int] = None
    yard_line: Optional[int] = Field(None, description="Yards from opponent goal")
    play_type: str = Field(PlayType.RUSH.value, description="Play type")
    description: str
    offense: str
    defense: str
    result: Optional[PlayResult] = None
    formation: Optional[str] = None
    personnel: Optional[str] = None
    blitz: Optional[bool] = None
    pressure: Optional[bool] = None
    coverage: Optional[str] = None
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
