"""Film-grading data models."""

from .base import Base, BaseModel, BasePydanticModel
from .team import TeamModel
from .game import GameModel
from .play import PlayModel
from .external import ExternalGameModel, ExternalPlayModel
from .standardized import StandardizedPlay, PlayResult, PlayType

# Ensure all models are imported for relationship resolution
__all__ = [
    'Base', 'BaseModel', 'BasePydanticModel', 'TeamModel', 'GameModel', 'PlayModel',
    'ExternalGameModel', 'ExternalPlayModel', 'StandardizedPlay', 'PlayResult', 'PlayType'
]
