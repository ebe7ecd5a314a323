"""Services module for business logic layer."""

from .base import BaseService, ServiceException, ValidationException, NotFoundError, DatabaseError
from .team_service import TeamService
from .game_service import GameService
from .play_service import PlayService
from .external_service import ExternalGameService, ExternalPlayService

__all__ = [
    'BaseService',
    'ServiceException',
    'ValidationException',
    'NotFoundError',
    'DatabaseError',
    'TeamService',
    'GameService',
    'PlayService',
    'ExternalGameService',
    'ExternalPlayService',
]
