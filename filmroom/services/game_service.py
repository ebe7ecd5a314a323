"""Game service for business logic."""

from typing import Optional, List
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_, desc
from pydantic import ValidationError

from .base import BaseService, DatabaseError, ValidationException
from ..models.game import GameModel, GameCreate
from ..models.external import ExternalGameModel


class GameService(BaseService[GameModel, GameCreate]):
    """Service class for internal game operations."""
    
    def __init__(self, db_session: Session):
        """Initialize game service."""
        super().__init__(db_session, GameModel)
    
    def get_games_for_team(self, team_id: int, season: Optional[int] = None,
                           limit: int = 100) -> List[GameModel]:
        """Get games a team played in, most recent first.
        
        Raises:
            DatabaseError: If database error occurs
        """
        try:
            query = self.db.query(GameModel).filter(
                or_(GameModel.team_id == team_id, GameModel.opponent_id == team_id)
            )
            if season:
                query = query.filter(GameModel.season == season)
            return query.order_by(desc(GameModel.date)).limit(limit).all()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in get_games_for_team: {e}")
            raise DatabaseError(f"Failed to get games for team {team_id}") from e
    
    def create_from_external(self, external_game: ExternalGameModel, team_id: int,
                             opponent_id: int, home_away: str,
                             season: Optional[int] = None) -> GameModel:
        """Create the internal game for an external game record.
        
        Scores are oriented to the graded team: when it is the away side the
        away score becomes team_score.
        
        Args:
            external_game: Provider game record
            team_id: Graded team ID
            opponent_id: Opponent team ID
            home_away: 'HOME' or 'AWAY' for the graded team
            season: Season override; falls back to the external game's season
            
        Returns:
            Created game
        """
        if home_away == 'AWAY':
            team_score, opponent_score = external_game.away_score, external_game.home_score
        else:
            team_score, opponent_score = external_game.home_score, external_game.away_score
        
        try:
            game_data = GameCreate(
                date=external_game.date or datetime.utcnow(),
                season=season if season is not None else external_game.season,
                week=external_game.week,
                team_id=team_id,
                opponent_id=opponent_id,
                home_away=home_away,
                team_score=team_score or 0,
                opponent_score=opponent_score or 0,
                final_quarter=4,
            )
        except ValidationError as e:
            raise ValidationException(f"External game {external_game.id} cannot become a game: {e}") from e
        return self.create(game_data)
