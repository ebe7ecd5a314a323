"""Services for provider game and play records."""

from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import desc

from .base import BaseService, DatabaseError, NotFoundError
from ..models.external import (
    ExternalGameModel, ExternalPlayModel, ExternalGameCreate, ExternalPlayCreate
)

# Fields an ExternalPlayCreate carries that are not columns
_PLAY_TRANSIENT_FIELDS = ('provider_game_id',)


class ExternalGameService(BaseService[ExternalGameModel, ExternalGameCreate]):
    """Service class for external game operations."""
    
    def __init__(self, db_session: Session):
        """Initialize external game service."""
        super().__init__(db_session, ExternalGameModel)
    
    def get_with_plays_or_404(self, external_game_id: int) -> ExternalGameModel:
        """Get an external game with its plays loaded.
        
        Raises:
            NotFoundError: If the external game does not exist
            DatabaseError: If database error occurs
        """
        try:
            game = self.db.query(ExternalGameModel).options(
                selectinload(ExternalGameModel.external_plays)
            ).filter(ExternalGameModel.id == external_game_id).first()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in get_with_plays_or_404: {e}")
            raise DatabaseError(f"Failed to get external game {external_game_id}") from e
        if game is None:
            raise NotFoundError(f"External game with ID {external_game_id} not found")
        return game
    
    def get_by_natural_key(self, source: str, external_id: str) -> Optional[ExternalGameModel]:
        try:
            return self.db.query(ExternalGameModel).filter(
                ExternalGameModel.source == source,
                ExternalGameModel.external_id == external_id
            ).first()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in get_by_natural_key: {e}")
            raise DatabaseError(f"Failed to get external game {source}:{external_id}") from e
    
    def list_games(self, source: Optional[str] = None, season: Optional[int] = None,
                   week: Optional[int] = None, limit: int = 100) -> List[ExternalGameModel]:
        """List external games, most recent first.
        
        Args:
            source: Provider tag filter
            season: Season filter
            week: Week filter
            limit: Maximum number of games to return
            
        Returns:
            List of external games with their plays loaded
        """
        try:
            query = self.db.query(ExternalGameModel).options(
                selectinload(ExternalGameModel.external_plays)
            )
            if source:
                query = query.filter(ExternalGameModel.source == source)
            if season:
                query = query.filter(ExternalGameModel.season == season)
            if week:
                query = query.filter(ExternalGameModel.week == week)
            return query.order_by(desc(ExternalGameModel.date), desc(ExternalGameModel.id)).limit(limit).all()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in list_games: {e}")
            raise DatabaseError("Failed to list external games") from e
    
    def upsert_game(self, game: ExternalGameCreate) -> ExternalGameModel:
        """Insert or update an external game by (source, external_id).
        
        The mapping pointer is never touched here, so re-importing a game
        keeps its link to the internal game.
        """
        data = game.model_dump()
        natural_key = {'source': data.pop('source'), 'external_id': data.pop('external_id')}
        return self.upsert(natural_key, data)
    
    def mark_mapped(self, external_game: ExternalGameModel, internal_game_id: int) -> ExternalGameModel:
        """Stamp an external game with the internal game created from it."""
        try:
            external_game.mapped_game_id = internal_game_id
            self.db.commit()
            return external_game
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Database error in mark_mapped: {e}")
            raise DatabaseError(f"Failed to mark external game {external_game.id} as mapped") from e
    
    def validation_summary(self, source: Optional[str] = None,
                           season: Optional[int] = None) -> Dict[str, Any]:
        """Summarize stored external games by source and season.
        
        Returns:
            Dictionary with totals, per-source and per-season counts, play
            counts, and one entry per game
        """
        games = self.list_games(source=source, season=season, limit=1000)
        
        by_source: Dict[str, int] = {}
        by_season: Dict[str, int] = {}
        total_plays = 0
        game_rows = []
        
        for game in games:
            by_source[game.source] = by_source.get(game.source, 0) + 1
            season_key = str(game.season) if game.season is not None else 'unknown'
            by_season[season_key] = by_season.get(season_key, 0) + 1
            play_count = len(game.external_plays)
            total_plays += play_count
            game_rows.append({
                'id': game.id,
                'external_id': game.external_id,
                'source': game.source,
                'home_team': game.home_team,
                'away_team': game.away_team,
                'season': game.season,
                'play_count': play_count,
                'is_mapped': game.is_mapped,
            })
        
        return {
            'total_games': len(games),
            'by_source': by_source,
            'by_season': by_season,
            'total_plays': total_plays,
            'average_plays_per_game': round(total_plays / len(games), 1) if games else 0,
            'games': game_rows,
        }


class ExternalPlayService(BaseService[ExternalPlayModel, ExternalPlayCreate]):
    """Service class for external play operations."""
    
    def __init__(self, db_session: Session):
        """Initialize external play service."""
        super().__init__(db_session, ExternalPlayModel)
    
    def upsert_play(self, external_game_id: int, play: ExternalPlayCreate) -> ExternalPlayModel:
        """Insert or update an external play by (external_game_id, external_id)."""
        data = play.model_dump(exclude=set(_PLAY_TRANSIENT_FIELDS))
        natural_key = {'external_game_id': external_game_id, 'external_id': data.pop('external_id')}
        return self.upsert(natural_key, data)
    
    def list_for_game(self, external_game_id: Optional[int] = None, source: Optional[str] = None,
                      play_type: Optional[str] = None, limit: int = 1000) -> List[ExternalPlayModel]:
        """List external plays in quarter order.
        
        Raises:
            DatabaseError: If database error occurs
        """
        try:
            query = self.db.query(ExternalPlayModel)
            if external_game_id is not None:
                query = query.filter(ExternalPlayModel.external_game_id == external_game_id)
            if source:
                query = query.filter(ExternalPlayModel.source == source)
            if play_type:
                query = query.filter(ExternalPlayModel.play_type == play_type)
            return query.order_by(ExternalPlayModel.quarter, ExternalPlayModel.id).limit(limit).all()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in list_for_game: {e}")
            raise DatabaseError("Failed to list external plays") from e
    
    def get_mappings(self, external_game_id: Optional[int] = None,
                     internal_game_id: Optional[int] = None) -> List[ExternalPlayModel]:
        """Get mapped external plays for an external or an internal game.
        
        The internal game is resolved through the external games that point
        at it.
        """
        try:
            query = self.db.query(ExternalPlayModel).filter(ExternalPlayModel.mapped_play_id.isnot(None))
            if external_game_id is not None:
                query = query.filter(ExternalPlayModel.external_game_id == external_game_id)
            if internal_game_id is not None:
                query = query.join(ExternalGameModel).filter(
                    ExternalGameModel.mapped_game_id == internal_game_id
                )
            return query.order_by(ExternalPlayModel.quarter, ExternalPlayModel.id).all()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in get_mappings: {e}")
            raise DatabaseError("Failed to get play mappings") from e
