"""Play service for business logic."""

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseService, DatabaseError
from ..models.external import ExternalPlayModel
from ..models.play import PlayModel, PlayCreate
from ..models.standardized import StandardizedPlay, normalize_play_type, PlayType


class PlayService(BaseService[PlayModel, PlayCreate]):
    """Service class for internal play operations."""
    
    def __init__(self, db_session: Session):
        """Initialize play service."""
        super().__init__(db_session, PlayModel)
    
    def get_plays_by_game(self, game_id: int, limit: int = 1000, offset: int = 0) -> List[PlayModel]:
        """Get plays for a game in quarter order.
        
        Raises:
            DatabaseError: If database error occurs
        """
        try:
            query = self.db.query(PlayModel).filter(
                PlayModel.game_id == game_id
            ).order_by(PlayModel.quarter, PlayModel.id)
            
            return query.offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in get_plays_by_game: {e}")
            raise DatabaseError(f"Failed to get plays for game {game_id}") from e
    
    def create_from_standardized(self, game_id: int, play: StandardizedPlay,
                                 external_play: Optional[ExternalPlayModel] = None) -> PlayModel:
        """Persist a standardized play under an internal game.
        
        When the external play it came from is given, its mapping pointer
        is set in the same commit as the new row, so a failure leaves
        neither behind.
        
        Args:
            game_id: Internal game ID
            play: Standardized play
            external_play: External play to link to the new play
            
        Returns:
            Created play
            
        Raises:
            DatabaseError: If database error occurs
        """
        play_data = self._to_play_create(game_id, play)
        if external_play is None:
            return self.create(play_data)
        
        external_play_id = external_play.id
        try:
            db_obj = PlayModel(**play_data.model_dump())
            self.db.add(db_obj)
            self.db.flush()
            external_play.mapped_play_id = db_obj.id
            self.db.commit()
            self.db.refresh(db_obj)
            
            self._logger.info(f"Created Play {db_obj.id} from external play {external_play_id}")
            return db_obj
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Database error in create_from_standardized: {e}")
            raise DatabaseError(f"Failed to create play for external play {external_play_id}") from e
    
    @staticmethod
    def _to_play_create(game_id: int, play: StandardizedPlay) -> PlayCreate:
        result = play.result
        play_type = normalize_play_type(play.play_type) or PlayType.RUSH
        return PlayCreate(
            game_id=game_id,
            quarter=play.quarter,
            time=play.time,
            down=play.down,
            distance=play.distance,
            yard_line=play.yard_line,
            play_type=play_type,
            description=play.description,
            offense=play.offense,
            defense=play.defense,
            yards=result.yards if result else None,
            points=result.points if result else None,
            success=result.success if result else None,
            turnover=result.turnover if result else None,
            sack=result.sack if result else None,
            interception=result.interception if result else None,
            fumble=result.fumble if result else None,
            formation=play.formation,
            personnel=play.personnel,
            blitz=play.blitz,
            pressure=play.pressure,
            coverage=play.coverage,
        )
