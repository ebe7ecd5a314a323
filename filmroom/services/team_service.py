"""Team service for business logic."""

from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func, or_

from .base import BaseService, DatabaseError, NotFoundError
from ..models.team import TeamModel, TeamCreate


class TeamService(BaseService[TeamModel, TeamCreate]):
    """Service class for team operations."""
    
    def __init__(self, db_session: Session):
        """Initialize team service."""
        super().__init__(db_session, TeamModel)
    
    def get_by_abbreviation(self, abbreviation: str) -> Optional[TeamModel]:
        """Get team by abbreviation.
        
        Args:
            abbreviation: Team abbreviation (e.g., 'OSU', 'KC')
            
        Returns:
            Team if found, None otherwise
            
        Raises:
            DatabaseError: If database error occurs
        """
        try:
            return self.db.query(TeamModel).filter(
                TeamModel.abbreviation == abbreviation.strip().upper()
            ).first()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in get_by_abbreviation: {e}")
            raise DatabaseError(f"Failed to get team by abbreviation {abbreviation}") from e
    
    def get_by_abbreviation_or_404(self, abbreviation: str) -> TeamModel:
        team = self.get_by_abbreviation(abbreviation)
        if team is None:
            raise NotFoundError(f"Team {abbreviation} not found")
        return team
    
    def get_by_name(self, name: str) -> Optional[TeamModel]:
        """Get team by full name, ignoring case."""
        try:
            return self.db.query(TeamModel).filter(
                func.lower(TeamModel.name) == name.strip().lower()
            ).first()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in get_by_name: {e}")
            raise DatabaseError(f"Failed to get team by name {name}") from e
    
    def search_teams(self, query: str) -> List[TeamModel]:
        """Search teams by name or abbreviation.
        
        Args:
            query: Search query
            
        Returns:
            List of matching teams
            
        Raises:
            DatabaseError: If database error occurs
        """
        try:
            search_term = f"%{query}%"
            return self.db.query(TeamModel).filter(
                or_(
                    TeamModel.name.ilike(search_term),
                    TeamModel.abbreviation.ilike(search_term)
                )
            ).order_by(TeamModel.name).all()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in search_teams: {e}")
            raise DatabaseError(f"Failed to search teams with query '{query}'") from e
    
    def list_by_level(self, level: Optional[str] = None) -> List[TeamModel]:
        """List teams ordered by name, optionally restricted to one level."""
        try:
            query = self.db.query(TeamModel)
            if level:
                query = query.filter(TeamModel.level == level.upper())
            return query.order_by(TeamModel.name).all()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in list_by_level: {e}")
            raise DatabaseError("Failed to list teams") from e
