"""Teams API endpoints."""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging
from pydantic import BaseModel, Field

from ...models.team import TeamCreate, TeamResponse
from ...services.base import NotFoundError, DatabaseError
from ...services.team_service import TeamService
from ..dependencies import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter()


class TeamList(BaseModel):
    """Schema for paginated team list response."""
    teams: List[TeamResponse] = Field(..., description="List of teams")
    total: int = Field(..., description="Total number of teams")
    limit: int = Field(..., description="Maximum number of teams returned")
    offset: int = Field(..., description="Number of teams skipped")


@router.get("/", response_model=TeamList)
async def get_teams(
    level: Optional[str] = Query(None, description="Filter by level (NFL/COLLEGE/HIGH_SCHOOL)"),
    limit: int = Query(50, ge=1, le=500, description="Number of teams to return"),
    offset: int = Query(0, ge=0, description="Number of teams to skip"),
    db: Session = Depends(get_db_session)
):
    """Get list of internal teams."""
    try:
        service = TeamService(db)
        filters = {'level': level.upper() if level else None}
        teams = service.list(limit=limit, offset=offset, filters=filters, order_by='name')
        
        return TeamList(
            teams=[TeamResponse.model_validate(team) for team in teams],
            total=service.count(filters=filters),
            limit=limit,
            offset=offset
        )
    except DatabaseError as e:
        logger.error(f"Database error in get_teams: {str(e)}")
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/", response_model=TeamResponse, status_code=201)
async def create_team(
    team: TeamCreate,
    db: Session = Depends(get_db_session)
):
    """Create an internal team."""
    service = TeamService(db)
    try:
        if service.get_by_abbreviation(team.abbreviation):
            raise HTTPException(status_code=400, detail=f"Team {team.abbreviation} already exists")
        return TeamResponse.model_validate(service.create(team))
    except HTTPException:
        raise
    except DatabaseError as e:
        logger.error(f"Database error in create_team: {str(e)}")
        raise HTTPException(status_code=500, detail="Database error")


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: int,
    db: Session = Depends(get_db_session)
):
    """Get a specific team by ID."""
    try:
        return TeamResponse.model_validate(TeamService(db).get_by_id_or_404(team_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError as e:
        logger.error(f"Database error in get_team: {str(e)}")
        raise HTTPException(status_code=500, detail="Database error")
