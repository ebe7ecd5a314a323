"""Data import API endpoints: external games, plays, mapping and validation."""

from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging
from pydantic import BaseModel, Field

from ...models.external import ExternalGameResponse, ExternalPlayResponse
from ...services.base import ValidationException, NotFoundError
from ...services.external_service import ExternalGameService, ExternalPlayService
from ...services.play_service import PlayService
from ..dependencies import get_db_session, build_importer

logger = logging.getLogger(__name__)

router = APIRouter()


class ImportGamesRequest(BaseModel):
    """Schema for a provider batch import."""
    source: str = Field(..., description="Provider tag")
    games: Optional[List[Dict[str, Any]]] = Field(None, description="Provider game payloads")
    plays: Optional[List[Dict[str, Any]]] = Field(None, description="Provider play payloads")


class ImportPlaysRequest(BaseModel):
    """Schema for importing raw plays into an external game."""
    external_game_id: Optional[int] = Field(None, description="External game ID")
    plays: Optional[List[Any]] = Field(None, description="Raw play objects")
    source: Optional[str] = Field(None, description="Provider tag")


class MapPlaysRequest(BaseModel):
    """Schema for mapping external plays onto an internal game."""
    external_game_id: Optional[int] = None
    team_id: Optional[int] = None
    opponent_id: Optional[int] = None
    season: Optional[int] = None


class ValidateRequest(BaseModel):
    external_game_id: Optional[int] = None


class QuickImportRequest(BaseModel):
    game_id: Optional[str] = Field(None, description="NCAA API game ID")


def _failure(action: str, e: Exception) -> HTTPException:
    logger.error(f"Unexpected error trying to {action}: {str(e)}")
    return HTTPException(status_code=500, detail={"error": f"Failed to {action}", "details": str(e)})


def _external_game_summary(game) -> Dict[str, Any]:
    summary = ExternalGameResponse.model_validate(game).model_dump(mode='json')
    summary['play_count'] = len(game.external_plays)
    summary['is_mapped'] = game.is_mapped
    return summary


@router.post("/games")
async def import_games(
    body: ImportGamesRequest,
    db: Session = Depends(get_db_session)
):
    """Import provider games (and optionally their plays) with team mapping."""
    try:
        importer = build_importer(db)
        return importer.import_games(body.source, {'games': body.games, 'plays': body.plays or []})
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise _failure("import games", e)


@router.get("/games")
async def list_external_games(
    source: Optional[str] = Query(None, description="Filter by provider tag"),
    season: Optional[int] = Query(None, description="Filter by season"),
    week: Optional[int] = Query(None, description="Filter by week"),
    limit: int = Query(50, ge=1, le=500, description="Number of games to return"),
    db: Session = Depends(get_db_session)
):
    """List imported external games, most recent first."""
    try:
        games = ExternalGameService(db).list_games(source=source, season=season, week=week, limit=limit)
        return {
            "success": True,
            "games": [_external_game_summary(game) for game in games],
            "total": len(games),
        }
    except Exception as e:
        raise _failure("fetch external games", e)


@router.post("/plays")
async def import_plays(
    body: ImportPlaysRequest,
    db: Session = Depends(get_db_session)
):
    """Standardize raw plays and store them under an external game."""
    try:
        importer = build_importer(db)
        return importer.import_external_plays(body.external_game_id, body.plays, body.source)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise _failure("import plays", e)


@router.get("/plays")
async def list_external_plays(
    external_game_id: Optional[int] = Query(None, description="Filter by external game"),
    source: Optional[str] = Query(None, description="Filter by provider tag"),
    play_type: Optional[str] = Query(None, description="Filter by play type"),
    limit: int = Query(1000, ge=1, le=5000, description="Number of plays to return"),
    db: Session = Depends(get_db_session)
):
    """List external plays in quarter order."""
    try:
        plays = ExternalPlayService(db).list_for_game(
            external_game_id=external_game_id, source=source, play_type=play_type, limit=limit
        )
        return {
            "success": True,
            "plays": [ExternalPlayResponse.model_validate(play).model_dump(mode='json') for play in plays],
            "total": len(plays),
        }
    except Exception as e:
        raise _failure("fetch external plays", e)


@router.post("/map-plays")
async def map_plays(
    body: MapPlaysRequest,
    db: Session = Depends(get_db_session)
):
    """Create internal plays for an external game's plays."""
    try:
        importer = build_importer(db)
        return importer.map_plays(body.external_game_id, body.team_id, body.opponent_id, body.season)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise _failure("map plays", e)


@router.get("/map-plays")
async def get_play_mappings(
    external_game_id: Optional[int] = Query(None, description="External game ID"),
    internal_game_id: Optional[int] = Query(None, description="Internal game ID"),
    db: Session = Depends(get_db_session)
):
    """List external plays linked to internal plays for one game."""
    if external_game_id is None and internal_game_id is None:
        raise HTTPException(
            status_code=400,
            detail="Either external game ID or internal game ID is required"
        )
    
    try:
        external_plays = ExternalPlayService(db).get_mappings(
            external_game_id=external_game_id, internal_game_id=internal_game_id
        )
        play_service = PlayService(db)
        
        mappings = []
        for external_play in external_plays:
            entry = ExternalPlayResponse.model_validate(external_play).model_dump(mode='json')
            game = external_play.external_game
            entry['external_game'] = {
                'id': game.id,
                'home_team': game.home_team,
                'away_team': game.away_team,
                'date': game.date.isoformat() if game.date else None,
                'source': game.source,
            }
            mapped_play = play_service.get_by_id(external_play.mapped_play_id)
            entry['mapped_play'] = {
                'id': mapped_play.id,
                'quarter': mapped_play.quarter,
                'time': mapped_play.time,
                'play_type': mapped_play.play_type,
            } if mapped_play else None
            mappings.append(entry)
        
        return {"success": True, "mappings": mappings, "total": len(mappings)}
    except Exception as e:
        raise _failure("fetch play mappings", e)


@router.post("/validate")
async def validate_external_game(
    body: ValidateRequest,
    db: Session = Depends(get_db_session)
):
    """Score the data quality of one external game."""
    try:
        report = build_importer(db).validate_external_game(body.external_game_id)
        return {
            "success": True,
            "external_game_id": body.external_game_id,
            "validation_results": report.to_dict(),
            "message": "Data validation completed",
        }
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise _failure("validate data", e)


@router.get("/validate")
async def validation_summary(
    source: Optional[str] = Query(None, description="Filter by provider tag"),
    season: Optional[int] = Query(None, description="Filter by season"),
    db: Session = Depends(get_db_session)
):
    """Summarize stored external games by source and season."""
    try:
        return {"success": True, "summary": ExternalGameService(db).validation_summary(source, season)}
    except Exception as e:
        raise _failure("fetch validation summary", e)


@router.post("/quick-import")
async def quick_import(
    body: QuickImportRequest,
    db: Session = Depends(get_db_session)
):
    """Fetch one game from the NCAA API and import it."""
    try:
        return build_importer(db).quick_import(body.game_id)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise _failure("quick import", e)


@router.get("/teams/search")
async def search_team_mappings(
    q: str = Query(..., min_length=1, description="Name or abbreviation"),
    db: Session = Depends(get_db_session)
):
    """Search the team mapper's known teams."""
    try:
        matches = build_importer(db).mapper.search_teams(q)
        return {
            "success": True,
            "teams": [mapping.to_dict() for mapping in matches],
            "total": len(matches),
        }
    except Exception as e:
        raise _failure("search teams", e)
