"""Play import orchestration: external records in, internal games and plays out."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..models.external import ExternalPlayCreate, ExternalGameModel
from ..models.game import GameModel
from ..services.base import ServiceException, ValidationException
from ..services.external_service import ExternalGameService, ExternalPlayService
from ..services.game_service import GameService
from ..services.play_service import PlayService
from ..services.team_service import TeamService
from .adapters import get_adapter
from .config import ImportConfig
from .standardizer import PlayStandardizer, as_record, raw_from_external_play
from .team_mapper import GameMapper
from .validators import ExternalGameValidator, GameValidationReport

logger = logging.getLogger(__name__)

# Failures that only affect the item being processed
ITEM_ERRORS = (ServiceException, ValidationError, ValueError, TypeError)


class ImportResult:
    """Result of a batch import operation."""
    
    def __init__(self, total: int = 0):
        self.success = False
        self.imported = 0
        self.total = total
        self.errors: List[str] = []
        self.message = ""
        self.start_time: Optional[datetime] = datetime.now()
        self.end_time: Optional[datetime] = None
    
    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None
    
    def add_error(self, message: str) -> None:
        logger.warning(message)
        self.errors.append(message)
    
    def finish(self, message: str) -> None:
        self.success = True
        self.message = message
        self.end_time = datetime.now()
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            'success': self.success,
            'imported': self.imported,
            'total': self.total,
            'errors': self.errors,
            'message': self.message,
            'duration_seconds': self.duration,
        }


class GameImportResult(ImportResult):
    
    def __init__(self, total: int = 0):
        super().__init__(total)
        self.plays_imported = 0
        self.plays_total = 0
        self.external_game_ids: List[int] = []
        self.mapping_results: List[Dict[str, Any]] = []
    
    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            'plays_imported': self.plays_imported,
            'plays_total': self.plays_total,
            'external_game_ids': self.external_game_ids,
            'mapping_results': self.mapping_results,
        })
        return result


class PlayImportResult(ImportResult):
    
    def __init__(self, external_game_id: int, total: int = 0):
        super().__init__(total)
        self.external_game_id = external_game_id
    
    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['external_game_id'] = self.external_game_id
        return result


class PlayMappingResult(ImportResult):
    """Result of mapping an external game's plays onto an internal game.
    
    mapped counts plays that end up linked: newly created plus already mapped.
    """
    
    def __init__(self, total: int = 0):
        super().__init__(total)
        self.created = 0
        self.already_mapped = 0
        self.internal_game_id: Optional[int] = None
        self.game_created = False
        self.home_away: Optional[str] = None
        self.mapped_plays: List[Dict[str, Any]] = []
    
    @property
    def mapped(self) -> int:
        return self.created + self.already_mapped
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'mapped': self.mapped,
            'created': self.created,
            'already_mapped': self.already_mapped,
            'total': self.total,
            'internal_game_id': self.internal_game_id,
            'game_created': self.game_created,
            'home_away': self.home_away,
            'mapped_plays': self.mapped_plays,
            'errors': self.errors,
            'message': self.message,
            'duration_seconds': self.duration,
        }


def _play_sort_key(play: Any):
    return (play.quarter is None, play.quarter or 0, play.id)


class PlayImporter:
    """Imports external games and plays and maps them onto internal records.
    
    Every play is committed on its own, so a failure part way through a batch
    keeps the plays already written and is reported in the result's errors.
    """
    
    def __init__(self, db_session: Session, config: Optional[ImportConfig] = None,
                 mapper: Optional[GameMapper] = None,
                 standardizer: Optional[PlayStandardizer] = None):
        """Initialize play importer.
        
        Args:
            db_session: SQLAlchemy database session
            config: Import configuration
            mapper: Team mapper; built from the database's teams when omitted
            standardizer: Play standardizer
        """
        self.db = db_session
        self.config = config or ImportConfig()
        self.standardizer = standardizer or PlayStandardizer(self.config.default_source)
        self.teams = TeamService(db_session)
        self.games = GameService(db_session)
        self.plays = PlayService(db_session)
        self.external_games = ExternalGameService(db_session)
        self.external_plays = ExternalPlayService(db_session)
        self._mapper = mapper
    
    @property
    def mapper(self) -> GameMapper:
        if self._mapper is None:
            self._mapper = GameMapper.from_session(self.db, self.config)
        return self._mapper
    
    def import_games(self, source: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Import a provider batch of games and plays.
        
        Args:
            source: Provider tag selecting the adapter
            data: Dictionary with a 'games' list and an optional 'plays' list
            
        Returns:
            Import summary with per-game team mapping results
            
        Raises:
            ValidationException: If the source is unknown or games are missing
        """
        if not isinstance(data, dict) or not isinstance(data.get('games'), list):
            raise ValidationException("Games data is required")
        
        adapter = get_adapter(source)
        raw_games = data['games']
        raw_plays = data.get('plays') or []
        result = GameImportResult(total=len(raw_games))
        result.plays_total = len(raw_plays)
        logger.info(f"Importing {len(raw_games)} {adapter.source} games with {len(raw_plays)} plays")
        
        games = []
        for index, raw_game in enumerate(raw_games):
            try:
                games.append(adapter.map_game_to_external(raw_game))
            except ITEM_ERRORS as e:
                result.add_error(f"Game at index {index}: {e}")
        
        # A lone game claims plays that do not name their game
        default_game_id = games[0].external_id if len(games) == 1 else None
        plays_by_game: Dict[str, List[ExternalPlayCreate]] = {}
        for index, raw_play in enumerate(raw_plays):
            try:
                play = adapter.map_play_to_external(raw_play, default_game_id)
            except ITEM_ERRORS as e:
                result.add_error(f"Play at index {index}: {e}")
                continue
            plays_by_game.setdefault(play.provider_game_id or '', []).append(play)
        
        known_ids = {game.external_id for game in games}
        for provider_game_id, orphans in plays_by_game.items():
            if provider_game_id not in known_ids:
                for play in orphans:
                    result.add_error(f"Play {play.external_id}: no game {provider_game_id or '(none)'} in batch")
        
        for game in games:
            try:
                mapping = self.mapper.map_game_to_teams(
                    game.home_team, game.away_team, source=game.source,
                    season=game.season, external_game_id=game.external_id,
                )
                external_game = self.external_games.upsert_game(game)
            except ITEM_ERRORS as e:
                result.add_error(f"Game {game.external_id}: {e}")
                continue
            
            result.imported += 1
            result.external_game_ids.append(external_game.id)
            result.mapping_results.append(mapping.to_dict())
            
            for play in plays_by_game.get(game.external_id, []):
                try:
                    self.external_plays.upsert_play(external_game.id, play)
                    result.plays_imported += 1
                except ITEM_ERRORS as e:
                    result.add_error(f"Play {play.external_id}: {e}")
        
        result.finish(
            f"Imported {result.imported} of {result.total} games and "
            f"{result.plays_imported} of {result.plays_total} plays"
        )
        logger.info(result.message)
        return result.to_dict()
    
    def import_external_plays(self, external_game_id: Optional[int], plays: Any,
                              source: Optional[str] = None) -> Dict[str, Any]:
        """Standardize raw plays and store them under an external game.
        
        Args:
            external_game_id: External game database ID
            plays: List of raw play objects
            source: Provider tag
            
        Returns:
            Import summary; imported < total signals a partial import
            
        Raises:
            ValidationException: If the game ID or plays list is missing
            NotFoundError: If the external game does not exist
        """
        if not external_game_id or not isinstance(plays, list):
            raise ValidationException("External game ID and plays array are required")
        
        source = source or self.config.default_source
        self.external_games.get_by_id_or_404(external_game_id)
        result = PlayImportResult(external_game_id, total=len(plays))
        
        for index, raw_play in enumerate(plays):
            standardized = self.standardizer.standardize(raw_play, source)
            play_label = standardized.id or f"at index {index}"
            try:
                if not standardized.id:
                    raise ValidationException("missing play ID")
                external_play = ExternalPlayCreate(
                    external_id=standardized.id,
                    source=standardized.source or source,
                    quarter=standardized.quarter,
                    time=standardized.time,
                    down=standardized.down,
                    distance=standardized.distance,
                    yard_line=standardized.yard_line,
                    play_type=standardized.play_type,
                    description=standardized.description,
                    offense=standardized.offense,
                    defense=standardized.defense,
                    raw_data=as_record(raw_play),
                )
                self.external_plays.upsert_play(external_game_id, external_play)
                result.imported += 1
            except ITEM_ERRORS as e:
                result.add_error(f"Play {play_label}: {e}")
        
        result.finish(f"Imported {result.imported} of {result.total} plays")
        logger.info(f"External game {external_game_id}: {result.message}")
        return result.to_dict()
    
    def _resolve_home_away(self, external_game: ExternalGameModel, team_id: int,
                           opponent_id: int) -> str:
        mapping = self.mapper.map_external_game(external_game)
        side = mapping.side_for_team(team_id)
        if side is not None:
            return side
        opponent_side = mapping.side_for_team(opponent_id)
        if opponent_side is not None:
            return 'AWAY' if opponent_side == 'HOME' else 'HOME'
        return self.config.default_home_away
    
    def _internal_game_for(self, external_game: ExternalGameModel, team_id: int,
                           opponent_id: int, season: Optional[int],
                           result: PlayMappingResult) -> GameModel:
        if external_game.mapped_game_id is not None:
            game = self.games.get_by_id(external_game.mapped_game_id)
            if game is not None:
                result.home_away = game.home_away
                return game
            logger.warning(
                f"External game {external_game.id} points at missing game "
                f"{external_game.mapped_game_id}; creating a new one"
            )
        
        home_away = self._resolve_home_away(external_game, team_id, opponent_id)
        game = self.games.create_from_external(external_game, team_id, opponent_id, home_away, season)
        self.external_games.mark_mapped(external_game, game.id)
        result.game_created = True
        result.home_away = home_away
        return game
    
    def map_plays(self, external_game_id: Optional[int], team_id: Optional[int],
                  opponent_id: Optional[int], season: Optional[int] = None) -> Dict[str, Any]:
        """Create internal plays for an external game's plays.
        
        Re-running is safe: the internal game is reused through the external
        game's mapping pointer, and plays whose pointer resolves to an
        existing internal play are counted as already mapped.
        
        Args:
            external_game_id: External game database ID
            team_id: Graded team ID
            opponent_id: Opponent team ID
            season: Season override for the internal game
            
        Returns:
            Mapping summary
            
        Raises:
            ValidationException: If an ID is missing
            NotFoundError: If the external game or a team does not exist
        """
        if not external_game_id or not team_id or not opponent_id:
            raise ValidationException("External game ID, team ID, and opponent ID are required")
        
        self.teams.get_by_id_or_404(team_id)
        self.teams.get_by_id_or_404(opponent_id)
        external_game = self.external_games.get_with_plays_or_404(external_game_id)
        
        external_plays = sorted(external_game.external_plays, key=_play_sort_key)
        result = PlayMappingResult(total=len(external_plays))
        game = self._internal_game_for(external_game, team_id, opponent_id, season, result)
        result.internal_game_id = game.id
        
        for external_play in external_plays:
            if external_play.mapped_play_id is not None:
                existing = self.plays.get_by_id(external_play.mapped_play_id)
                if existing is not None:
                    result.already_mapped += 1
                    result.mapped_plays.append(self._mapped_play_entry(external_play, existing, True))
                    continue
            
            try:
                standardized = self.standardizer.standardize(
                    raw_from_external_play(external_play), external_play.source
                )
                play = self.plays.create_from_standardized(game.id, standardized, external_play)
            except ITEM_ERRORS as e:
                result.add_error(f"Play {external_play.external_id}: {e}")
                continue
            
            result.created += 1
            result.mapped_plays.append(self._mapped_play_entry(external_play, play, False))
        
        result.finish(
            f"Mapped {result.mapped} of {result.total} plays to internal game {game.id} "
            f"({result.created} created, {result.already_mapped} already mapped)"
        )
        logger.info(result.message)
        return result.to_dict()
    
    @staticmethod
    def _mapped_play_entry(external_play: Any, play: Any, already_mapped: bool) -> Dict[str, Any]:
        return {
            'external_play_id': external_play.id,
            'internal_play_id': play.id,
            'quarter': play.quarter,
            'time': play.time,
            'play_type': play.play_type,
            'description': play.description,
            'already_mapped': already_mapped,
        }
    
    def validate_external_game(self, external_game_id: Optional[int]) -> GameValidationReport:
        """Score the data quality of a stored external game.
        
        Raises:
            ValidationException: If the ID is missing
            NotFoundError: If the external game does not exist
        """
        if not external_game_id:
            raise ValidationException("External game ID is required")
        external_game = self.external_games.get_with_plays_or_404(external_game_id)
        plays = sorted(external_game.external_plays, key=_play_sort_key)
        return ExternalGameValidator().validate(external_game, plays)
    
    def quick_import(self, game_id: str) -> Dict[str, Any]:
        """Fetch one game from the NCAA API and import it.
        
        Raises:
            ValidationException: If the game ID is missing
            SourceFetchError: If the NCAA API cannot be reached
        """
        if not game_id:
            raise ValidationException("Game ID is required")
        adapter = get_adapter('ncaa_api')
        payload = adapter.build_import_payload(str(game_id))
        return self.import_games(adapter.source, payload)
