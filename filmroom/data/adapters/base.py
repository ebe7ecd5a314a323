"""Shared plumbing for third-party play-by-play providers."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
from pydantic import BaseModel as PydanticBaseModel, ConfigDict, ValidationError

from ...models.external import ExternalGameCreate, ExternalPlayCreate
from ...services.base import ServiceException

logger = logging.getLogger(__name__)


class SourceFetchError(ServiceException):
    """A provider request failed after all retries."""
    pass


@dataclass
class SourceConfig:
    """Connection settings for one provider."""
    base_url: str = ""
    api_key: Optional[str] = None
    username: Optional[str] = None
    timeout_seconds: int = 30
    max_retries: int = 3


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a provider date into a naive UTC datetime; unparseable input gives None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime) and value.tzinfo is None:
        return value
    try:
        parsed = pd.to_datetime(value, errors='coerce', utc=True)
    except (TypeError, ValueError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.tz_convert(None).to_pydatetime()


class ProviderRecord(PydanticBaseModel):
    """Base for provider-native payload models; unknown fields are kept."""
    model_config = ConfigDict(extra='allow', coerce_numbers_to_str=True)


class FlatGameRecord(ProviderRecord):
    """Game payload with flat home/away fields, as several providers send it."""
    id: str
    season: Optional[int] = None
    week: Optional[int] = None
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    date: Optional[str] = None
    venue: Optional[str] = None


class FlatPlayRecord(ProviderRecord):
    """Play payload with flat situation fields."""
    id: str
    game_id: Optional[str] = None
    quarter: Optional[int] = None
    time: Optional[str] = None
    down: Optional[int] = None
    distance: Optional[int] = None
    yard_line: Optional[int] = None
    play_type: Optional[str] = None
    description: Optional[str] = None
    offense: Optional[str] = None
    defense: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    formation: Optional[str] = None
    personnel: Optional[str] = None


def raw_payload(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, PydanticBaseModel):
        return raw.model_dump(mode='json')
    return dict(raw)


class BaseSourceAdapter:
    """Base class for provider adapters.
    
    Subclasses fetch provider-native payloads and map them into the neutral
    ExternalGameCreate / ExternalPlayCreate shapes; nothing provider specific
    leaves an adapter.
    """
    
    source: str = ""
    default_base_url: str = ""
    
    def __init__(self, config: Optional[SourceConfig] = None):
        self.config = config or self.config_from_env()
        if not self.config.base_url:
            self.config.base_url = self.default_base_url
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
    
    @classmethod
    def config_from_env(cls) -> SourceConfig:
        return SourceConfig(base_url=cls.default_base_url)
    
    def _headers(self) -> Dict[str, str]:
        return {'Accept': 'application/json'}
    
    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a JSON document with retry logic.
        
        Args:
            path: Path relative to the configured base URL
            params: Query parameters
            
        Returns:
            Decoded JSON body
            
        Raises:
            SourceFetchError: If every attempt fails
        """
        url = f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"
        last_error: Optional[Exception] = None
        
        for attempt in range(self.config.max_retries):
            try:
                self._logger.info(f"Fetching {url} (attempt {attempt + 1})")
                response = requests.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=self.config.timeout_seconds,
                )
                response.raise_for_status()
                return response.json()
            except (requests.RequestException, ValueError) as e:
                last_error = e
                self._logger.warning(f"Fetch attempt {attempt + 1} for {url} failed: {e}")
        
        self._logger.error(f"Failed to fetch {url} after {self.config.max_retries} attempts")
        raise SourceFetchError(f"Failed to fetch {self.source} data from {url}") from last_error
    
    def map_game_to_external(self, raw_game: Any) -> ExternalGameCreate:
        raise NotImplementedError("Subclasses must implement map_game_to_external")
    
    def map_play_to_external(self, raw_play: Any, external_game_id: Optional[str] = None) -> ExternalPlayCreate:
        raise NotImplementedError("Subclasses must implement map_play_to_external")
    
    def map_games(self, raw_games: List[Any]) -> List[ExternalGameCreate]:
        """Map a list of provider games, skipping ones that do not fit the payload model."""
        games = []
        for raw_game in raw_games or []:
            try:
                games.append(self.map_game_to_external(raw_game))
            except (ValidationError, TypeError, ValueError) as e:
                self._logger.warning(f"Failed to map {self.source} game: {e}")
                continue
        return games
    
    def map_plays(self, raw_plays: List[Any], external_game_id: Optional[str] = None) -> List[ExternalPlayCreate]:
        """Map a list of provider plays, skipping ones that do not fit the payload model."""
        plays = []
        for raw_play in raw_plays or []:
            try:
                plays.append(self.map_play_to_external(raw_play, external_game_id))
            except (ValidationError, TypeError, ValueError) as e:
                self._logger.warning(f"Failed to map {self.source} play: {e}")
                continue
        return plays


class FlatRecordAdapter(BaseSourceAdapter):
    """Adapter for providers whose payloads use the flat record shape."""
    
    game_model = FlatGameRecord
    play_model = FlatPlayRecord
    
    def map_game_to_external(self, raw_game: Any) -> ExternalGameCreate:
        game = self.game_model.model_validate(raw_payload(raw_game))
        return ExternalGameCreate(
            external_id=game.id,
            source=self.source,
            season=game.season,
            week=game.week,
            home_team=game.home_team,
            away_team=game.away_team,
            home_score=game.home_score,
            away_score=game.away_score,
            date=parse_datetime(game.date),
            venue=game.venue,
            raw_data=raw_payload(raw_game),
        )
    
    def map_play_to_external(self, raw_play: Any, external_game_id: Optional[str] = None) -> ExternalPlayCreate:
        play = self.play_model.model_validate(raw_payload(raw_play))
        return ExternalPlayCreate(
            external_id=play.id,
            source=self.source,
            provider_game_id=play.game_id or external_game_id,
            quarter=play.quarter,
            time=play.time,
            down=play.down,
            distance=play.distance,
            yard_line=play.yard_line,
            play_type=play.play_type,
            description=play.description,
            offense=play.offense,
            defense=play.defense,
            raw_data=raw_payload(raw_play),
        )
