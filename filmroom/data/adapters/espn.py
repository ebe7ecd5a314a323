"""ESPN college football scoreboard and summary adapter."""

import logging
import os
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field

from ...models.external import ExternalGameCreate, ExternalPlayCreate
from ..standardizer import to_int
from .base import BaseSourceAdapter, ProviderRecord, SourceConfig, parse_datetime, raw_payload

logger = logging.getLogger(__name__)


class ESPNTeamRef(ProviderRecord):
    id: Optional[str] = None
    name: Optional[str] = None
    displayName: Optional[str] = None
    abbreviation: Optional[str] = None
    
    @property
    def label(self) -> Optional[str]:
        return self.name or self.displayName


class ESPNCompetitor(ProviderRecord):
    homeAway: Optional[str] = None
    score: Optional[str] = None
    team: ESPNTeamRef = Field(default_factory=ESPNTeamRef)


class ESPNVenue(ProviderRecord):
    fullName: Optional[str] = None


class ESPNCompetition(ProviderRecord):
    competitors: List[ESPNCompetitor] = Field(default_factory=list)
    venue: Optional[ESPNVenue] = None
    
    def side(self, home_away: str) -> Optional[ESPNCompetitor]:
        return next((c for c in self.competitors if c.homeAway == home_away), None)


class ESPNSeason(ProviderRecord):
    year: Optional[int] = None
    type: Optional[int] = None


class ESPNWeek(ProviderRecord):
    number: Optional[int] = None


class ESPNGame(ProviderRecord):
    id: str
    date: Optional[str] = None
    season: Optional[ESPNSeason] = None
    week: Optional[ESPNWeek] = None
    competitions: List[ESPNCompetition] = Field(default_factory=list)


class ESPNClock(ProviderRecord):
    displayValue: Optional[str] = None


class ESPNPeriod(ProviderRecord):
    number: Optional[int] = None


class ESPNPlayType(ProviderRecord):
    text: Optional[str] = None


class ESPNSituation(ProviderRecord):
    down: Optional[int] = None
    distance: Optional[int] = None
    yardLine: Optional[int] = None
    yardsToEndzone: Optional[int] = None


class ESPNPlay(ProviderRecord):
    id: str
    text: Optional[str] = None
    scoreValue: Optional[int] = None
    team: Optional[ESPNTeamRef] = None
    clock: Optional[ESPNClock] = None
    period: Optional[ESPNPeriod] = None
    playType: Optional[ESPNPlayType] = Field(None, validation_alias=AliasChoices('type', 'playType'))
    start: Optional[ESPNSituation] = None


class ESPNAdapter(BaseSourceAdapter):
    """ESPN public site API for college football."""
    
    source = "espn"
    default_base_url = "https://site.api.espn.com/apis/site/v2/sports/football/college-football"
    
    @classmethod
    def config_from_env(cls) -> SourceConfig:
        return SourceConfig(
            base_url=os.getenv("ESPN_API_BASE", cls.default_base_url),
            api_key=os.getenv("ESPN_API_KEY"),
        )
    
    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.config.api_key:
            headers['Authorization'] = f"Bearer {self.config.api_key}"
        return headers
    
    def get_games(self, season: int, week: int) -> List[Dict[str, Any]]:
        """Get scoreboard events for a season week.
        
        Raises:
            SourceFetchError: If the request fails
        """
        data = self._get("scoreboard", params={'week': week, 'year': season, 'limit': 100})
        return data.get('events', []) or []
    
    def get_game_details(self, game_id: str) -> Dict[str, Any]:
        """Get a game's header and its plays.
        
        Plays come from the top-level list when present, otherwise from the
        drive breakdown.
        
        Returns:
            Dictionary with 'game' and 'plays'
        """
        data = self._get("summary", params={'event': game_id})
        plays = data.get('plays') or []
        if not plays:
            for drive in (data.get('drives') or {}).get('previous', []) or []:
                plays.extend(drive.get('plays') or [])
        
        game = data.get('header') or {}
        logger.info(f"Fetched ESPN game {game_id} with {len(plays)} plays")
        return {'game': game, 'plays': plays}
    
    def map_game_to_external(self, raw_game: Any) -> ExternalGameCreate:
        game = ESPNGame.model_validate(raw_payload(raw_game))
        competition = game.competitions[0] if game.competitions else ESPNCompetition()
        home = competition.side('home')
        away = competition.side('away')
        
        return ExternalGameCreate(
            external_id=game.id,
            source=self.source,
            season=game.season.year if game.season else None,
            week=game.week.number if game.week else None,
            home_team=home.team.label if home else '',
            away_team=away.team.label if away else '',
            home_score=to_int(home.score) if home else None,
            away_score=to_int(away.score) if away else None,
            date=parse_datetime(game.date),
            venue=competition.venue.fullName if competition.venue else None,
            raw_data=raw_payload(raw_game),
        )
    
    def map_play_to_external(self, raw_play: Any, external_game_id: Optional[str] = None) -> ExternalPlayCreate:
        """Map an ESPN play.
        
        ESPN does not name the defense, so it is left empty. Field position
        uses yardsToEndzone when ESPN sends it, and the down of
        kicks (reported as 0) is stored as None.
        """
        play = ESPNPlay.model_validate(raw_payload(raw_play))
        start = play.start or ESPNSituation()
        yard_line = start.yardsToEndzone if start.yardsToEndzone is not None else start.yardLine
        
        return ExternalPlayCreate(
            external_id=play.id,
            source=self.source,
            provider_game_id=external_game_id,
            quarter=play.period.number if play.period else None,
            time=play.clock.displayValue if play.clock else None,
            down=start.down if start.down and start.down > 0 else None,
            distance=start.distance,
            yard_line=yard_line,
            play_type=play.playType.text if play.playType else None,
            description=play.text,
            offense=play.team.label if play.team else None,
            defense='',
            raw_data=raw_payload(raw_play),
        )
