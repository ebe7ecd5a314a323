"""Adapter for a self-hosted NCAA scoreboard/play-by-play API."""

import logging
import os
from typing import Any, Dict, List, Optional

from .base import FlatGameRecord, FlatRecordAdapter, SourceConfig

logger = logging.getLogger(__name__)

DEFAULT_NCAA_API_BASE = "http://localhost:3000"


class NCAAGame(FlatGameRecord):
    status: Optional[str] = None
    quarter: Optional[int] = None
    time: Optional[str] = None


class NCAAApiAdapter(FlatRecordAdapter):
    """NCAA API endpoints: scoreboard, game details, play-by-play, search and schedules."""
    
    source = "ncaa_api"
    default_base_url = DEFAULT_NCAA_API_BASE
    game_model = NCAAGame
    
    @classmethod
    def config_from_env(cls) -> SourceConfig:
        return SourceConfig(base_url=os.getenv("NCAA_API_BASE", DEFAULT_NCAA_API_BASE))
    
    def fetch_game_play_by_play(self, game_id: str) -> Dict[str, Any]:
        """Fetch a game with its plays.
        
        Returns:
            Dictionary with 'game' and 'plays'
        """
        data = self._get(f"game/{game_id}/play-by-play")
        return {'game': data.get('game') or {}, 'plays': data.get('plays', []) or []}
    
    def fetch_recent_games(self, season: int, week: int) -> Dict[str, Any]:
        """Fetch the FBS scoreboard for a week.
        
        Returns:
            Dictionary with 'games' and 'last_updated'
        """
        data = self._get(f"scoreboard/football/fbs/{season}/{week}/all-conf")
        return {'games': data.get('games', []) or [], 'last_updated': data.get('last_updated')}
    
    def fetch_game_details(self, game_id: str) -> Dict[str, Any]:
        return self._get(f"game/{game_id}")
    
    def search_games(self, query: str, season: Optional[int] = None) -> List[Dict[str, Any]]:
        """Search games by team name or date text."""
        params: Dict[str, Any] = {'q': query}
        if season:
            params['season'] = season
        data = self._get("search/games", params=params)
        return data.get('games', []) or []
    
    def get_team_schedule(self, team_name: str, season: int) -> List[Dict[str, Any]]:
        data = self._get(f"team/{team_name}/schedule/{season}")
        return data.get('games', []) or []
    
    def build_import_payload(self, game_id: str) -> Dict[str, Any]:
        """Fetch a game's details and play-by-play as an import batch.
        
        Team names fall back to the nested home/away objects of the details
        document, then to placeholders.
        
        Returns:
            Dictionary with 'games' (one game) and 'plays'
        """
        play_by_play = self.fetch_game_play_by_play(game_id)
        details = self.fetch_game_details(game_id) or {}
        
        game: Dict[str, Any] = dict(play_by_play['game'])
        game.update({key: value for key, value in details.items() if value is not None})
        game['id'] = str(game.get('id') or game_id)
        for side in ('home', 'away'):
            nested = details.get(side)
            if not game.get(f"{side}_team"):
                name = nested.get('name') if isinstance(nested, dict) else None
                game[f"{side}_team"] = name or f"{side.title()} Team"
        
        plays = play_by_play['plays']
        logger.info(f"Built NCAA import payload for game {game_id} with {len(plays)} plays")
        return {'games': [game], 'plays': plays}
