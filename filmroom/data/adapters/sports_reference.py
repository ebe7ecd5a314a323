"""Sports-Reference college football API adapter."""

import logging
import os
from typing import Any, Dict, List, Optional

from .base import FlatGameRecord, FlatRecordAdapter, SourceConfig

logger = logging.getLogger(__name__)


class SportsReferenceGame(FlatGameRecord):
    attendance: Optional[int] = None
    home_team_rank: Optional[int] = None
    away_team_rank: Optional[int] = None


class SportsReferenceAdapter(FlatRecordAdapter):
    """Sports-Reference CFB endpoints; the API key travels as a query parameter."""
    
    source = "sports_reference"
    default_base_url = "https://api.sports-reference.com/v1"
    game_model = SportsReferenceGame
    
    @classmethod
    def config_from_env(cls) -> SourceConfig:
        return SourceConfig(
            base_url=os.getenv("SPORTS_REFERENCE_API_BASE", cls.default_base_url),
            api_key=os.getenv("SPORTS_REFERENCE_API_KEY"),
        )
    
    def _params(self, **params: Any) -> Dict[str, Any]:
        if self.config.api_key:
            params['api_key'] = self.config.api_key
        return params
    
    def get_games(self, season: int) -> List[Dict[str, Any]]:
        """Get all games for a season."""
        data = self._get("cfb/games", params=self._params(year=season))
        return data.get('games', []) or []
    
    def get_game_details(self, game_id: str) -> Dict[str, Any]:
        """Get a game and its plays.
        
        Returns:
            Dictionary with 'game' and 'plays'
        """
        game = self._get(f"cfb/games/{game_id}", params=self._params())
        plays = self._get(f"cfb/games/{game_id}/plays", params=self._params())
        return {'game': game, 'plays': plays.get('plays', []) or []}
    
    def get_team_schedule(self, team_name: str, season: int) -> List[Dict[str, Any]]:
        """Get a team's games for a season."""
        data = self._get(f"cfb/teams/{team_name}/schedule", params=self._params(year=season))
        return data.get('games', []) or []
