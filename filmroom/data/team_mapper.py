"""Game/team mapping: resolve provider team names to internal teams."""

import json
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional, Iterable, Union

from rapidfuzz.distance import Levenshtein
from sqlalchemy.orm import Session

from ..services.base import ValidationException
from .config import ImportConfig

logger = logging.getLogger(__name__)


@dataclass
class TeamMapping:
    """A known external team name and the internal team it stands for."""
    external_name: str
    internal_name: str
    abbreviation: str
    conference: Optional[str] = None
    level: str = 'COLLEGE'
    confidence: float = 0.95
    team_id: Optional[int] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_TEAM_MAPPINGS: List[TeamMapping] = [
    # College
    TeamMapping('Ohio State', 'Ohio State Buckeyes', 'OSU', 'Big Ten'),
    TeamMapping('Michigan', 'Michigan Wolverines', 'MICH', 'Big Ten'),
    TeamMapping('Alabama', 'Alabama Crimson Tide', 'ALA', 'SEC'),
    TeamMapping('Georgia', 'Georgia Bulldogs', 'UGA', 'SEC'),
    TeamMapping('TCU', 'TCU Horned Frogs', 'TCU', 'Big 12'),
    TeamMapping('Clemson', 'Clemson Tigers', 'CLEM', 'ACC'),
    TeamMapping('Notre Dame', 'Notre Dame Fighting Irish', 'ND', 'Independent'),
    TeamMapping('USC', 'USC Trojans', 'USC', 'Pac-12'),
    TeamMapping('Texas', 'Texas Longhorns', 'TEX', 'SEC'),
    TeamMapping('Oklahoma', 'Oklahoma Sooners', 'OU', 'SEC'),
    # NFL
    TeamMapping('Kansas City Chiefs', 'Kansas City Chiefs', 'KC', 'AFC', 'NFL'),
    TeamMapping('Philadelphia Eagles', 'Philadelphia Eagles', 'PHI', 'NFC', 'NFL'),
    TeamMapping('San Francisco 49ers', 'San Francisco 49ers', 'SF', 'NFC', 'NFL'),
    TeamMapping('Dallas Cowboys', 'Dallas Cowboys', 'DAL', 'NFC', 'NFL'),
    TeamMapping('New England Patriots', 'New England Patriots', 'NE', 'AFC', 'NFL'),
]


@dataclass
class SideMapping:
    """How one side of a game resolved."""
    external_name: Optional[str]
    mapping: Optional[TeamMapping] = None
    method: Optional[str] = None  # 'exact', 'internal_name', 'abbreviation' or 'fuzzy'
    confidence: float = 0.0
    
    @property
    def resolved(self) -> bool:
        return self.mapping is not None
    
    @property
    def team_id(self) -> Optional[int]:
        return self.mapping.team_id if self.mapping else None
    
    @property
    def internal_name(self) -> Optional[str]:
        return self.mapping.internal_name if self.mapping else None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'external_name': self.external_name,
            'resolved': self.resolved,
            'team_id': self.team_id,
            'internal_name': self.internal_name,
            'abbreviation': self.mapping.abbreviation if self.mapping else None,
            'method': self.method,
            'confidence': round(self.confidence, 4),
        }


@dataclass
class GameMappingResult:
    """Team resolution for one external game. Not persisted."""
    external_game_id: str
    home: SideMapping
    away: SideMapping
    mapped: bool = False
    confidence: float = 0.0
    suggested_teams: List[str] = field(default_factory=list)
    mapping_notes: List[str] = field(default_factory=list)
    
    @property
    def internal_team_id(self) -> Optional[int]:
        return self.home.team_id
    
    @property
    def internal_opponent_id(self) -> Optional[int]:
        return self.away.team_id
    
    def side_for_team(self, team_id: Optional[int]) -> Optional[str]:
        """Return 'HOME' or 'AWAY' for an internal team, or None if it is on neither side."""
        if team_id is None:
            return None
        if self.home.team_id == team_id:
            return 'HOME'
        if self.away.team_id == team_id:
            return 'AWAY'
        return None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'external_game_id': self.external_game_id,
            'internal_team_id': self.internal_team_id,
            'internal_opponent_id': self.internal_opponent_id,
            'home': self.home.to_dict(),
            'away': self.away.to_dict(),
            'mapped': self.mapped,
            'confidence': round(self.confidence, 4),
            'suggested_teams': self.suggested_teams,
            'mapping_notes': self.mapping_notes,
        }


def name_similarity(first: str, second: str) -> float:
    """Levenshtein ratio: (longer - distance) / longer; two empty strings score 1.0."""
    return Levenshtein.normalized_similarity(first, second)


class GameMapper:
    """Resolves home/away team names of external games to internal teams.
    
    Lookup order per name: exact external name, internal name, abbreviation,
    then the best fuzzy match over external names at or above the configured
    threshold.
    """
    
    def __init__(self, config: Optional[ImportConfig] = None,
                 teams: Optional[Iterable[Any]] = None,
                 include_defaults: bool = True):
        self.config = config or ImportConfig()
        self.team_mappings: Dict[str, TeamMapping] = {}
        if include_defaults:
            for mapping in DEFAULT_TEAM_MAPPINGS:
                self.add_team_mapping(TeamMapping(**mapping.to_dict()))
        if teams:
            self.register_teams(teams)
    
    @classmethod
    def from_session(cls, db_session: Session, config: Optional[ImportConfig] = None) -> "GameMapper":
        """Build a mapper that knows every internal team in the database."""
        from ..services.team_service import TeamService
        
        teams = TeamService(db_session).list_by_level()
        return cls(config=config, teams=teams)
    
    def register_teams(self, teams: Iterable[Any]) -> None:
        """Register internal team rows so names resolve to their IDs."""
        count = 0
        for team in teams:
            abbreviation = (team.abbreviation or '').upper()
            for mapping in self.team_mappings.values():
                if (mapping.internal_name.lower() == team.name.lower()
                        or mapping.abbreviation.upper() == abbreviation):
                    mapping.team_id = team.id
            self.add_team_mapping(TeamMapping(
                external_name=team.name,
                internal_name=team.name,
                abbreviation=abbreviation,
                conference=team.conference,
                level=team.level or 'COLLEGE',
                confidence=1.0,
                team_id=team.id,
            ))
            count += 1
        logger.debug(f"Registered {count} internal teams with the game mapper")
    
    def add_team_mapping(self, mapping: Union[TeamMapping, Dict[str, Any]]) -> TeamMapping:
        """Add or replace a mapping keyed by its external name."""
        if isinstance(mapping, dict):
            mapping = TeamMapping(**mapping)
        self.team_mappings[mapping.external_name.strip().lower()] = mapping
        return mapping
    
    def find_team_match(self, external_name: Optional[str]) -> SideMapping:
        """Resolve one team name.
        
        Args:
            external_name: Team name as the provider reports it
            
        Returns:
            SideMapping, unresolved when nothing matches
        """
        side = SideMapping(external_name=external_name)
        normalized = (external_name or '').strip().lower()
        if not normalized:
            return side
        
        mapping = self.team_mappings.get(normalized)
        if mapping is not None:
            side.mapping, side.method, side.confidence = mapping, 'exact', mapping.confidence
            return side
        
        for mapping in self.team_mappings.values():
            if mapping.internal_name.lower() == normalized:
                side.mapping, side.method, side.confidence = mapping, 'internal_name', mapping.confidence
                return side
        
        for mapping in self.team_mappings.values():
            if mapping.abbreviation.lower() == normalized:
                side.mapping, side.method, side.confidence = mapping, 'abbreviation', mapping.confidence
                return side
        
        best_score = 0.0
        for key, mapping in self.team_mappings.items():
            score = name_similarity(normalized, key)
            if score > best_score and score >= self.config.fuzzy_match_threshold:
                best_score = score
                side.mapping = mapping
        if side.mapping is not None:
            side.method = 'fuzzy'
            side.confidence = side.mapping.confidence * best_score
        return side
    
    def map_game_to_teams(self, home_team: Optional[str], away_team: Optional[str],
                          source: Optional[str] = None, season: Optional[int] = None,
                          external_game_id: Optional[str] = None) -> GameMappingResult:
        """Resolve both sides of an external game.
        
        An unresolved side is recorded in suggested_teams; it never fails
        the mapping as a whole.
        """
        home = self.find_team_match(home_team)
        away = self.find_team_match(away_team)
        
        result = GameMappingResult(
            external_game_id=external_game_id or f"{source}_{season}_{home_team}_{away_team}",
            home=home,
            away=away,
        )
        
        if home.resolved and away.resolved:
            result.mapped = True
            result.confidence = min(home.confidence, away.confidence)
        elif home.resolved or away.resolved:
            result.confidence = (home if home.resolved else away).confidence * 0.5
        
        for side in (home, away):
            if side.resolved:
                result.mapping_notes.append(f"Successfully mapped {side.external_name} to {side.internal_name}")
            else:
                result.mapping_notes.append(f"Failed to map {side.external_name}")
                if side.external_name:
                    result.suggested_teams.append(side.external_name)
        
        return result
    
    def map_external_game(self, external_game: Any) -> GameMappingResult:
        """Resolve both sides of a stored or neutral external game."""
        return self.map_game_to_teams(
            external_game.home_team,
            external_game.away_team,
            source=external_game.source,
            season=external_game.season,
            external_game_id=str(external_game.external_id),
        )
    
    def get_all_team_mappings(self) -> List[TeamMapping]:
        return list(self.team_mappings.values())
    
    def search_teams(self, query: str) -> List[TeamMapping]:
        """Search mappings by external name, internal name or abbreviation."""
        normalized = query.strip().lower()
        return [
            mapping for mapping in self.team_mappings.values()
            if normalized in mapping.external_name.lower()
            or normalized in mapping.internal_name.lower()
            or normalized in mapping.abbreviation.lower()
        ]
    
    def export_team_mappings(self) -> str:
        """Export all mappings as a JSON array."""
        return json.dumps([mapping.to_dict() for mapping in self.team_mappings.values()], indent=2)
    
    def import_team_mappings(self, json_data: str) -> int:
        """Import mappings exported by export_team_mappings.
        
        Returns:
            Number of mappings added
            
        Raises:
            ValidationException: If the JSON is malformed or an entry is incomplete
        """
        try:
            entries = json.loads(json_data)
            if not isinstance(entries, list):
                raise ValueError("expected a JSON array")
            mappings = [TeamMapping(**entry) for entry in entries]
        except (ValueError, TypeError) as e:
            raise ValidationException(f"Invalid team mappings JSON format: {e}") from e
        
        for mapping in mappings:
            self.add_team_mapping(mapping)
        logger.info(f"Imported {len(mappings)} team mappings")
        return len(mappings)
