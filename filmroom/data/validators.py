"""Data quality validation for imported external games and plays."""

import logging
import math
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum

from pydantic import ValidationError

from ..models.standardized import StandardizedPlay
from .standardizer import PASSTHROUGH_KEYS

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    WARNING = "warning"
    ERROR = "error"


class ValidationScope(Enum):
    GAME = "game"
    PLAY = "play"


@dataclass
class ValidationIssue:
    """Represents a data validation issue."""
    scope: ValidationScope
    field: str
    severity: ValidationSeverity
    message: str
    record_id: Optional[str] = None
    actual_value: Optional[Any] = None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'scope': self.scope.value,
            'field': self.field,
            'severity': self.severity.value,
            'message': self.message,
            'record_id': self.record_id,
            'actual_value': self.actual_value,
        }


def quality_tier(score: int) -> str:
    """Map a 0-100 score to its quality tier; lower bounds are inclusive."""
    if score >= 90:
        return 'excellent'
    if score >= 75:
        return 'good'
    if score >= 60:
        return 'fair'
    return 'poor'


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class GameValidationReport:
    """Quality report for one external game and its plays."""
    external_game_id: Optional[int]
    game_valid: bool
    plays_total: int
    plays_valid: int
    issues: List[ValidationIssue] = field(default_factory=list)
    
    @property
    def plays_invalid(self) -> int:
        return self.plays_total - self.plays_valid
    
    @property
    def game_score(self) -> int:
        return 100 if self.game_valid else 50
    
    @property
    def plays_score(self) -> float:
        if self.plays_total == 0:
            return 0.0
        return 100 * self.plays_valid / self.plays_total
    
    @property
    def score(self) -> int:
        return round_half_up((self.game_score + self.plays_score) / 2)
    
    @property
    def quality(self) -> str:
        return quality_tier(self.score)
    
    def messages(self, scope: ValidationScope, severity: ValidationSeverity) -> List[str]:
        return [
            issue.message for issue in self.issues
            if issue.scope == scope and issue.severity == severity
        ]
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to the nested game/plays/overall shape returned by the API."""
        return {
            'game': {
                'is_valid': self.game_valid,
                'issues': self.messages(ValidationScope.GAME, ValidationSeverity.ERROR),
                'warnings': self.messages(ValidationScope.GAME, ValidationSeverity.WARNING),
            },
            'plays': {
                'total': self.plays_total,
                'valid': self.plays_valid,
                'invalid': self.plays_invalid,
                'issues': self.messages(ValidationScope.PLAY, ValidationSeverity.ERROR),
                'warnings': self.messages(ValidationScope.PLAY, ValidationSeverity.WARNING),
            },
            'overall': {
                'score': self.score,
                'quality': self.quality,
            },
        }


class BaseValidator:
    """Base class for data validators."""
    
    def __init__(self):
        self.issues: List[ValidationIssue] = []
    
    def add_issue(self, scope: ValidationScope, field: str, severity: ValidationSeverity,
                  message: str, record_id: Optional[str] = None,
                  actual_value: Optional[Any] = None) -> None:
        """Add a validation issue."""
        self.issues.append(ValidationIssue(
            scope=scope,
            field=field,
            severity=severity,
            message=message,
            record_id=record_id,
            actual_value=actual_value,
        ))
    
    def clear_issues(self) -> None:
        """Clear all validation issues."""
        self.issues = []


class ExternalGameValidator(BaseValidator):
    """Scores an external game's data quality.
    
    Data problems are reported, never raised. Each play is parsed against
    the StandardizedPlay schema on its own, so one malformed play only counts
    against that play.
    """
    
    MIN_SEASON = 2000
    MAX_SEASON = 2030
    MIN_DESCRIPTION_LENGTH = 5
    
    def validate_game(self, external_game: Any) -> bool:
        """Check game-level fields and return whether the game is valid."""
        is_valid = True
        
        if not external_game.home_team or not external_game.away_team:
            is_valid = False
            self.add_issue(ValidationScope.GAME, 'teams', ValidationSeverity.ERROR,
                           'Missing team information')
        
        if not external_game.date:
            is_valid = False
            self.add_issue(ValidationScope.GAME, 'date', ValidationSeverity.ERROR,
                           'Missing game date')
        
        season = external_game.season
        if season is not None and (season < self.MIN_SEASON or season > self.MAX_SEASON):
            self.add_issue(ValidationScope.GAME, 'season', ValidationSeverity.WARNING,
                           'Season year seems unusual', actual_value=season)
        
        return is_valid
    
    @staticmethod
    def play_candidate(play: Any) -> Dict[str, Any]:
        """Build the StandardizedPlay field set for a stored external play."""
        candidate = {
            'id': play.external_id,
            'game_id': str(play.external_game_id) if play.external_game_id is not None else None,
            'source': play.source,
            'quarter': play.quarter,
            'time': play.time,
            'down': play.down,
            'distance': play.distance,
            'yard_line': play.yard_line,
            'description': play.description,
            'offense': play.offense,
            'defense': play.defense,
        }
        if play.play_type is not None:
            candidate['play_type'] = play.play_type
        payload = play.raw_data if isinstance(play.raw_data, dict) else {}
        for key in PASSTHROUGH_KEYS:
            if payload.get(key) is not None:
                candidate[key] = payload[key]
        return candidate
    
    def validate_play(self, play: Any) -> bool:
        """Parse and range-check one play; returns whether it parsed."""
        play_id = play.external_id
        parsed = True
        
        try:
            StandardizedPlay(**self.play_candidate(play))
        except ValidationError as e:
            parsed = False
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            self.add_issue(ValidationScope.PLAY, 'schema', ValidationSeverity.ERROR,
                           f"Play {play_id}: {details}", record_id=play_id)
        
        if not play.description or len(play.description) < self.MIN_DESCRIPTION_LENGTH:
            self.add_issue(ValidationScope.PLAY, 'description', ValidationSeverity.WARNING,
                           f"Play {play_id}: Very short or missing description", record_id=play_id)
        
        if play.quarter is not None and (play.quarter < 1 or play.quarter > 4):
            self.add_issue(ValidationScope.PLAY, 'quarter', ValidationSeverity.ERROR,
                           f"Play {play_id}: Invalid quarter ({play.quarter})",
                           record_id=play_id, actual_value=play.quarter)
        
        if play.down is not None and (play.down < 1 or play.down > 4):
            self.add_issue(ValidationScope.PLAY, 'down', ValidationSeverity.ERROR,
                           f"Play {play_id}: Invalid down ({play.down})",
                           record_id=play_id, actual_value=play.down)
        
        if play.yard_line is not None and (play.yard_line < 0 or play.yard_line > 100):
            self.add_issue(ValidationScope.PLAY, 'yard_line', ValidationSeverity.ERROR,
                           f"Play {play_id}: Invalid yard line ({play.yard_line})",
                           record_id=play_id, actual_value=play.yard_line)
        
        return parsed
    
    def validate(self, external_game: Any, plays: Optional[List[Any]] = None) -> GameValidationReport:
        """Validate an external game and its plays.
        
        Args:
            external_game: Stored external game
            plays: Plays to check; defaults to the game's own plays
            
        Returns:
            GameValidationReport
        """
        self.clear_issues()
        if plays is None:
            plays = list(external_game.external_plays)
        
        game_valid = self.validate_game(external_game)
        valid_plays = sum(1 for play in plays if self.validate_play(play))
        
        report = GameValidationReport(
            external_game_id=external_game.id,
            game_valid=game_valid,
            plays_total=len(plays),
            plays_valid=valid_plays,
            issues=list(self.issues),
        )
        logger.info(
            f"Validated external game {external_game.id}: {valid_plays}/{len(plays)} plays valid, "
            f"score {report.score} ({report.quality})"
        )
        return report
