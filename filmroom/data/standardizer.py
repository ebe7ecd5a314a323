"""Play standardization: any provider's raw play into a StandardizedPlay."""

import logging
import math
import re
from typing import Dict, Any, Optional, Tuple, List

import pandas as pd
from pydantic import BaseModel as PydanticBaseModel

from ..models.standardized import StandardizedPlay, PlayResult, PlayType, normalize_play_type

logger = logging.getLogger(__name__)


# Combined clock formats: "Q2 7:45", "2Q 7:45"
TIME_PATTERN = re.compile(r'^\s*(?:Q\s*(\d+)|(\d+)\s*Q)\s+(.+)$', re.IGNORECASE)

PERSONNEL_PATTERN = re.compile(r'(\d{2})\s*personnel', re.IGNORECASE)

# Checked in order; the first family with a keyword in the text wins.
PLAY_TYPE_KEYWORDS: List[Tuple[PlayType, Tuple[str, ...]]] = [
    (PlayType.RUSH, ('rush', 'run', 'handoff')),
    (PlayType.PASS, ('pass', 'throw', 'completion')),
    (PlayType.PUNT, ('punt',)),
    (PlayType.FIELD_GOAL, ('field goal', 'fg')),
    (PlayType.KICKOFF, ('kickoff',)),
    (PlayType.EXTRA_POINT, ('extra point', 'pat')),
    (PlayType.SAFETY, ('safety',)),
    (PlayType.PENALTY, ('penalty',)),
    (PlayType.TIMEOUT, ('timeout',)),
    (PlayType.CHALLENGE, ('challenge',)),
]

FORMATIONS = [
    'shotgun', 'pistol', 'i-formation', 'single wing', 'wildcat',
    'spread', 'pro set', 'wishbone', 'veer', 'flexbone',
]

COVERAGES = [
    'man', 'zone', 'cover 1', 'cover 2', 'cover 3', 'cover 4',
    'quarters', 'dime', 'nickel', 'prevent',
]

BLITZ_KEYWORDS = ('blitz', 'rush', 'pressure')
PRESSURE_KEYWORDS = ('pressure', 'hurry', 'hit')

# Alternative field names providers use for the same value
ID_KEYS = ('id', 'externalId', 'external_id', 'play_id')
GAME_ID_KEYS = ('gameId', 'externalGameId', 'external_game_id', 'game_id')
YARD_LINE_KEYS = ('yardLine', 'yard_line')
PLAY_TYPE_KEYS = ('playType', 'play_type')

# Neutral keys kept in an external play's raw payload that have no column
PASSTHROUGH_KEYS = ('result', 'formation', 'personnel', 'blitz', 'pressure', 'coverage')


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_int(value: Any) -> Optional[int]:
    """Coerce a loosely typed value to int; missing or non-numeric becomes None.
    
    Zero is a real value and is kept.
    """
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if math.isinf(number) or math.isnan(number):
        return None
    return int(number)


def to_bool(value: Any) -> Optional[bool]:
    """Coerce a loosely typed flag; unrecognized values become None."""
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    token = str(value).strip().lower()
    if token in ('true', 't', 'yes', 'y', '1'):
        return True
    if token in ('false', 'f', 'no', 'n', '0'):
        return False
    return None


def to_text(value: Any) -> str:
    if _is_missing(value):
        return ''
    return str(value).strip()


def _first(record: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if not _is_missing(value):
            return value
    return None


def as_record(raw: Any) -> Dict[str, Any]:
    """Turn whatever a caller hands over into a plain dict.
    
    Accepts dicts, pydantic models and ORM rows; anything else is treated
    as an empty record.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, PydanticBaseModel):
        return raw.model_dump()
    table = getattr(raw, '__table__', None)
    if table is not None:
        return {column.name: getattr(raw, column.name, None) for column in table.columns}
    logger.debug(f"Unsupported raw play type {type(raw).__name__}; using empty record")
    return {}


def raw_from_external_play(external_play: Any) -> Dict[str, Any]:
    """Build the raw record for a stored external play.
    
    The provider IDs stand in for the row IDs, and neutral extras kept in the
    raw payload (result, scheme fields) are carried over.
    """
    raw: Dict[str, Any] = {
        'id': external_play.external_id,
        'gameId': str(external_play.external_game_id) if external_play.external_game_id is not None else '',
        'quarter': external_play.quarter,
        'time': external_play.time,
        'down': external_play.down,
        'distance': external_play.distance,
        'yardLine': external_play.yard_line,
        'playType': external_play.play_type,
        'description': external_play.description,
        'offense': external_play.offense,
        'defense': external_play.defense,
    }
    payload = external_play.raw_data if isinstance(external_play.raw_data, dict) else {}
    for key in PASSTHROUGH_KEYS:
        if key in payload and key not in raw:
            raw[key] = payload[key]
    return raw


class PlayStandardizer:
    """Converts raw play records from any provider into StandardizedPlay."""
    
    def __init__(self, default_source: str = "unknown"):
        self.default_source = default_source
    
    @staticmethod
    def parse_time(value: Any) -> Tuple[int, str, bool]:
        """Split a combined clock string into quarter and clock.
        
        Args:
            value: "Q2 7:45", "2Q 7:45" or a bare clock
            
        Returns:
            (quarter, time, matched); unmatched input yields quarter 1 and
            the original text
        """
        text = '' if _is_missing(value) else str(value)
        match = TIME_PATTERN.match(text)
        if not match:
            return 1, text, False
        quarter = int(match.group(1) or match.group(2))
        return quarter, match.group(3).strip(), True
    
    @staticmethod
    def classify_play_type(description: str, play_type: Any = None) -> str:
        """Classify a play into the PlayType enumeration.
        
        A recognized explicit type wins. Otherwise the description is scanned
        for keyword families in priority order, then the raw type token is
        scanned the same way, and RUSH is the fallback.
        """
        explicit = normalize_play_type(play_type) if not _is_missing(play_type) else None
        if explicit is not None:
            return explicit.value
        
        for text in (description, '' if _is_missing(play_type) else str(play_type)):
            lowered = text.lower()
            if not lowered:
                continue
            for candidate, keywords in PLAY_TYPE_KEYWORDS:
                if any(keyword in lowered for keyword in keywords):
                    return candidate.value
        
        return PlayType.RUSH.value
    
    @staticmethod
    def extract_formation(description: str) -> Optional[str]:
        desc = description.lower()
        for formation in FORMATIONS:
            if formation in desc:
                return formation.upper()
        return None
    
    @staticmethod
    def extract_personnel(description: str) -> Optional[str]:
        match = PERSONNEL_PATTERN.search(description)
        return match.group(1) if match else None
    
    @staticmethod
    def detect_blitz(description: str) -> bool:
        desc = description.lower()
        return any(keyword in desc for keyword in BLITZ_KEYWORDS)
    
    @staticmethod
    def detect_pressure(description: str) -> bool:
        desc = description.lower()
        return any(keyword in desc for keyword in PRESSURE_KEYWORDS)
    
    @staticmethod
    def extract_coverage(description: str) -> Optional[str]:
        desc = description.lower()
        for coverage in COVERAGES:
            if coverage in desc:
                return coverage.upper()
        return None
    
    @staticmethod
    def build_result(raw_result: Any) -> PlayResult:
        """Build a PlayResult from a nested result payload."""
        result = as_record(raw_result) if not isinstance(raw_result, PlayResult) else raw_result.model_dump()
        return PlayResult(
            yards=to_int(result.get('yards')),
            success=to_bool(result.get('success')),
            points=to_int(result.get('points')),
            turnover=to_bool(result.get('turnover')),
            sack=to_bool(result.get('sack')),
            interception=to_bool(result.get('interception')),
            fumble=to_bool(result.get('fumble')),
        )
    
    def standardize(self, raw_play: Any, source: Optional[str] = None) -> StandardizedPlay:
        """Standardize one raw play.
        
        Never raises for bad data: malformed or missing fields become None or
        defaults, and the situation flags are always derived from down,
        distance and yard line.
        
        Args:
            raw_play: Provider play as a dict, pydantic model or ORM row
            source: Provider tag
            
        Returns:
            StandardizedPlay
        """
        record = as_record(raw_play)
        description = to_text(record.get('description'))
        
        parsed_quarter, parsed_time, matched = self.parse_time(record.get('time'))
        quarter = to_int(record.get('quarter'))
        if quarter is None:
            quarter = parsed_quarter
        
        blitz = to_bool(record.get('blitz'))
        pressure = to_bool(record.get('pressure'))
        
        return StandardizedPlay(
            id=to_text(_first(record, ID_KEYS)),
            game_id=to_text(_first(record, GAME_ID_KEYS)),
            source=source or to_text(record.get('source')) or self.default_source,
            quarter=quarter,
            time=parsed_time,
            down=to_int(record.get('down')),
            distance=to_int(record.get('distance')),
            yard_line=to_int(_first(record, YARD_LINE_KEYS)),
            play_type=self.classify_play_type(description, _first(record, PLAY_TYPE_KEYS)),
            description=description,
            offense=to_text(record.get('offense')),
            defense=to_text(record.get('defense')),
            result=self.build_result(record.get('result')),
            formation=to_text(record.get('formation')) or self.extract_formation(description),
            personnel=to_text(record.get('personnel')) or self.extract_personnel(description),
            blitz=blitz if blitz is not None else self.detect_blitz(description),
            pressure=pressure if pressure is not None else self.detect_pressure(description),
            coverage=to_text(record.get('coverage')) or self.extract_coverage(description),
        )
    
    def standardize_many(self, raw_plays: List[Any], source: Optional[str] = None) -> List[StandardizedPlay]:
        """Standardize a list of raw plays, preserving order."""
        plays = [self.standardize(raw_play, source) for raw_play in raw_plays or []]
        logger.debug(f"Standardized {len(plays)} plays from {source or self.default_source}")
        return plays


_default_standardizer = PlayStandardizer()


def standardize_play(raw_play: Any, source: Optional[str] = None) -> StandardizedPlay:
    """Standardize one raw play with the default standardizer."""
    return _default_standardizer.standardize(raw_play, source)
