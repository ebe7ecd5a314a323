"""Kaggle NCAA CSV dataset adapter."""

import io
import logging
import os
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import ValidationError

from .base import FlatGameRecord, FlatPlayRecord, FlatRecordAdapter, SourceConfig

logger = logging.getLogger(__name__)

# Flat CSV result columns folded into the nested result payload
RESULT_COLUMNS = {
    'yards': 'yards',
    'result_yards': 'yards',
    'success': 'success',
    'result_success': 'success',
    'points': 'points',
    'result_points': 'points',
}


class KaggleGameRow(FlatGameRecord):
    season: int
    week: int
    home_team: str
    away_team: str
    date: str
    conference: Optional[str] = None
    division: Optional[str] = None


class KagglePlayRow(FlatPlayRecord):
    game_id: str
    quarter: int
    time: str
    play_type: str
    description: str
    offense: str
    defense: str


def read_csv_records(csv_data: str) -> List[Dict[str, Any]]:
    """Read CSV text into row dicts with blanks as None."""
    if not csv_data or not csv_data.strip():
        return []
    df = pd.read_csv(io.StringIO(csv_data.strip()), dtype=str, skipinitialspace=True)
    df.columns = [str(column).strip() for column in df.columns]
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient='records')


class KaggleNCAAAdapter(FlatRecordAdapter):
    """Parses the Kaggle NCAA games and plays CSV exports."""
    
    source = "kaggle_ncaa"
    default_base_url = "https://www.kaggle.com/api/v1"
    game_model = KaggleGameRow
    play_model = KagglePlayRow
    
    @classmethod
    def config_from_env(cls) -> SourceConfig:
        return SourceConfig(
            base_url=cls.default_base_url,
            username=os.getenv("KAGGLE_USERNAME"),
            api_key=os.getenv("KAGGLE_KEY"),
        )
    
    def parse_games_csv(self, csv_data: str) -> List[KaggleGameRow]:
        """Parse a games CSV; rows that do not fit the row schema are skipped.
        
        Args:
            csv_data: CSV text with a header row
            
        Returns:
            List of validated game rows
        """
        games = []
        for index, record in enumerate(read_csv_records(csv_data)):
            try:
                games.append(KaggleGameRow.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping Kaggle game row {index + 1}: {e.error_count()} invalid fields")
                continue
        
        logger.info(f"Parsed {len(games)} Kaggle games")
        return games
    
    def parse_plays_csv(self, csv_data: str) -> List[KagglePlayRow]:
        """Parse a plays CSV; flat result columns become a nested result."""
        plays = []
        for index, record in enumerate(read_csv_records(csv_data)):
            result = {}
            for column, key in RESULT_COLUMNS.items():
                if record.get(column) is not None:
                    result[key] = record.pop(column)
            if result:
                record['result'] = result
            try:
                plays.append(KagglePlayRow.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping Kaggle play row {index + 1}: {e.error_count()} invalid fields")
                continue
        
        logger.info(f"Parsed {len(plays)} Kaggle plays")
        return plays
