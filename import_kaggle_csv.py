#!/usr/bin/env python3
"""Import Kaggle NCAA games/plays CSV exports into the external tables."""

import argparse
import logging
import sys
from pathlib import Path

from filmroom.data.adapters import KaggleNCAAAdapter
from filmroom.data.importer import PlayImporter
from filmroom.database.config import session_scope

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def import_csv(games_path: Path, plays_path: Path = None) -> bool:
    """Parse the CSV files and import them as one kaggle_ncaa batch."""
    adapter = KaggleNCAAAdapter()
    games = adapter.parse_games_csv(games_path.read_text())
    plays = adapter.parse_plays_csv(plays_path.read_text()) if plays_path else []
    
    with session_scope() as db:
        result = PlayImporter(db).import_games(adapter.source, {
            'games': [game.model_dump() for game in games],
            'plays': [play.model_dump() for play in plays],
        })
    
    logger.info(result['message'])
    for error in result['errors'][:10]:
        logger.warning(f"  {error}")
    for mapping in result['mapping_results']:
        if not mapping['mapped']:
            logger.info(f"  Unmapped teams for {mapping['external_game_id']}: {mapping['suggested_teams']}")
    return result['success']


def main():
    parser = argparse.ArgumentParser(description="Import Kaggle NCAA CSV exports")
    parser.add_argument("games_csv", type=Path, help="Games CSV file")
    parser.add_argument("--plays", type=Path, default=None, help="Plays CSV file")
    args = parser.parse_args()
    
    if not args.games_csv.exists():
        logger.error(f"Games file not found: {args.games_csv}")
        sys.exit(1)
    
    sys.exit(0 if import_csv(args.games_csv, args.plays) else 1)


if __name__ == "__main__":
    main()
