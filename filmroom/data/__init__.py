"""Data ingestion: standardization, validation, team mapping and import."""

from .config import ImportConfig
from .standardizer import PlayStandardizer, standardize_play
from .validators import (
    ValidationSeverity, ValidationIssue, ExternalGameValidator, GameValidationReport, quality_tier
)
from .team_mapper import GameMapper, TeamMapping, GameMappingResult
from .importer import PlayImporter, ImportResult
from .adapters import get_adapter, SourceConfig, SourceFetchError

__all__ = [
    'ImportConfig',
    
    # Standardization
    'PlayStandardizer',
    'standardize_play',
    
    # Validation
    'ValidationSeverity',
    'ValidationIssue',
    'ExternalGameValidator',
    'GameValidationReport',
    'quality_tier',
    
    # Mapping and import
    'GameMapper',
    'TeamMapping',
    'GameMappingResult',
    'PlayImporter',
    'ImportResult',
    
    # Providers
    'get_adapter',
    'SourceConfig',
    'SourceFetchError',
]
