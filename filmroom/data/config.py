"""Import pipeline configuration."""

import os
from dataclasses import dataclass


@dataclass
class ImportConfig:
    """Configuration for standardizing, mapping and importing plays."""
    
    # Minimum Levenshtein ratio for a fuzzy team-name match
    fuzzy_match_threshold: float = 0.7
    
    # Source tag used when a caller does not name one
    default_source: str = "unknown"
    
    # Side recorded on internal games when the graded team's side is unknown
    default_home_away: str = "HOME"
    
    @classmethod
    def from_env(cls) -> "ImportConfig":
        """Build configuration from FILMROOM_* environment variables."""
        return cls(
            fuzzy_match_threshold=float(os.getenv("FILMROOM_FUZZY_THRESHOLD", "0.7")),
            default_source=os.getenv("FILMROOM_DEFAULT_SOURCE", "unknown"),
            default_home_away=os.getenv("FILMROOM_DEFAULT_HOME_AWAY", "HOME").upper(),
        )
