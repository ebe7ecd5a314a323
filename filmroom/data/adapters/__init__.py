"""Provider adapters mapping third-party payloads into neutral external records."""

from typing import Dict, Optional, Type

from ...services.base import ValidationException
from .base import BaseSourceAdapter, SourceConfig, SourceFetchError, parse_datetime
from .espn import ESPNAdapter
from .kaggle import KaggleNCAAAdapter
from .sports_reference import SportsReferenceAdapter
from .ncaa_api import NCAAApiAdapter

ADAPTERS: Dict[str, Type[BaseSourceAdapter]] = {
    ESPNAdapter.source: ESPNAdapter,
    KaggleNCAAAdapter.source: KaggleNCAAAdapter,
    SportsReferenceAdapter.source: SportsReferenceAdapter,
    NCAAApiAdapter.source: NCAAApiAdapter,
}


def get_adapter(source: str, config: Optional[SourceConfig] = None) -> BaseSourceAdapter:
    """Get the adapter registered for a provider tag.
    
    Raises:
        ValidationException: If the tag is unknown
    """
    adapter_class = ADAPTERS.get((source or '').strip().lower())
    if adapter_class is None:
        raise ValidationException(
            f"Unknown source '{source}'. Must be one of: {', '.join(sorted(ADAPTERS))}"
        )
    return adapter_class(config)


__all__ = [
    'ADAPTERS',
    'get_adapter',
    'BaseSourceAdapter',
    'SourceConfig',
    'SourceFetchError',
    'parse_datetime',
    'ESPNAdapter',
    'KaggleNCAAAdapter',
    'SportsReferenceAdapter',
    'NCAAApiAdapter',
]
