"""
Service matching strategies.
"""

from typing import Dict, Type

from .base import MAX_MATCHES, ServiceMatcher
from .catalog_text import CatalogTextMatch, match_services
from .live_catalog import LiveCatalogMatch, find_best_service_matches

MATCHERS: Dict[str, Type[ServiceMatcher]] = {
    CatalogTextMatch.name: CatalogTextMatch,
    LiveCatalogMatch.name: LiveCatalogMatch,
}


def get_matcher(name: str = "text") -> ServiceMatcher:
    """Matcher instance by strategy name ("text" or "live")."""
    try:
        return MATCHERS[name]()
    except KeyError:
        raise ValueError(f"Unknown matcher '{name}'. Expected one of: {', '.join(MATCHERS)}")


__all__ = [
    "MAX_MATCHES",
    "MATCHERS",
    "ServiceMatcher",
    "CatalogTextMatch",
    "LiveCatalogMatch",
    "find_best_service_matches",
    "get_matcher",
    "match_services",
]
