"""
Service catalog: JSON:API adapter, API client and provider with fallback.
"""

from .adapter import CatalogAdapter, JsonApiResource, complexity_from_hours, extract_keywords, parse_hours, to_services
from .client import ApiResponse, ApiStatus, EndpointStatus, ScopeStackClient
from .provider import CatalogProvider, CatalogSnapshot, load_fallback_catalog

__all__ = [
    "CatalogAdapter",
    "JsonApiResource",
    "complexity_from_hours",
    "parse_hours",
    "extract_keywords",
    "to_services",
    "ApiResponse",
    "ApiStatus",
    "EndpointStatus",
    "ScopeStackClient",
    "CatalogProvider",
    "CatalogSnapshot",
    "load_fallback_catalog",
]
