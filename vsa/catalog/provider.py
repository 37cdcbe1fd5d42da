"""
Catalog Provider.

Supplies the service catalog for one matching operation. Tries, in order:
1. the live scoping-data API (subservices from "included", else a separate fetch)
2. the last live catalog stored in the local cache
3. the packaged fallback catalog (vsa/data/services.yaml)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import yaml

from vsa import DATA_DIR
from vsa.errors import CatalogError
from vsa.models import Service, load_services

from .adapter import CatalogAdapter
from .client import ScopeStackClient

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = DATA_DIR / "services.yaml"
CACHE_KEY = "catalog"


@dataclass
class CatalogSnapshot:
    """Services available for one matching operation."""
    services: List[Service] = field(default_factory=list)
    origin: str = "fallback"  # live / cache / fallback / provided
    fetched_at: datetime = field(default_factory=datetime.now)
    error: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.origin == "live"

    def __len__(self) -> int:
        return len(self.services)


def load_fallback_catalog(path: Optional[Path] = None) -> List[Service]:
    """
    Load the packaged catalog.

    Raises:
        CatalogError: if the file cannot be read or parsed
    """
    path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise CatalogError(f"Could not load fallback catalog from {path}: {e}")

    records = raw.get("services", []) if isinstance(raw, dict) else raw
    services = load_services(records)
    logger.debug(f"Loaded {len(services)} fallback services from {path}")
    return services


class CatalogProvider:
    """
    Live catalog with cache and static fallback.

    Usage:
        provider = CatalogProvider(ScopeStackClient(config.scopestack), cache=LocalCache(path))
        snapshot = provider.get_catalog()
    """

    def __init__(
        self,
        client: Optional[ScopeStackClient] = None,
        adapter: Optional[CatalogAdapter] = None,
        cache=None,
        fallback_path: Optional[Path] = None,
    ):
        self.client = client
        self.adapter = adapter or CatalogAdapter()
        self.cache = cache
        self.fallback_path = fallback_path

    def fetch_live(self) -> List[Service]:
        """
        Fetch and normalize the live catalog.

        Raises:
            CatalogError: on request failure or an empty catalog
        """
        if self.client is None:
            raise CatalogError("No catalog client configured")

        result = self.client.get_services()
        if not result.success:
            raise CatalogError(result.error or "Service fetch failed")

        payload = result.data
        included = payload.get("included") if isinstance(payload, dict) else None
        has_subservices = isinstance(included, list) and any(
            isinstance(item, dict) and item.get("type") == "subservices" for item in included
        )

        subservices_payload = None
        if not has_subservices:
            logger.info("No subservices in included section, fetching separately")
            sub_result = self.client.get_subservices()
            if sub_result.success:
                subservices_payload = sub_result.data
            else:
                logger.warning(f"Subservice fetch failed: {sub_result.error}")

        services = self.adapter.to_services(payload, subservices_payload)
        if not services:
            raise CatalogError("Live catalog returned no usable services")
        return services

    def _from_cache(self) -> List[Service]:
        if self.cache is None:
            return []
        return load_services(self.cache.get(CACHE_KEY) or [])

    def get_catalog(self) -> CatalogSnapshot:
        """Best available catalog; never raises for live or cache failures."""
        error = None
        if self.client is not None:
            try:
                services = self.fetch_live()
                if self.cache is not None:
                    self.cache.set(CACHE_KEY, [s.model_dump(mode="json") for s in services])
                logger.info(f"Using live catalog ({len(services)} services)")
                return CatalogSnapshot(services=services, origin="live")
            except CatalogError as e:
                error = str(e)
                logger.warning(f"Live catalog unavailable, falling back: {e}")

        cached = self._from_cache()
        if cached:
            logger.info(f"Using cached catalog ({len(cached)} services)")
            return CatalogSnapshot(services=cached, origin="cache", error=error)

        services = load_fallback_catalog(self.fallback_path)
        logger.info(f"Using fallback catalog ({len(services)} services)")
        return CatalogSnapshot(services=services, origin="fallback", error=error)
