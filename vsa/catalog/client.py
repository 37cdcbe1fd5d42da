"""
ScopeStack API Client.

Thin wrapper over the scoping-data REST API:
- GET  /v1/me                                  (authentication, account slug)
- GET  /{slug}/v1/services?include=phase,subservices
- GET  /{slug}/v1/subservices
- GET  /{slug}/v1/phases
- POST /{slug}/v1/match

Every call is single-shot with the configured timeout and no retries.
Failures are returned as ApiResponse(success=False, error=...) and recorded
in the per-endpoint status table.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from vsa.config import ScopeStackSettings
from vsa.errors import CatalogError, ConfigurationError

logger = logging.getLogger(__name__)

JSON_API_ACCEPT = "application/vnd.api+json"

ME_ENDPOINT = "/v1/me"


@dataclass
class ApiResponse:
    """Outcome of a single API call."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    fallback: bool = False


@dataclass
class EndpointStatus:
    endpoint: str
    status: str = "not-tested"  # pending / success / error / not-tested
    last_tested: Optional[datetime] = None
    response_time_ms: Optional[int] = None
    error: Optional[str] = None
    data_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "status": self.status,
            "lastTested": self.last_tested.isoformat() if self.last_tested else None,
            "responseTime": self.response_time_ms,
            "error": self.error,
            "dataCount": self.data_count,
        }


@dataclass
class ApiStatus:
    """Per-endpoint status plus overall health."""
    me: EndpointStatus = field(default_factory=lambda: EndpointStatus(ME_ENDPOINT))
    services: EndpointStatus = field(default_factory=lambda: EndpointStatus("/{account-slug}/v1/services"))
    subservices: EndpointStatus = field(default_factory=lambda: EndpointStatus("/{account-slug}/v1/subservices"))
    overall: str = "unknown"  # healthy / degraded / down / unknown

    def refresh_overall(self) -> None:
        statuses = [self.me.status, self.services.status, self.subservices.status]
        if all(s == "success" for s in statuses):
            self.overall = "healthy"
        elif any(s == "success" for s in statuses):
            self.overall = "degraded"
        elif any(s == "error" for s in statuses):
            self.overall = "down"
        else:
            self.overall = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "me": self.me.to_dict(),
            "services": self.services.to_dict(),
            "subservices": self.subservices.to_dict(),
            "overall": self.overall,
        }


class ScopeStackClient:
    """
    ScopeStack API client with status tracking.

    Usage:
        client = ScopeStackClient(config.scopestack)
        result = client.get_services()
        if result.success:
            services = CatalogAdapter().to_services(result.data)
    """

    def __init__(self, settings: ScopeStackSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.account_slug: Optional[str] = None
        self.status = ApiStatus()

    def _status_for(self, endpoint: str) -> Optional[EndpointStatus]:
        if endpoint == ME_ENDPOINT:
            return self.status.me
        if "/v1/services" in endpoint:
            return self.status.services
        if "/v1/subservices" in endpoint:
            return self.status.subservices
        return None

    def _headers(self) -> Dict[str, str]:
        headers = {"accept": JSON_API_ACCEPT, "Content-Type": "application/json"}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def _send(self, method: str, endpoint: str, **kwargs) -> Any:
        url = f"{self.settings.base_url.rstrip('/')}{endpoint}"
        logger.debug(f"{method} {url}")
        try:
            resp = self.session.request(
                method, url, headers=self._headers(), timeout=self.settings.timeout, **kwargs
            )
            resp.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            reason = e.response.reason if e.response is not None else ""
            raise CatalogError(
                f"API request failed: {status_code} {reason}".strip(),
                status_code=status_code,
                endpoint=endpoint,
            ) from e
        except requests.RequestException as e:
            raise CatalogError(f"API request failed: {e}", endpoint=endpoint) from e

        try:
            return resp.json()
        except ValueError as e:
            raise CatalogError(f"Invalid JSON from {endpoint}", endpoint=endpoint) from e

    def request(self, method: str, endpoint: str, **kwargs) -> ApiResponse:
        """Send one request and record its outcome."""
        status = self._status_for(endpoint)
        started = time.monotonic()
        if status:
            status.status = "pending"
            status.last_tested = datetime.now()

        try:
            data = self._send(method, endpoint, **kwargs)
        except CatalogError as e:
            elapsed = int((time.monotonic() - started) * 1000)
            logger.warning(f"ScopeStack API error for {endpoint}: {e} ({elapsed}ms)")
            if status:
                status.status = "error"
                status.error = str(e)
                status.response_time_ms = elapsed
            self.status.refresh_overall()
            return ApiResponse(success=False, error=str(e))

        elapsed = int((time.monotonic() - started) * 1000)
        if status:
            status.status = "success"
            status.error = None
            status.response_time_ms = elapsed
            if isinstance(data, dict) and isinstance(data.get("data"), list):
                status.data_count = len(data["data"])
        self.status.refresh_overall()
        logger.debug(f"{endpoint} ok ({elapsed}ms)")
        return ApiResponse(success=True, data=data)

    def test_connection(self) -> ApiResponse:
        """GET /v1/me; requires an API key."""
        if not self.settings.api_key:
            error = ConfigurationError("No ScopeStack API key configured", setting="SCOPESTACK_API_KEY")
            return ApiResponse(success=False, error=str(error))

        result = self.request("GET", ME_ENDPOINT)
        if result.success:
            name = (((result.data or {}).get("data") or {}).get("attributes") or {}).get("name", "Unknown User")
            logger.info(f"ScopeStack API: connected as {name}")
        return result

    def ensure_account_slug(self) -> bool:
        if self.account_slug:
            return True

        result = self.test_connection()
        if result.success:
            attributes = ((result.data or {}).get("data") or {}).get("attributes") or {}
            slug = attributes.get("account-slug")
            if slug:
                self.account_slug = slug
                logger.info(f"ScopeStack API: account slug '{slug}'")
                return True

        logger.warning("ScopeStack API: unable to determine account slug")
        return False

    def _account_request(self, method: str, path: str, **kwargs) -> ApiResponse:
        if not self.ensure_account_slug():
            return ApiResponse(
                success=False,
                error="Unable to get account slug for API requests",
                fallback=True,
            )
        return self.request(method, f"/{self.account_slug}{path}", **kwargs)

    def get_services(self) -> ApiResponse:
        return self._account_request("GET", "/v1/services?include=phase,subservices")

    def get_services_by_category(self, category: str) -> ApiResponse:
        return self._account_request("GET", f"/v1/services?category={quote(category)}")

    def get_subservices(self) -> ApiResponse:
        return self._account_request("GET", "/v1/subservices")

    def get_phases(self) -> ApiResponse:
        return self._account_request("GET", "/v1/phases")

    def match_services(self, text: str) -> ApiResponse:
        """Server-side matching; marked as fallback on failure."""
        result = self._account_request("POST", "/v1/match", json={"input": text})
        if not result.success:
            result.fallback = True
        return result

    def get_status(self) -> Dict[str, Any]:
        return self.status.to_dict()
