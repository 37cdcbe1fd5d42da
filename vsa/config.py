"""
Collaborator configuration.

Settings are explicit dataclasses handed to the collaborator constructors.
The matching and WBS core never reads configuration.

Sources:
- environment variables (AppConfig.from_env)
- a YAML file with one section per collaborator (AppConfig.from_yaml)

YAML layout:
    scopestack:
      api_key: ...
      base_url: https://api.scopestack.io
    openrouter:
      api_key: ...
      model: anthropic/claude-3.5-sonnet
    fireflies: {api_key: ...}
    teams: {client_id: ..., client_secret: ..., tenant_id: ...}
    webex: {access_token: ...}
    cache: {path: ~/.vsa/cache.json}
    http_timeout: 10
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_SCOPESTACK_URL = "https://api.scopestack.io"
DEFAULT_OPENROUTER_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"
DEFAULT_CACHE_PATH = Path.home() / ".vsa" / "cache.json"


@dataclass
class ScopeStackSettings:
    api_key: Optional[str] = None
    base_url: str = DEFAULT_SCOPESTACK_URL
    timeout: float = DEFAULT_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class OpenRouterSettings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_OPENROUTER_URL
    site_url: str = "http://localhost:3000"
    temperature: float = 0.7
    timeout: float = 60.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class FirefliesSettings:
    api_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class TeamsSettings:
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    tenant_id: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.tenant_id)


@dataclass
class WebexSettings:
    access_token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.access_token)


@dataclass
class CacheSettings:
    path: Path = DEFAULT_CACHE_PATH
    enabled: bool = True


def _parse_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid HTTP timeout: {value!r}", setting="http_timeout")
    if timeout <= 0:
        raise ConfigurationError(f"HTTP timeout must be positive, got {timeout}", setting="http_timeout")
    return timeout


def _section(cls, data: Optional[Mapping[str, Any]], timeout: Optional[float] = None):
    """Build a settings dataclass from a mapping, ignoring unknown keys."""
    data = dict(data or {})
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {sorted(unknown)}")
    kwargs = {k: v for k, v in data.items() if k in known and v is not None}
    if timeout is not None and "timeout" in known and "timeout" not in kwargs:
        kwargs["timeout"] = timeout
    return cls(**kwargs)


@dataclass
class AppConfig:
    """All collaborator settings."""
    scopestack: ScopeStackSettings = field(default_factory=ScopeStackSettings)
    openrouter: OpenRouterSettings = field(default_factory=OpenRouterSettings)
    fireflies: FirefliesSettings = field(default_factory=FirefliesSettings)
    teams: TeamsSettings = field(default_factory=TeamsSettings)
    webex: WebexSettings = field(default_factory=WebexSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """
        Read settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Raises:
            ConfigurationError: if VSA_HTTP_TIMEOUT is not a positive number
        """
        env = os.environ if environ is None else environ
        timeout = _parse_timeout(env.get("VSA_HTTP_TIMEOUT", DEFAULT_TIMEOUT))
        cache_path = env.get("VSA_CACHE_PATH")

        return cls(
            scopestack=ScopeStackSettings(
                api_key=env.get("SCOPESTACK_API_KEY") or None,
                base_url=env.get("SCOPESTACK_BASE_URL") or DEFAULT_SCOPESTACK_URL,
                timeout=timeout,
            ),
            openrouter=OpenRouterSettings(
                api_key=env.get("OPENROUTER_API_KEY") or None,
                model=env.get("VSA_DEFAULT_MODEL") or DEFAULT_MODEL,
            ),
            fireflies=FirefliesSettings(api_key=env.get("FIREFLIES_API_KEY") or None, timeout=timeout),
            teams=TeamsSettings(
                client_id=env.get("TEAMS_CLIENT_ID") or None,
                client_secret=env.get("TEAMS_CLIENT_SECRET") or None,
                tenant_id=env.get("TEAMS_TENANT_ID") or None,
                timeout=timeout,
            ),
            webex=WebexSettings(access_token=env.get("WEBEX_ACCESS_TOKEN") or None, timeout=timeout),
            cache=CacheSettings(path=Path(cache_path).expanduser()) if cache_path else CacheSettings(),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "AppConfig":
        """
        Read settings from a YAML file.

        Raises:
            ConfigurationError: if the file cannot be read or parsed
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not load config from {path}: {e}")

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        timeout = _parse_timeout(raw.get("http_timeout", DEFAULT_TIMEOUT))
        cache = dict(raw.get("cache") or {})
        if "path" in cache:
            cache["path"] = Path(cache["path"]).expanduser()

        config = cls(
            scopestack=_section(ScopeStackSettings, raw.get("scopestack"), timeout),
            openrouter=_section(OpenRouterSettings, raw.get("openrouter")),
            fireflies=_section(FirefliesSettings, raw.get("fireflies"), timeout),
            teams=_section(TeamsSettings, raw.get("teams"), timeout),
            webex=_section(WebexSettings, raw.get("webex"), timeout),
            cache=_section(CacheSettings, cache),
        )
        logger.info(f"Loaded config from {path}")
        return config

    def summary(self) -> Dict[str, bool]:
        """Which collaborators have credentials."""
        return {
            "scopestack": self.scopestack.configured,
            "openrouter": self.openrouter.configured,
            "fireflies": self.fireflies.configured,
            "teams": self.teams.configured,
            "webex": self.webex.configured,
        }
