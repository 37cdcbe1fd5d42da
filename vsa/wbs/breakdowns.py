"""
Predefined Breakdown Library.

Maps catalog service ids to hand-written breakdown templates. A service whose
id is in the library expands into the template tree instead of the general
planning / implementation / testing split.

Templates are loaded from YAML (vsa/data/breakdowns.yaml by default) and can
be replaced or extended per generator.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from vsa import DATA_DIR
from vsa.models import Hours, ResourceType, RiskLevel

logger = logging.getLogger(__name__)

DEFAULT_BREAKDOWNS_PATH = DATA_DIR / "breakdowns.yaml"


class DeliverableTemplate(BaseModel):
    name: str
    description: str = ""
    hours: Hours = 0
    risk_level: RiskLevel = RiskLevel.MEDIUM


class SubServiceTemplate(BaseModel):
    name: str
    description: str = ""
    hours: Hours = 0
    resource_type: ResourceType = ResourceType.TECHNICAL
    deliverables: List[DeliverableTemplate] = Field(default_factory=list)


class ServiceTemplate(BaseModel):
    name: str
    description: str = ""
    hours: Hours = 0
    resource_type: ResourceType = ResourceType.TECHNICAL
    subservices: List[SubServiceTemplate] = Field(default_factory=list)


class BreakdownTemplate(BaseModel):
    """Service tree that replaces a catalog service; phase_name is descriptive only."""
    phase_name: str
    services: List[ServiceTemplate] = Field(default_factory=list)


class BreakdownLibrary:
    """
    Lookup of service id -> BreakdownTemplate.

    Usage:
        library = BreakdownLibrary.from_yaml()
        template = library.get("firewall-installation")
    """

    def __init__(self, templates: Optional[Mapping[str, BreakdownTemplate]] = None):
        self._templates: Dict[str, BreakdownTemplate] = dict(templates or {})

    @classmethod
    def from_dict(cls, raw: Mapping[str, dict]) -> "BreakdownLibrary":
        """Build from plain dicts, skipping templates that fail validation."""
        templates = {}
        for service_id, data in (raw or {}).items():
            try:
                templates[str(service_id)] = BreakdownTemplate.model_validate(data)
            except ValidationError as e:
                logger.warning(f"Skipping invalid breakdown template '{service_id}': {e}")
        return cls(templates)

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> "BreakdownLibrary":
        """Load templates from YAML; an unreadable file gives an empty library."""
        path = Path(path) if path else DEFAULT_BREAKDOWNS_PATH
        try:
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load breakdown templates from {path}: {e}")
            return cls()

        library = cls.from_dict(raw)
        logger.debug(f"Loaded {len(library)} breakdown templates from {path}")
        return library

    def get(self, service_id: str) -> Optional[BreakdownTemplate]:
        return self._templates.get(service_id)

    def register(self, service_id: str, template: BreakdownTemplate) -> None:
        self._templates[service_id] = template

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)


_default_library: Optional[BreakdownLibrary] = None


def default_library() -> BreakdownLibrary:
    """Packaged breakdown library, loaded once."""
    global _default_library
    if _default_library is None:
        _default_library = BreakdownLibrary.from_yaml()
    return _default_library
