"""
Catalog Schema
Pydantic models for the service catalog consumed by matching and WBS generation.

Catalog entries arrive from two places:
- the live scoping-data API (normalized by vsa.catalog.adapter)
- the packaged fallback catalog (vsa/data/services.yaml)

Both are normalized into the same Service / SubService shapes before they
reach the core. Field names serialize as camelCase.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class Complexity(str, Enum):
    """Complexity tier of a service or subservice."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RiskLevel(str, Enum):
    """Three-level risk tier used on WBS nodes."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class OverallRisk(str, Enum):
    """Project-level risk tier."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ResourceType(str, Enum):
    """Billing-rate category."""
    TECHNICAL = "Technical"
    PROJECT_MANAGEMENT = "Project Management"
    SPECIALIST = "Specialist"


class CatalogSource(str, Enum):
    """Where a catalog entry came from."""
    SCOPESTACK = "scopestack"
    LOCAL = "local"


# Hourly rates per resource type
HOURLY_RATES: Dict[str, int] = {
    "Technical": 150,
    "Project Management": 175,
    "Specialist": 200,
}

RISK_ORDER = {"Low": 0, "Medium": 1, "High": 2}

Hours = Union[int, float]


def enum_value(value: Any) -> Any:
    """Plain value of an enum member, or the value itself."""
    return value.value if isinstance(value, Enum) else value


def hourly_rate(resource_type: Union[ResourceType, str, None]) -> int:
    """Hourly rate for a resource type; unknown types bill as Technical."""
    return HOURLY_RATES.get(enum_value(resource_type), HOURLY_RATES["Technical"])


def is_known_resource_type(value: Any) -> bool:
    return enum_value(value) in HOURLY_RATES


def to_camel(name: str) -> str:
    """snake_case -> camelCase alias generator."""
    first, *rest = name.split("_")
    return first + "".join(word.capitalize() for word in rest)


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# CATALOG MODELS
# =============================================================================

class ScopeLanguage(CamelModel):
    """Scope-language text attached to a service or subservice."""
    out_of_scope: Optional[str] = None
    customer_responsibility: Optional[str] = None


class SubService(CamelModel):
    """
    Child unit of a Service, independently estimable.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    estimated_hours: Hours = 0
    resource_type: Optional[str] = None
    quantity: int = 1
    minimum_quantity: int = 1
    position: int = 0
    state: Optional[str] = None
    active: bool = True
    languages: Optional[ScopeLanguage] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class Service(CamelModel):
    """
    Catalog-offered unit of professional work.

    estimated_hours is optional; consumers substitute 40 when absent.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str = "General"
    description: str = ""
    keywords: List[str] = Field(default_factory=list)
    estimated_hours: Optional[Hours] = None
    complexity: Complexity = Complexity.MEDIUM
    source: CatalogSource = CatalogSource.LOCAL
    sku: Optional[str] = None
    subservices: List[SubService] = Field(default_factory=list)
    quantity: int = 1
    minimum_quantity: int = 1
    position: int = 0
    state: Optional[str] = None
    service_type: Optional[str] = None
    payment_frequency: Optional[str] = None
    languages: Optional[ScopeLanguage] = None
    phase_name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("keywords", "tags", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("subservices", mode="before")
    @classmethod
    def _none_to_subservices(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("complexity", mode="before")
    @classmethod
    def _default_complexity(cls, value: Any) -> Any:
        if value is None or value == "":
            return Complexity.MEDIUM
        if isinstance(value, str) and not isinstance(value, Enum):
            return value.strip().capitalize()
        return value


class ServiceMatch(CamelModel):
    """
    A Service scored against free-text input.

    service is optional so malformed selections can reach the WBS generator,
    which filters them.
    """
    service: Optional[Service] = None
    confidence: int = Field(default=0, ge=0, le=100)
    matched_keywords: List[str] = Field(default_factory=list)


def load_services(records: List[Dict[str, Any]]) -> List[Service]:
    """Validate raw catalog records, skipping those that fail validation."""
    services = []
    for record in records or []:
        try:
            services.append(Service.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping invalid catalog record {record!r}: {e}")
    return services
