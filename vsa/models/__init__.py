"""
Data models for the scoping engine.
"""

from .catalog_schema import (
    HOURLY_RATES,
    RISK_ORDER,
    CamelModel,
    CatalogSource,
    Complexity,
    Hours,
    OverallRisk,
    ResourceType,
    RiskLevel,
    ScopeLanguage,
    Service,
    ServiceMatch,
    SubService,
    enum_value,
    hourly_rate,
    is_known_resource_type,
    load_services,
)
from .wbs_schema import (
    WBSDeliverable,
    WBSPhase,
    WBSRiskSummary,
    WBSService,
    WBSSubService,
    WBSSummary,
    WorkBreakdownStructure,
)

__all__ = [
    "HOURLY_RATES",
    "RISK_ORDER",
    "CamelModel",
    "CatalogSource",
    "Complexity",
    "Hours",
    "OverallRisk",
    "ResourceType",
    "RiskLevel",
    "ScopeLanguage",
    "Service",
    "ServiceMatch",
    "SubService",
    "enum_value",
    "hourly_rate",
    "is_known_resource_type",
    "load_services",
    "WBSDeliverable",
    "WBSPhase",
    "WBSRiskSummary",
    "WBSService",
    "WBSSubService",
    "WBSSummary",
    "WorkBreakdownStructure",
]
