"""
WBS Schema
Pydantic models for the Work Breakdown Structure produced by vsa.wbs.

Hierarchy:
    WorkBreakdownStructure
      -> WBSPhase
        -> WBSService
          -> WBSSubService
            -> WBSDeliverable

Hours are int-or-float so integer hours stay integers in exports.
"""

from datetime import datetime
from typing import List

from pydantic import Field

from .catalog_schema import CamelModel, Complexity, Hours, ResourceType, RiskLevel


class WBSDeliverable(CamelModel):
    """Smallest costed unit of the plan."""
    id: str
    name: str
    description: str = ""
    estimated_hours: Hours = 0
    dependencies: List[str] = Field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.MEDIUM


class WBSSubService(CamelModel):
    id: str
    name: str
    description: str = ""
    estimated_hours: Hours = 0
    deliverables: List[WBSDeliverable] = Field(default_factory=list)
    resource_type: ResourceType = ResourceType.TECHNICAL
    complexity: Complexity = Complexity.MEDIUM


class WBSService(CamelModel):
    """A matched service expanded into subservices, costed at its resource rate."""
    id: str
    name: str
    description: str = ""
    estimated_hours: Hours = 0
    total_cost: Hours = 0
    subservices: List[WBSSubService] = Field(default_factory=list)
    resource_type: ResourceType = ResourceType.TECHNICAL
    complexity: Complexity = Complexity.MEDIUM
    risk_level: RiskLevel = RiskLevel.MEDIUM


class WBSPhase(CamelModel):
    """
    Top-level grouping of services.

    total_hours is the sum of the services' estimated hours; duration is in
    weeks of 40 hours.
    """
    id: str
    name: str
    description: str = ""
    start_week: int = 1
    duration: int = 1
    services: List[WBSService] = Field(default_factory=list)
    total_hours: Hours = 0
    total_cost: Hours = 0
    risk_level: RiskLevel = RiskLevel.MEDIUM
    dependencies: List[str] = Field(default_factory=list)
    milestones: List[str] = Field(default_factory=list)


class WBSRiskSummary(CamelModel):
    overall: RiskLevel = RiskLevel.LOW
    factors: List[str] = Field(default_factory=list)


class WorkBreakdownStructure(CamelModel):
    """
    Terminal artifact of plan generation.

    Built once per generate call and never mutated afterwards.
    """
    id: str
    project_name: str
    total_duration: int = 0
    total_hours: Hours = 0
    total_cost: Hours = 0
    team_size: int = 1
    phases: List[WBSPhase] = Field(default_factory=list)
    risk_assessment: WBSRiskSummary = Field(default_factory=WBSRiskSummary)
    assumptions: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    def iter_deliverables(self):
        """Yield (phase, service, subservice, deliverable) for every deliverable."""
        for phase in self.phases:
            for service in phase.services:
                for subservice in service.subservices:
                    for deliverable in subservice.deliverables:
                        yield phase, service, subservice, deliverable


class WBSSummary(CamelModel):
    """Headline numbers for a WBS."""
    total_investment: Hours = 0
    timeline: str = ""
    phases: int = 0
    team_size: int = 1
    risk_level: RiskLevel = RiskLevel.LOW
