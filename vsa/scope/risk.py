"""
Project Risk Assessor.

Derives risk factors from keyword presence, industry and complexity, then
rolls them up into an overall tier plus budget, timeline and technical tiers.
The mitigation strategy list is fixed and does not depend on the factors.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

MITIGATION_STRATEGIES = [
    "Implement phased approach with clear milestones",
    "Conduct regular stakeholder reviews and approvals",
    "Maintain comprehensive project documentation",
    "Establish clear communication protocols",
]


@dataclass
class RiskFactor:
    """Single identified risk."""
    category: str
    description: str
    impact: str
    probability: str
    mitigation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "description": self.description,
            "impact": self.impact,
            "probability": self.probability,
            "mitigation": self.mitigation,
        }


@dataclass
class RiskAssessment:
    """Rolled-up project risk."""
    overall_risk: str = "Low"
    risk_factors: List[RiskFactor] = field(default_factory=list)
    mitigation_strategies: List[str] = field(default_factory=list)
    budget_risk: str = "Low"
    timeline_risk: str = "Medium"
    technical_risk: str = "Low"

    @property
    def is_elevated(self) -> bool:
        """True for High or Critical overall risk."""
        return self.overall_risk in ("High", "Critical")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallRisk": self.overall_risk,
            "riskFactors": [f.to_dict() for f in self.risk_factors],
            "mitigationStrategies": list(self.mitigation_strategies),
            "budgetRisk": self.budget_risk,
            "timelineRisk": self.timeline_risk,
            "technicalRisk": self.technical_risk,
        }


def calculate_overall_risk(factors: List[RiskFactor], complexity: str) -> str:
    """
    Overall tier from factors and complexity.

    Critical: High complexity with >= 2 high-impact or >= 3 high-probability factors
    High:     High complexity, or any high-impact factor
    Medium:   Medium complexity, or >= 2 factors
    Low:      otherwise
    """
    high_impact = sum(1 for f in factors if f.impact == "High")
    high_probability = sum(1 for f in factors if f.probability == "High")

    if complexity == "High" and (high_impact >= 2 or high_probability >= 3):
        return "Critical"
    if complexity == "High" or high_impact >= 1:
        return "High"
    if complexity == "Medium" or len(factors) >= 2:
        return "Medium"
    return "Low"


def assess_project_risks(text: str, complexity: str, industry: str) -> RiskAssessment:
    """
    Build a RiskAssessment for a project description.

    Args:
        text: Project description (matched case-insensitively)
        complexity: Low / Medium / High
        industry: Industry classification, e.g. "Healthcare"

    Returns:
        RiskAssessment
    """
    lower = (text or "").lower()
    factors: List[RiskFactor] = []

    if "migration" in lower or "legacy" in lower:
        factors.append(RiskFactor(
            category="Technical",
            description="Legacy system migration complexity",
            impact="High",
            probability="Medium",
            mitigation="Conduct thorough system assessment and create detailed migration plan",
        ))

    if "integration" in lower or "connect" in lower:
        factors.append(RiskFactor(
            category="Integration",
            description="System integration challenges",
            impact="Medium",
            probability="Medium",
            mitigation="Perform integration testing and create rollback procedures",
        ))

    if industry == "Healthcare" or "hipaa" in lower:
        factors.append(RiskFactor(
            category="Compliance",
            description="HIPAA compliance requirements",
            impact="High",
            probability="High",
            mitigation="Engage compliance experts and conduct security audits",
        ))

    if industry == "Financial Services" or "sox" in lower:
        factors.append(RiskFactor(
            category="Compliance",
            description="Financial regulatory compliance",
            impact="High",
            probability="High",
            mitigation="Implement audit trails and access controls",
        ))

    if complexity == "High":
        factors.append(RiskFactor(
            category="Timeline",
            description="Complex project timeline overruns",
            impact="Medium",
            probability="High",
            mitigation="Break project into phases with clear milestones",
        ))

    if complexity in ("High", "Medium"):
        budget_risk = complexity
    else:
        budget_risk = "Low"

    return RiskAssessment(
        overall_risk=calculate_overall_risk(factors, complexity),
        risk_factors=factors,
        mitigation_strategies=list(MITIGATION_STRATEGIES),
        budget_risk=budget_risk,
        timeline_risk="High" if any(f.category == "Timeline" for f in factors) else "Medium",
        technical_risk="High" if any(f.category == "Technical" for f in factors) else "Low",
    )
