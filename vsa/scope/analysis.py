"""
Project Analysis.

Keyword heuristics that turn a project description into:
- complexity tier and industry
- an estimated timeline string
- key requirements and suggested questions
- a scope review and a risk assessment
- up to five recommendations
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .completeness import MISSING_TIMELINE, ScopeReview, analyze_scope_completeness
from .risk import RiskAssessment, assess_project_risks

logger = logging.getLogger(__name__)

MAX_SUGGESTED_QUESTIONS = 3
MAX_RECOMMENDATIONS = 5

TIMELINES = {
    "High": "3-6 months",
    "Medium": "1-3 months",
    "Low": "2-4 weeks",
}

# keyword -> requirement label, in reporting order
REQUIREMENT_KEYWORDS = [
    ("cloud", "Cloud Infrastructure"),
    ("security", "Security & Compliance"),
    ("backup", "Data Protection"),
    ("network", "Network Infrastructure"),
]


@dataclass
class ProjectRecommendation:
    type: str
    priority: str
    title: str
    description: str
    impact: str
    effort: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "effort": self.effort,
        }


@dataclass
class ProjectAnalysis:
    """Everything derived from a single project description."""
    complexity: str
    industry: str
    estimated_timeline: str
    key_requirements: List[str] = field(default_factory=list)
    suggested_questions: List[str] = field(default_factory=list)
    scope_review: ScopeReview = field(default_factory=ScopeReview)
    risk_assessment: RiskAssessment = field(default_factory=RiskAssessment)
    recommendations: List[ProjectRecommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "complexity": self.complexity,
            "industry": self.industry,
            "estimatedTimeline": self.estimated_timeline,
            "keyRequirements": list(self.key_requirements),
            "suggestedQuestions": list(self.suggested_questions),
            "scopeReview": self.scope_review.to_dict(),
            "riskAssessment": self.risk_assessment.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


def detect_complexity(text: str) -> str:
    lower = (text or "").lower()
    if any(word in lower for word in ("migration", "enterprise", "complex")):
        return "High"
    if any(word in lower for word in ("upgrade", "integration", "security")):
        return "Medium"
    return "Low"


def detect_industry(text: str) -> str:
    lower = (text or "").lower()
    if any(word in lower for word in ("healthcare", "medical", "hipaa")):
        return "Healthcare"
    if any(word in lower for word in ("financial", "banking", "sox")):
        return "Financial Services"
    if any(word in lower for word in ("manufacturing", "factory")):
        return "Manufacturing"
    return "General"


def detect_requirements(text: str) -> List[str]:
    lower = (text or "").lower()
    return [label for keyword, label in REQUIREMENT_KEYWORDS if keyword in lower]


def suggest_questions(text: str, complexity: str, industry: str) -> List[str]:
    """Up to three discovery questions for the account manager."""
    lower = (text or "").lower()
    questions = []

    if "migration" in lower:
        questions.append("What is your current infrastructure setup?")
        questions.append("Do you have any compliance requirements?")

    if "security" in lower:
        questions.append("Have you experienced any security incidents recently?")
        questions.append("What compliance standards do you need to meet?")

    if complexity == "High":
        questions.append("What is your preferred timeline for this project?")
        questions.append("Do you have dedicated IT staff to support this project?")

    if industry == "Healthcare":
        questions.append("Do you need HIPAA compliance?")
    elif industry == "Financial Services":
        questions.append("Are there SOX compliance requirements?")

    return questions[:MAX_SUGGESTED_QUESTIONS]


def generate_recommendations(
    complexity: str,
    scope_review: ScopeReview,
    risk_assessment: RiskAssessment,
) -> List[ProjectRecommendation]:
    recommendations = []

    if scope_review.completeness == "Incomplete":
        recommendations.append(ProjectRecommendation(
            type="Scope",
            priority="High",
            title="Define Complete Project Scope",
            description="Gather additional requirements to fully define project scope and objectives",
            impact="Reduces project risks and ensures accurate estimates",
            effort="Low",
        ))

    if MISSING_TIMELINE in scope_review.missing_elements:
        recommendations.append(ProjectRecommendation(
            type="Timeline",
            priority="High",
            title="Establish Project Timeline",
            description="Define clear project deadlines and milestone dates",
            impact="Enables proper resource planning and scheduling",
            effort="Low",
        ))

    if complexity == "High":
        recommendations.append(ProjectRecommendation(
            type="Technical",
            priority="High",
            title="Implement Phased Approach",
            description="Break complex project into manageable phases with clear deliverables",
            impact="Reduces risk and enables incremental value delivery",
            effort="Medium",
        ))

    if risk_assessment.technical_risk == "High":
        recommendations.append(ProjectRecommendation(
            type="Technical",
            priority="Medium",
            title="Conduct Technical Proof of Concept",
            description="Validate technical approach with small-scale implementation",
            impact="Reduces technical risks and validates solution approach",
            effort="Medium",
        ))

    if risk_assessment.is_elevated:
        recommendations.append(ProjectRecommendation(
            type="Process",
            priority="High",
            title="Establish Risk Management Process",
            description="Implement regular risk reviews and mitigation tracking",
            impact="Proactive risk management and issue resolution",
            effort="Low",
        ))

    return recommendations[:MAX_RECOMMENDATIONS]


def analyze_project(text: str) -> ProjectAnalysis:
    """
    Analyze a free-text project description.

    Args:
        text: Project description

    Returns:
        ProjectAnalysis
    """
    lower = (text or "").lower()
    complexity = detect_complexity(lower)
    industry = detect_industry(lower)
    requirements = detect_requirements(lower)

    scope_review = analyze_scope_completeness(lower, requirements)
    risk_assessment = assess_project_risks(lower, complexity, industry)

    analysis = ProjectAnalysis(
        complexity=complexity,
        industry=industry,
        estimated_timeline=TIMELINES[complexity],
        key_requirements=requirements,
        suggested_questions=suggest_questions(lower, complexity, industry),
        scope_review=scope_review,
        risk_assessment=risk_assessment,
        recommendations=generate_recommendations(complexity, scope_review, risk_assessment),
    )

    logger.info(
        f"Project analysis: complexity={complexity}, industry={industry}, "
        f"score={scope_review.overall_score}, risk={risk_assessment.overall_risk}"
    )
    return analysis
