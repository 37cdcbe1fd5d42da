"""
Scope analysis: completeness review, risk assessment, project analysis and
assistant guidance.
"""

from .analysis import ProjectAnalysis, ProjectRecommendation, analyze_project
from .completeness import ScopeReview, ScopeSignals, analyze_scope_completeness
from .guidance import (
    AssistantResponse,
    ScopeGuidance,
    ServiceSuggestion,
    analyze_scope_gaps,
    generate_ai_response,
    generate_interactive_response,
    identify_missing_services,
)
from .risk import RiskAssessment, RiskFactor, assess_project_risks, calculate_overall_risk

__all__ = [
    "ProjectAnalysis",
    "ProjectRecommendation",
    "analyze_project",
    "ScopeReview",
    "ScopeSignals",
    "analyze_scope_completeness",
    "AssistantResponse",
    "ScopeGuidance",
    "ServiceSuggestion",
    "analyze_scope_gaps",
    "generate_ai_response",
    "generate_interactive_response",
    "identify_missing_services",
    "RiskAssessment",
    "RiskFactor",
    "assess_project_risks",
    "calculate_overall_risk",
]
