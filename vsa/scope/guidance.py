"""
Assistant Guidance.

Conversation-stage messages shown alongside the matcher results:
- summary response after matching
- missing-service suggestions for the current selection
- scope-gap guidance with a completeness percentage
- interactive response with contextual questions and next steps
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from vsa.models import ServiceMatch

from .analysis import ProjectAnalysis, analyze_project
from .completeness import MISSING_BUDGET, MISSING_SCALE, MISSING_TIMELINE

MAX_SUGGESTIONS = 4
MAX_CONTEXT_QUESTIONS = 3
MAX_NEXT_STEPS = 4


@dataclass
class ServiceSuggestion:
    """A service the selection appears to be missing."""
    service_name: str
    reason: str
    priority: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serviceName": self.service_name,
            "reason": self.reason,
            "priority": self.priority,
            "category": self.category,
        }


@dataclass
class ScopeGuidance:
    current_completeness: int = 0
    missing_elements: List[str] = field(default_factory=list)
    clarification_needed: List[str] = field(default_factory=list)
    suggested_questions: List[str] = field(default_factory=list)
    recommended_services: List[ServiceSuggestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentCompleteness": self.current_completeness,
            "missingElements": list(self.missing_elements),
            "clarificationNeeded": list(self.clarification_needed),
            "suggestedQuestions": list(self.suggested_questions),
            "recommendedServices": [s.to_dict() for s in self.recommended_services],
        }


@dataclass
class AssistantResponse:
    message: str
    questions: List[str] = field(default_factory=list)
    missing_services: List[ServiceSuggestion] = field(default_factory=list)
    scope_gaps: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)
    confidence: int = 75

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "questions": list(self.questions),
            "missingServices": [s.to_dict() for s in self.missing_services],
            "scopeGaps": list(self.scope_gaps),
            "nextSteps": list(self.next_steps),
            "confidence": self.confidence,
        }


def _service_name(selected: Any) -> str:
    """Lowercased name of a Service, ServiceMatch or raw dict."""
    if isinstance(selected, ServiceMatch):
        selected = selected.service
    if isinstance(selected, dict):
        name = selected.get("name")
    else:
        name = getattr(selected, "name", None)
    return (name or "").lower()


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def generate_ai_response(
    text: str,
    matches: List[ServiceMatch],
    analysis: Optional[ProjectAnalysis] = None,
) -> str:
    """Summary message shown after service matching."""
    analysis = analysis or analyze_project(text)

    if not matches:
        return (
            f"I understand you're looking for IT services. Based on your description, this appears "
            f"to be a {analysis.complexity.lower()} complexity project in the {analysis.industry} "
            f"sector. Could you provide more specific details about what you're trying to achieve?"
        )

    top = matches[0]
    count = len(matches)
    plural = "s" if count > 1 else ""

    response = (
        f"Great! I've analyzed your requirements and found {count} relevant service{plural} "
        f"that could help with your project.\n\n"
    )
    response += (
        f"Based on your description, this appears to be a **{analysis.complexity} complexity** "
        f"project with an estimated timeline of **{analysis.estimated_timeline}**.\n\n"
    )
    if analysis.key_requirements:
        response += f"Key requirements identified:\n{_bullets(analysis.key_requirements)}\n\n"

    top_name = top.service.name if top.service else "Unknown Service"
    response += (
        f"The top recommended service is **{top_name}** with a {top.confidence}% match confidence."
    )
    return response


def identify_missing_services(
    text: str,
    selected: Sequence[Any],
    analysis: ProjectAnalysis,
) -> List[ServiceSuggestion]:
    """
    Suggest commonly paired services absent from the selection.

    Args:
        text: Project description
        selected: Selected services (Service, ServiceMatch or dict with a name)
        analysis: Analysis of the same description

    Returns:
        Up to four ServiceSuggestion
    """
    lower = (text or "").lower()
    names = [_service_name(s) for s in selected or []]

    def selection_has(*words: str) -> bool:
        return any(word in name for name in names for word in words)

    suggestions = []

    if "migration" in lower or "upgrade" in lower:
        if not selection_has("backup", "disaster"):
            suggestions.append(ServiceSuggestion(
                service_name="Backup & Disaster Recovery",
                reason="Critical for data protection during migration",
                priority="High",
                category="Data Protection",
            ))
        if not selection_has("training", "support"):
            suggestions.append(ServiceSuggestion(
                service_name="User Training & Support",
                reason="Users will need training on new systems",
                priority="Medium",
                category="Change Management",
            ))

    if "security" in lower or "firewall" in lower:
        if not selection_has("monitoring", "siem"):
            suggestions.append(ServiceSuggestion(
                service_name="Security Monitoring",
                reason="Continuous monitoring is essential for security",
                priority="High",
                category="Security",
            ))

    if "cloud" in lower or "aws" in lower or "azure" in lower:
        if not selection_has("optimization", "cost"):
            suggestions.append(ServiceSuggestion(
                service_name="Cloud Cost Optimization",
                reason="Prevent unexpected cloud costs",
                priority="Medium",
                category="Cloud Management",
            ))

    if analysis.industry == "Healthcare" and not selection_has("compliance", "hipaa"):
        suggestions.append(ServiceSuggestion(
            service_name="HIPAA Compliance Assessment",
            reason="Required for healthcare data protection",
            priority="High",
            category="Compliance",
        ))

    if analysis.industry == "Financial Services" and not selection_has("audit", "sox"):
        suggestions.append(ServiceSuggestion(
            service_name="Financial Audit & Compliance",
            reason="Required for financial regulatory compliance",
            priority="High",
            category="Compliance",
        ))

    return suggestions[:MAX_SUGGESTIONS]


def analyze_scope_gaps(text: str, selected: Sequence[Any]) -> ScopeGuidance:
    """Scope guidance for a description and the current selection."""
    analysis = analyze_project(text)
    missing = identify_missing_services(text, selected, analysis)

    completeness = analysis.scope_review.overall_score
    if selected:
        completeness += 20
    if not any(s.priority == "High" for s in missing):
        completeness += 10

    return ScopeGuidance(
        current_completeness=min(completeness, 100),
        missing_elements=list(analysis.scope_review.missing_elements),
        clarification_needed=list(analysis.scope_review.scope_gaps),
        suggested_questions=list(analysis.suggested_questions),
        recommended_services=missing,
    )


def _initial_message(analysis: ProjectAnalysis, guidance: ScopeGuidance) -> str:
    message = "I'm here to help you scope your IT project thoroughly. "
    message += (
        f"Based on your initial description, I can see this is a "
        f"**{analysis.complexity.lower()} complexity** project "
        f"in the **{analysis.industry}** sector with an estimated timeline of "
        f"**{analysis.estimated_timeline}**.\n\n"
    )
    if guidance.current_completeness < 60:
        message += (
            "To provide you with the most accurate service recommendations, I'd like to "
            "understand your requirements better. "
            f"Your current scope definition is about {guidance.current_completeness}% complete.\n\n"
        )
    if analysis.key_requirements:
        message += f"I've identified these key requirements:\n{_bullets(analysis.key_requirements)}\n\n"
    message += "Let me ask you some questions to ensure we don't miss any important services for your project."
    return message


def _selection_message(guidance: ScopeGuidance) -> str:
    message = "Thank you for the additional details. "
    if guidance.current_completeness > 70:
        message += (
            f"Your project scope is now {guidance.current_completeness}% complete, which gives "
            f"me a good foundation to work with.\n\n"
        )
    else:
        message += (
            f"We're making progress on defining your scope ({guidance.current_completeness}% "
            f"complete), but there are still some areas we should clarify.\n\n"
        )
    if guidance.missing_elements:
        message += f"I notice we haven't fully addressed:\n{_bullets(guidance.missing_elements)}\n\n"
    message += (
        "Based on your project type, I'll show you the most relevant services. Please review "
        "them carefully - I may suggest additional services that are commonly needed for "
        "projects like yours."
    )
    return message


def _refinement_message(analysis: ProjectAnalysis, guidance: ScopeGuidance, selected_count: int) -> str:
    plural = "s" if selected_count > 1 else ""
    message = f"Excellent! You've selected {selected_count} service{plural} for your project. "
    message += "Let me review your selections to ensure we haven't missed anything important.\n\n"

    high_priority = [s for s in guidance.recommended_services if s.priority == "High"]
    if high_priority:
        lines = "\n".join(f"• **{s.service_name}** - {s.reason}" for s in high_priority)
        message += f"⚠️ **Important**: I notice you may be missing some critical services:\n{lines}\n\n"

    risk = analysis.risk_assessment
    if risk.is_elevated:
        message += (
            f"🔍 **Risk Assessment**: This project has **{risk.overall_risk.lower()} risk**. "
            "I recommend reviewing the risk factors and considering additional services for mitigation.\n\n"
        )

    message += "Would you like me to review your service descriptions for completeness and alignment with best practices?"
    return message


def contextual_questions(text: str, analysis: ProjectAnalysis, guidance: ScopeGuidance) -> List[str]:
    """Up to three follow-up questions for the current conversation."""
    lower = (text or "").lower()
    questions = []

    if MISSING_TIMELINE in guidance.missing_elements:
        questions.append("What's your target timeline or deadline for this project?")
    if MISSING_BUDGET in guidance.missing_elements:
        questions.append("Do you have a specific budget range or cost constraints I should consider?")
    if MISSING_SCALE in guidance.missing_elements:
        questions.append("How many users, devices, or locations will this project impact?")

    if "migration" in lower and "backup" not in lower:
        questions.append("Do you have a backup and disaster recovery plan for the migration?")
    if "security" in lower and "compliance" not in lower:
        questions.append("Are there specific compliance requirements (HIPAA, SOX, PCI-DSS) you need to meet?")
    if "cloud" in lower and "training" not in lower:
        questions.append("Will your team need training on the new cloud systems?")
    if analysis.complexity == "High" and "phase" not in lower:
        questions.append("Would you prefer to implement this project in phases or all at once?")

    if analysis.industry == "Healthcare" and "hipaa" not in lower:
        questions.append("Do you need HIPAA compliance for patient data protection?")
    if analysis.industry == "Financial Services" and "audit" not in lower:
        questions.append("Are there audit trail requirements for financial transactions?")

    return questions[:MAX_CONTEXT_QUESTIONS]


def next_steps(analysis: ProjectAnalysis, guidance: ScopeGuidance, has_selection: bool) -> List[str]:
    steps = []
    if not has_selection:
        steps.append("Review and select the most relevant services for your project")
        steps.append("Consider the suggested additional services based on your project type")
    else:
        steps.append("Review the suggested missing services to ensure complete coverage")
        steps.append("Generate your Work Breakdown Structure (WBS) to see detailed project tasks")

    if guidance.current_completeness < 80:
        steps.append("Provide additional project details to improve scope accuracy")
    if analysis.risk_assessment.is_elevated:
        steps.append("Review risk assessment and consider mitigation strategies")

    steps.append("Proceed to generate pricing estimates and project timeline")
    return steps[:MAX_NEXT_STEPS]


def generate_interactive_response(
    text: str,
    selected: Sequence[Any],
    history: Optional[Sequence[str]] = None,
) -> AssistantResponse:
    """
    Stage-aware assistant response.

    Stage is the initial request (history of at most one message), no
    selection yet, or refinement of an existing selection.
    """
    history = list(history or [])
    selected = list(selected or [])
    analysis = analyze_project(text)
    guidance = analyze_scope_gaps(text, selected)

    if len(history) <= 1:
        message = _initial_message(analysis, guidance)
        confidence = 60
    elif not selected:
        message = _selection_message(guidance)
        confidence = 70
    else:
        message = _refinement_message(analysis, guidance, len(selected))
        confidence = 85

    return AssistantResponse(
        message=message,
        questions=contextual_questions(text, analysis, guidance),
        missing_services=identify_missing_services(text, selected, analysis),
        scope_gaps=list(guidance.missing_elements),
        next_steps=next_steps(analysis, guidance, bool(selected)),
        confidence=confidence,
    )
