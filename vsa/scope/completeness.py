"""
Scope Completeness Analyzer.

Grades a free-text project description on three qualitative axes:
- completeness (Complete / Partial / Incomplete)
- clarity (Clear / Moderate / Unclear)
- feasibility (High / Medium / Low)

and a 0-100 score built from four regex signals (specifics, quantifiers,
timeline, budget). The summary sentence is picked from fixed score bands,
not from the tiers, so two reviews with the same tiers can read differently.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

SPECIFICS_PATTERN = re.compile(
    r"\b(server|database|application|network|security|backup|migration|upgrade)\b", re.IGNORECASE
)
QUANTIFIERS_PATTERN = re.compile(r"\b(\d+|few|several|many|multiple)\b", re.IGNORECASE)
TIMELINE_PATTERN = re.compile(r"\b(urgent|asap|month|week|quarter|deadline)\b", re.IGNORECASE)
BUDGET_PATTERN = re.compile(r"\b(budget|cost|price|expensive|cheap)\b", re.IGNORECASE)

BASE_SCORE = 30

MISSING_TIMELINE = "Project timeline or deadline"
MISSING_BUDGET = "Budget constraints or expectations"
MISSING_SCALE = "Scale or quantity specifications"

# (minimum score, summary), checked top-down
SUMMARY_BANDS = [
    (80, "Excellent scope definition with clear requirements and high feasibility"),
    (60, "Good scope foundation with some areas needing clarification"),
    (40, "Moderate scope definition requiring additional details for accurate planning"),
]
DEFAULT_SUMMARY = "Scope requires significant clarification and additional requirements gathering"


@dataclass
class ScopeSignals:
    """Boolean signals detected in the input text."""
    has_specifics: bool = False
    has_quantifiers: bool = False
    has_timeline: bool = False
    has_budget: bool = False

    @classmethod
    def detect(cls, text: str) -> "ScopeSignals":
        text = text or ""
        return cls(
            has_specifics=bool(SPECIFICS_PATTERN.search(text)),
            has_quantifiers=bool(QUANTIFIERS_PATTERN.search(text)),
            has_timeline=bool(TIMELINE_PATTERN.search(text)),
            has_budget=bool(BUDGET_PATTERN.search(text)),
        )


@dataclass
class ScopeReview:
    """Result of a scope completeness review."""
    completeness: str = "Incomplete"
    clarity: str = "Unclear"
    feasibility: str = "Medium"
    missing_elements: List[str] = field(default_factory=list)
    scope_gaps: List[str] = field(default_factory=list)
    overall_score: int = BASE_SCORE
    review_summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completeness": self.completeness,
            "clarity": self.clarity,
            "feasibility": self.feasibility,
            "missingElements": list(self.missing_elements),
            "scopeGaps": list(self.scope_gaps),
            "overallScore": self.overall_score,
            "reviewSummary": self.review_summary,
        }


def summarize_score(score: int) -> str:
    """Summary sentence for a numeric scope score."""
    for minimum, summary in SUMMARY_BANDS:
        if score >= minimum:
            return summary
    return DEFAULT_SUMMARY


def analyze_scope_completeness(text: str, requirements: List[str]) -> ScopeReview:
    """
    Review how completely a project description defines its scope.

    Args:
        text: Free-text project description
        requirements: Key requirements already identified for the text

    Returns:
        ScopeReview with tiers, score and missing elements
    """
    text = text or ""
    signals = ScopeSignals.detect(text)
    review = ScopeReview()
    score = BASE_SCORE

    if signals.has_specifics and signals.has_quantifiers and signals.has_timeline:
        review.completeness = "Complete"
        score += 40
    elif signals.has_specifics and (signals.has_quantifiers or signals.has_timeline):
        review.completeness = "Partial"
        score += 25

    if len(text) > 100 and signals.has_specifics:
        review.clarity = "Clear"
        score += 20
    elif len(text) > 50:
        review.clarity = "Moderate"
        score += 10

    if requirements and signals.has_specifics:
        review.feasibility = "High"
        score += 10
    elif signals.has_specifics:
        review.feasibility = "Medium"
    else:
        review.feasibility = "Low"

    if not signals.has_timeline:
        review.missing_elements.append(MISSING_TIMELINE)
        review.scope_gaps.append("Timeline expectations are unclear")
    if not signals.has_budget:
        review.missing_elements.append(MISSING_BUDGET)
        review.scope_gaps.append("Budget parameters not specified")
    if not signals.has_quantifiers:
        review.missing_elements.append(MISSING_SCALE)
        review.scope_gaps.append("Project scale is ambiguous")

    review.overall_score = score
    review.review_summary = summarize_score(score)

    logger.debug(
        f"Scope review: {review.completeness}/{review.clarity}/{review.feasibility} score={score}"
    )
    return review
