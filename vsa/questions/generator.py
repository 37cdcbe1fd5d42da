"""
Clarifying Question Generator.

Decides whether a project description is detailed enough to match services
against, and when it is not, produces up to three follow-up questions.

Flow:
1. Detect signals (technology, scale, environment, timeline, budget, ...)
2. Vagueness / needs-more-info policy; short-circuit when detailed enough
3. Decision tree of questions by gap, project type and industry
4. Deduplicate, stable sort high > medium > low, cap at 3
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from vsa.text import word_count

logger = logging.getLogger(__name__)

MAX_QUESTIONS = 3
MAX_CONFIDENCE = 95
SHORT_CIRCUIT_CONFIDENCE = 0.9


def _pattern(words: str) -> re.Pattern:
    return re.compile(rf"\b({words})\b", re.IGNORECASE)


SPECIFIC_TECHNOLOGY = _pattern(
    r"server|database|firewall|router|switch|cloud|aws|azure|office 365|active directory|exchange|sharepoint"
)
QUANTIFIERS = _pattern(r"\d+|few|several|many|multiple|small|medium|large|enterprise|startup")
TIMELINE = _pattern(r"urgent|asap|month|week|quarter|deadline|soon|quickly|immediate|phase")
BUDGET = _pattern(r"budget|cost|price|expensive|cheap|affordable|funding|investment")
ENVIRONMENT = _pattern(r"office|remote|hybrid|onsite|cloud|datacenter|branch|headquarters")
COMPLIANCE = _pattern(r"hipaa|sox|pci|gdpr|compliance|regulation|audit|security policy")
INTEGRATION = _pattern(r"integrate|connect|sync|migrate|existing|current|legacy")
SUPPORT = _pattern(r"support|training|maintenance|managed|help desk")
ACTION_WORDS = _pattern(r"install|setup|configure|implement|deploy|upgrade|migrate|replace")

GENERIC_HELP = re.compile(r"\b(help me|need help|can you help|assist me|help with)\b", re.IGNORECASE)
OPINION_REQUEST = re.compile(
    r"\b(what do you think|what would you recommend|what should i|any suggestions|your opinion|any ideas)\b",
    re.IGNORECASE,
)
VAGUE_NEED = re.compile(
    r"\b(need something|need some|looking for something|want something|improve|better|fix)\b",
    re.IGNORECASE,
)

# (project type, pattern), first hit wins
PROJECT_TYPE_PATTERNS = [
    ("infrastructure", _pattern(r"server|network|infrastructure|hardware|datacenter")),
    ("security", _pattern(r"security|firewall|antivirus|breach|protect|secure")),
    ("cloud", _pattern(r"cloud|aws|azure|saas|migrate|modernize")),
    ("migration", _pattern(r"migrate|upgrade|replace|legacy|modernize")),
]

TECHNOLOGY_PROMPTS = {
    "infrastructure": (
        "What specific infrastructure are you working with? "
        "(servers, network equipment, storage, or datacenter systems)"
    ),
    "security": (
        "Which systems or assets need protection? "
        "(network perimeter, endpoints, email, cloud workloads)"
    ),
    "cloud": (
        "Which cloud platforms or services are involved? "
        "(AWS, Azure, Google Cloud, Microsoft 365)"
    ),
    "general": (
        "What specific technology or system are you looking to work with? "
        "(servers, networking, cloud services, etc.)"
    ),
}


class QuestionCategory(str, Enum):
    SCOPE = "scope"
    TIMELINE = "timeline"
    BUDGET = "budget"
    TECHNICAL = "technical"
    ENVIRONMENT = "environment"
    COMPLIANCE = "compliance"


class QuestionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_ORDER = {
    QuestionPriority.HIGH: 0,
    QuestionPriority.MEDIUM: 1,
    QuestionPriority.LOW: 2,
}


@dataclass
class ClarifyingQuestion:
    """Single follow-up question."""
    question: str
    category: QuestionCategory
    priority: QuestionPriority

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "category": self.category.value,
            "priority": self.priority.value,
        }


@dataclass
class QuestioningResult:
    """Recommendation on whether to interrupt the user with questions."""
    needs_questioning: bool
    reasoning: str = ""
    questions: List[ClarifyingQuestion] = field(default_factory=list)
    confidence: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "needsQuestioning": self.needs_questioning,
            "reasoning": self.reasoning,
            "questions": [q.to_dict() for q in self.questions],
            "confidence": self.confidence,
        }


@dataclass
class InputSignals:
    """Regex signals detected in the input."""
    specific_technology: bool
    quantifiers: bool
    timeline: bool
    budget: bool
    environment: bool
    compliance: bool
    integration: bool
    support: bool
    action_words: bool
    word_count: int
    project_type: str

    @classmethod
    def detect(cls, text: str) -> "InputSignals":
        return cls(
            specific_technology=bool(SPECIFIC_TECHNOLOGY.search(text)),
            quantifiers=bool(QUANTIFIERS.search(text)),
            timeline=bool(TIMELINE.search(text)),
            budget=bool(BUDGET.search(text)),
            environment=bool(ENVIRONMENT.search(text)),
            compliance=bool(COMPLIANCE.search(text)),
            integration=bool(INTEGRATION.search(text)),
            support=bool(SUPPORT.search(text)),
            action_words=bool(ACTION_WORDS.search(text)),
            word_count=word_count(text),
            project_type=detect_project_type(text),
        )


def detect_project_type(text: str) -> str:
    """infrastructure / security / cloud / migration / simple."""
    for project_type, pattern in PROJECT_TYPE_PATTERNS:
        if pattern.search(text or ""):
            return project_type
    return "simple"


def is_vague(text: str, signals: InputSignals) -> bool:
    words = signals.word_count
    if words < 5:
        return True
    if not signals.specific_technology and not signals.action_words and words < 8:
        return True
    if GENERIC_HELP.search(text) and words < 10:
        return True
    if OPINION_REQUEST.search(text) and words < 10:
        return True
    if VAGUE_NEED.search(text) and words < 8 and not signals.specific_technology:
        return True
    return False


def needs_more_info(signals: InputSignals, vague: bool) -> bool:
    if vague:
        return True
    if not signals.specific_technology and not signals.quantifiers:
        return True
    if signals.project_type == "cloud" and not signals.environment:
        return True
    if signals.project_type == "security" and not signals.compliance:
        return True
    return False


def calculate_confidence(signals: InputSignals) -> int:
    """Weighted signal presence on a base of 30, capped at 95."""
    confidence = 30
    if signals.specific_technology:
        confidence += 25
    if signals.quantifiers:
        confidence += 20
    if signals.environment:
        confidence += 15
    if signals.timeline:
        confidence += 10
    if signals.action_words:
        confidence += 10
    if signals.project_type != "simple":
        confidence += 5
    if signals.word_count > 20:
        confidence += 10
    if signals.integration:
        confidence += 5
    return min(confidence, MAX_CONFIDENCE)


def prioritize_questions(questions: List[ClarifyingQuestion]) -> List[ClarifyingQuestion]:
    """Stable sort high > medium > low."""
    return sorted(questions, key=lambda q: PRIORITY_ORDER[q.priority])


def deduplicate_questions(questions: List[ClarifyingQuestion]) -> List[ClarifyingQuestion]:
    seen = set()
    unique = []
    for q in questions:
        if q.question not in seen:
            seen.add(q.question)
            unique.append(q)
    return unique


def format_questions_for_chat(questions: List[ClarifyingQuestion]) -> str:
    """Numbered list, one question per line."""
    return "\n".join(f"{index}. {q.question}" for index, q in enumerate(questions, start=1))


class QuestionGenerator:
    """
    Builds clarifying questions from a fixed decision tree.

    The generator is stateless; a single instance can be shared.
    """

    def generate(self, text: str, context: Optional[Dict[str, Any]] = None) -> QuestioningResult:
        """
        Decide whether to ask questions and which ones.

        Args:
            text: Free-text project description
            context: Optional conversation context; "has_asked_questions" is
                reflected in the reasoning only

        Returns:
            QuestioningResult
        """
        context = context or {}
        input_text = (text or "").lower()
        signals = InputSignals.detect(input_text)
        vague = is_vague(input_text, signals)
        asked_before = bool(context.get("has_asked_questions") or context.get("hasAskedQuestions"))

        if not needs_more_info(signals, vague):
            reasoning = "The project description is specific enough to recommend services."
            if asked_before:
                reasoning += " Your earlier answers filled in the missing details."
            logger.debug(f"No clarification needed ({signals.project_type}, {signals.word_count} words)")
            return QuestioningResult(
                needs_questioning=False,
                reasoning=reasoning,
                questions=[],
                confidence=SHORT_CIRCUIT_CONFIDENCE,
            )

        questions = self._build_questions(input_text, signals, vague)
        high_priority = sum(1 for q in questions if q.priority == QuestionPriority.HIGH)

        needs_questioning = (
            vague
            or high_priority >= 2
            or len(questions) >= 4
            or (signals.project_type != "simple" and signals.word_count < 15)
        )

        reasoning = ""
        if needs_questioning:
            if vague:
                reasoning = (
                    "I'd like to better understand your project to provide more targeted "
                    "recommendations. A few quick questions will help me suggest the most "
                    "relevant services:"
                )
            elif high_priority >= 2:
                reasoning = (
                    "To give you the most accurate service recommendations, I need to "
                    "understand a few key details about your project:"
                )
            else:
                reasoning = (
                    "I can see this is a comprehensive project. Let me ask a few questions "
                    "to ensure I recommend the right services:"
                )
            if asked_before:
                reasoning = "Thanks for the details so far. " + reasoning

        final_questions = prioritize_questions(deduplicate_questions(questions))[:MAX_QUESTIONS]

        logger.debug(
            f"Question generator: type={signals.project_type}, vague={vague}, "
            f"gaps={len(questions)}, high={high_priority}"
        )
        return QuestioningResult(
            needs_questioning=needs_questioning,
            reasoning=reasoning,
            questions=final_questions,
            confidence=calculate_confidence(signals),
        )

    def _build_questions(self, text: str, signals: InputSignals, vague: bool) -> List[ClarifyingQuestion]:
        questions: List[ClarifyingQuestion] = []

        def ask(question: str, category: QuestionCategory, priority: QuestionPriority) -> None:
            questions.append(ClarifyingQuestion(question, category, priority))

        # Core scope
        if vague or not signals.specific_technology:
            prompt = TECHNOLOGY_PROMPTS.get(signals.project_type, TECHNOLOGY_PROMPTS["general"])
            ask(prompt, QuestionCategory.TECHNICAL, QuestionPriority.HIGH)

        if not signals.quantifiers:
            ask(
                "What's the scale of this project? (number of users, devices, locations, or company size)",
                QuestionCategory.SCOPE, QuestionPriority.HIGH,
            )

        if not signals.environment:
            ask(
                "What type of environment is this for? "
                "(office building, remote workforce, multiple locations, cloud-only)",
                QuestionCategory.ENVIRONMENT, QuestionPriority.HIGH,
            )

        # Project-type follow-ups
        if signals.project_type == "infrastructure":
            if not signals.integration:
                ask(
                    "Do you have existing systems that need to integrate with this new infrastructure?",
                    QuestionCategory.TECHNICAL, QuestionPriority.HIGH,
                )
            if "redundancy" not in text and "backup" not in text:
                ask(
                    "Do you need high availability, redundancy, or disaster recovery capabilities?",
                    QuestionCategory.TECHNICAL, QuestionPriority.MEDIUM,
                )

        elif signals.project_type == "security":
            ask(
                "What specific security concerns are you trying to address? "
                "(data breaches, compliance, access control, network threats)",
                QuestionCategory.TECHNICAL, QuestionPriority.HIGH,
            )
            if not signals.compliance:
                ask(
                    "Are there specific compliance requirements you need to meet? (HIPAA, SOX, PCI-DSS, GDPR)",
                    QuestionCategory.COMPLIANCE, QuestionPriority.MEDIUM,
                )

        elif signals.project_type == "cloud":
            if "provider" not in text:
                ask(
                    "Do you have a preferred cloud provider? "
                    "(AWS, Azure, Google Cloud, or open to recommendations)",
                    QuestionCategory.TECHNICAL, QuestionPriority.MEDIUM,
                )
            if not signals.support:
                ask(
                    "Will your team need training and ongoing support for cloud management?",
                    QuestionCategory.SCOPE, QuestionPriority.MEDIUM,
                )

        elif signals.project_type == "migration":
            ask(
                "What systems are you migrating from, and what is the target platform?",
                QuestionCategory.TECHNICAL, QuestionPriority.HIGH,
            )
            ask(
                "Is there an acceptable downtime window for the cutover?",
                QuestionCategory.TIMELINE, QuestionPriority.MEDIUM,
            )

        # Timeline and budget
        if not signals.timeline:
            ask(
                "What's your target timeline? (urgent/ASAP, within 1-3 months, flexible, or phased approach)",
                QuestionCategory.TIMELINE, QuestionPriority.MEDIUM,
            )

        if not signals.budget and (signals.quantifiers or "enterprise" in text):
            ask(
                "Do you have budget constraints or a target investment range I should consider?",
                QuestionCategory.BUDGET, QuestionPriority.LOW,
            )

        # Industry
        if any(word in text for word in ("medical", "healthcare", "patient", "clinic")):
            if not signals.compliance:
                ask(
                    "Do you need HIPAA compliance for patient data protection and privacy?",
                    QuestionCategory.COMPLIANCE, QuestionPriority.HIGH,
                )
            ask(
                "Will this system handle electronic health records (EHR) or patient management systems?",
                QuestionCategory.TECHNICAL, QuestionPriority.MEDIUM,
            )

        if any(word in text for word in ("financial", "banking", "payment", "accounting")):
            if not signals.compliance:
                ask(
                    "Are there specific financial compliance requirements? "
                    "(SOX, PCI-DSS for payments, banking regulations)",
                    QuestionCategory.COMPLIANCE, QuestionPriority.HIGH,
                )

        if any(word in text for word in ("education", "school", "university", "student")):
            ask(
                "Is this for K-12, higher education, or corporate training? Each has different requirements.",
                QuestionCategory.SCOPE, QuestionPriority.MEDIUM,
            )

        return questions


def generate_clarifying_questions(text: str, context: Optional[Dict[str, Any]] = None) -> QuestioningResult:
    """Convenience wrapper around QuestionGenerator.generate."""
    return QuestionGenerator().generate(text, context)
