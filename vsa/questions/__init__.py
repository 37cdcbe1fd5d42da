"""
Clarifying-question generation.
"""

from .generator import (
    ClarifyingQuestion,
    QuestionCategory,
    QuestionGenerator,
    QuestioningResult,
    QuestionPriority,
    detect_project_type,
    format_questions_for_chat,
    generate_clarifying_questions,
    prioritize_questions,
)

__all__ = [
    "ClarifyingQuestion",
    "QuestionCategory",
    "QuestionGenerator",
    "QuestioningResult",
    "QuestionPriority",
    "detect_project_type",
    "format_questions_for_chat",
    "generate_clarifying_questions",
    "prioritize_questions",
]
