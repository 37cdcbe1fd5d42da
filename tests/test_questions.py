import pytest

from vsa.questions import (
    ClarifyingQuestion,
    QuestionCategory,
    QuestionPriority,
    detect_project_type,
    format_questions_for_chat,
    generate_clarifying_questions,
    prioritize_questions,
)
from vsa.questions.generator import InputSignals, calculate_confidence, deduplicate_questions, is_vague


class TestVagueInput:
    def test_help_scenario(self):
        result = generate_clarifying_questions("help")
        assert result.needs_questioning is True
        assert result.confidence <= 40
        assert any(q.category == QuestionCategory.TECHNICAL for q in result.questions)

    def test_help_asks_three_high_priority_questions(self):
        result = generate_clarifying_questions("help")
        assert len(result.questions) == 3
        assert [q.category for q in result.questions] == [
            QuestionCategory.TECHNICAL,
            QuestionCategory.SCOPE,
            QuestionCategory.ENVIRONMENT,
        ]
        assert all(q.priority == QuestionPriority.HIGH for q in result.questions)

    def test_short_inputs_are_vague(self):
        text = "need better wifi"
        assert is_vague(text, InputSignals.detect(text))

    def test_earlier_questions_only_change_reasoning(self):
        first = generate_clarifying_questions("help")
        again = generate_clarifying_questions("help", {"has_asked_questions": True})
        assert again.needs_questioning is True
        assert again.reasoning.startswith("Thanks for the details so far.")
        assert [q.question for q in again.questions] == [q.question for q in first.questions]


class TestDetailedInput:
    def test_short_circuits_when_specific(self):
        result = generate_clarifying_questions("Install a new database server for 50 users at our office")
        assert result.needs_questioning is False
        assert result.questions == []
        assert result.confidence == 0.9

    def test_cloud_without_environment(self):
        result = generate_clarifying_questions("Migrate our email to azure for 200 staff next month")
        assert result.needs_questioning is True
        assert result.questions[0].category == QuestionCategory.ENVIRONMENT
        assert [q.priority for q in result.questions] == [
            QuestionPriority.HIGH,
            QuestionPriority.MEDIUM,
            QuestionPriority.MEDIUM,
        ]
        assert result.confidence == 95


@pytest.mark.parametrize("text,expected", [
    ("new server for the branch", "infrastructure"),
    ("protect our laptops", "security"),
    ("migrate our email to the cloud", "cloud"),
    ("replace legacy phones", "migration"),
    ("order some chairs", "simple"),
])
def test_detect_project_type(text, expected):
    assert detect_project_type(text) == expected


def test_confidence_base_and_cap():
    assert calculate_confidence(InputSignals.detect("hello")) == 30
    busy = InputSignals.detect(
        "urgent: migrate 40 legacy servers from our datacenter to azure and integrate "
        "them with existing office systems before the quarter deadline"
    )
    assert calculate_confidence(busy) == 95


def test_prioritize_is_stable():
    questions = [
        ClarifyingQuestion("a", QuestionCategory.TIMELINE, QuestionPriority.LOW),
        ClarifyingQuestion("b", QuestionCategory.SCOPE, QuestionPriority.HIGH),
        ClarifyingQuestion("c", QuestionCategory.BUDGET, QuestionPriority.LOW),
        ClarifyingQuestion("d", QuestionCategory.TECHNICAL, QuestionPriority.HIGH),
        ClarifyingQuestion("e", QuestionCategory.SCOPE, QuestionPriority.MEDIUM),
    ]
    assert [q.question for q in prioritize_questions(questions)] == ["b", "d", "e", "a", "c"]


def test_deduplicate_keeps_first():
    questions = [
        ClarifyingQuestion("same", QuestionCategory.SCOPE, QuestionPriority.LOW),
        ClarifyingQuestion("same", QuestionCategory.SCOPE, QuestionPriority.HIGH),
    ]
    assert deduplicate_questions(questions) == questions[:1]


def test_format_and_to_dict():
    result = generate_clarifying_questions("help")
    text = format_questions_for_chat(result.questions)
    assert text.splitlines()[0].startswith("1. ")

    data = result.to_dict()
    assert data["needsQuestioning"] is True
    assert data["questions"][0]["category"] == "technical"
    assert data["questions"][0]["priority"] == "high"
