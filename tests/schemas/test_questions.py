from __future__ import annotations

import pytest
from pydantic import ValidationError

from cvscoring.schemas import (
    BooleanJudgment,
    BooleanQuestion,
    FilterQuestion,
    NumericJudgment,
    NumericQuestion,
    QuestionSet,
    effective_max_points,
    fallback_judgment,
)


def test_numeric_question_defaults():
    question = NumericQuestion(text="Years of Python experience")

    assert question.kind == "numeric"
    assert question.weight == 1
    assert question.guidance is None
    assert question.id
    assert effective_max_points(question) == 10


def test_question_ids_are_unique_by_default():
    first = NumericQuestion(text="A")
    second = NumericQuestion(text="A")

    assert first.id != second.id


def test_effective_max_points_per_variant():
    assert effective_max_points(NumericQuestion(text="Q", weight=3)) == 30
    assert effective_max_points(BooleanQuestion(text="Q")) == 10
    assert effective_max_points(BooleanQuestion(text="Q", points=4)) == 4
    assert effective_max_points(FilterQuestion(text="Q", expected_answer=True)) == 0


def test_filter_question_requires_expected_answer():
    with pytest.raises(ValidationError):
        FilterQuestion(text="Has a work permit?")  # type: ignore[call-arg]


def test_boolean_question_rejects_negative_points():
    with pytest.raises(ValidationError):
        BooleanQuestion(text="Speaks German?", points=-1)


def test_numeric_question_rejects_zero_weight():
    with pytest.raises(ValidationError):
        NumericQuestion(text="Leadership", weight=0)


def test_questions_are_immutable():
    question = NumericQuestion(text="Leadership")

    with pytest.raises(ValidationError):
        question.weight = 5  # type: ignore[misc]


def test_question_set_dispatches_on_kind_and_filter_flag():
    question_set = QuestionSet.model_validate(
        {
            "questions": [
                {"id": "q1", "kind": "numeric", "text": "Python skills", "weight": 2},
                {"id": "q2", "kind": "boolean", "text": "Lives in EU?", "is_filter": True, "expected_answer": True},
                {"id": "q3", "kind": "boolean", "text": "Has a degree?", "points": 5},
            ]
        }
    )

    first, second, third = question_set.questions
    assert isinstance(first, NumericQuestion)
    assert first.weight == 2
    assert isinstance(second, FilterQuestion)
    assert second.expected_answer is True
    assert isinstance(third, BooleanQuestion)
    assert third.points == 5


def test_filter_question_ignores_points():
    question_set = QuestionSet.model_validate(
        {
            "questions": [
                {
                    "kind": "boolean",
                    "text": "Available to start this month?",
                    "is_filter": True,
                    "expected_answer": False,
                    "points": 7,
                }
            ]
        }
    )

    (question,) = question_set.questions
    assert isinstance(question, FilterQuestion)
    assert not hasattr(question, "points")
    assert effective_max_points(question) == 0


def test_boolean_questions_drop_weight_but_reject_other_keys():
    question_set = QuestionSet.model_validate(
        {
            "questions": [
                {"id": "b", "kind": "boolean", "text": "Degree?", "points": 5, "weight": 1},
                {
                    "id": "f",
                    "kind": "boolean",
                    "text": "EU?",
                    "is_filter": True,
                    "expected_answer": True,
                    "weight": 1,
                },
            ]
        }
    )

    scored, gate = question_set.questions
    assert isinstance(scored, BooleanQuestion) and scored.points == 5
    assert isinstance(gate, FilterQuestion)
    assert not hasattr(scored, "weight")
    with pytest.raises(ValidationError):
        BooleanQuestion.model_validate({"text": "Degree?", "pionts": 5})


def test_question_set_rejects_filter_without_expected_answer():
    with pytest.raises(ValidationError):
        QuestionSet.model_validate(
            {"questions": [{"kind": "boolean", "text": "Remote?", "is_filter": True}]}
        )


def test_question_set_rejects_unknown_kind():
    with pytest.raises(ValidationError):
        QuestionSet.model_validate({"questions": [{"kind": "essay", "text": "Tell us"}]})


def test_question_set_rejects_duplicate_ids():
    with pytest.raises(ValidationError) as exc:
        QuestionSet.model_validate(
            {
                "questions": [
                    {"id": "dup", "kind": "numeric", "text": "A"},
                    {"id": "dup", "kind": "boolean", "text": "B"},
                ]
            }
        )
    assert "Duplicate question ids" in str(exc.value)


def test_fallback_judgment_matches_question_kind():
    numeric = fallback_judgment(NumericQuestion(text="Q"))
    boolean = fallback_judgment(FilterQuestion(text="Q", expected_answer=True))

    assert isinstance(numeric, NumericJudgment)
    assert numeric.value == 0
    assert numeric.explanation == "Error analyzing this question"
    assert isinstance(boolean, BooleanJudgment)
    assert boolean.value is False
    assert boolean.explanation == "Error analyzing this question"
