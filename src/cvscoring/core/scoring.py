"""Weighted score aggregation with filter exclusion."""

from __future__ import annotations

from typing import Iterable, Mapping

from ..schemas import (
    BooleanQuestion,
    FilterQuestion,
    Judgment,
    NumericQuestion,
    Outcome,
    Question,
)


def aggregate(questions: Iterable[Question], judgments: Mapping[str, Judgment]) -> Outcome:
    """Combine per-question judgments into one :class:`Outcome`.

    Questions without a recorded judgment add nothing to either side of the
    fraction. Every filter is checked, but only the first failing one in
    question order is reported so the reason is reproducible regardless of
    the order judgments arrived in. Numeric values are used as given.
    """

    total_points = 0.0
    max_points = 0.0
    excluded_reason: str | None = None

    for question in questions:
        judgment = judgments.get(question.id)
        if judgment is None:
            continue

        if isinstance(question, FilterQuestion):
            answer = bool(judgment.value)
            if answer != question.expected_answer and excluded_reason is None:
                excluded_reason = _filter_failure_reason(question, answer)
            continue

        if isinstance(question, NumericQuestion):
            total_points += float(judgment.value) * question.weight
        elif isinstance(question, BooleanQuestion):
            total_points += question.points if bool(judgment.value) else 0
        else:  # pragma: no cover - exhaustive over the Question union
            raise TypeError(f"Unsupported question type: {type(question).__name__}")
        max_points += question.max_points

    percentage = total_points / max_points * 100 if max_points > 0 else 0.0

    return Outcome(
        total_points=total_points,
        max_points=max_points,
        percentage=percentage,
        excluded=excluded_reason is not None,
        excluded_reason=excluded_reason,
    )


def _filter_failure_reason(question: FilterQuestion, answer: bool) -> str:
    return (
        f'Failed filter: "{question.text}" - '
        f"Expected: {_yes_no(question.expected_answer)}, Got: {_yes_no(answer)}"
    )


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"
