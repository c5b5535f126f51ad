"""Delimited table export of completed candidates."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from ..schemas import Candidate, CandidateStatus, Question

DEFAULT_DELIMITER = ","
EXPORT_FILENAME = "cv_analysis_results.csv"

_BASE_HEADER = ("Candidate Name", "Total Score", "Percentage", "Excluded")


def export_table(
    candidates: Iterable[Candidate],
    questions: Sequence[Question],
    delimiter: str = DEFAULT_DELIMITER,
) -> str:
    """Serialize completed candidates, one row each, after a header row.

    Fields containing the delimiter or a line break have those characters
    replaced by spaces; no quoting is applied.
    """
    header = [*_BASE_HEADER, *(question.text for question in questions)]
    lines = [_join(header, delimiter)]

    for candidate in candidates:
        if candidate.status is not CandidateStatus.COMPLETED:
            continue
        outcome = candidate.outcome
        row = [
            candidate.name,
            f"{_format_number(outcome.total_points)}/{_format_number(outcome.max_points)}",
            _format_percentage(outcome.percentage),
            "Yes" if outcome.excluded else "No",
        ]
        row.extend(_answer_cell(candidate, question) for question in questions)
        lines.append(_join(row, delimiter))

    return "\n".join(lines) + "\n"


def export_bytes(
    candidates: Iterable[Candidate],
    questions: Sequence[Question],
    delimiter: str = DEFAULT_DELIMITER,
) -> bytes:
    return export_table(candidates, questions, delimiter).encode("utf-8")


def _answer_cell(candidate: Candidate, question: Question) -> str:
    judgment = candidate.judgments.get(question.id)
    if judgment is None:
        return "N/A"
    if question.kind == "numeric":
        return f"{_format_number(float(judgment.value))}/10"
    return "Yes" if judgment.value else "No"


def _join(fields: Iterable[str], delimiter: str) -> str:
    return delimiter.join(_sanitize(field, delimiter) for field in fields)


def _sanitize(value: str, delimiter: str) -> str:
    return value.replace(delimiter, " ").replace("\r", " ").replace("\n", " ")


def _format_number(value: float) -> str:
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def _format_percentage(value: float) -> str:
    # Overflowing weighted sums give inf or nan, which have no rounded form.
    if not math.isfinite(value):
        return "N/A"
    return f"{int(math.floor(value + 0.5))}%"
