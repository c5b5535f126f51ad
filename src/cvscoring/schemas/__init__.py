"""Pydantic schema definitions for questions, judgments and candidates."""

from __future__ import annotations

from .candidate import Candidate, CandidateStatus, Document, Outcome
from .judgment import (
    FALLBACK_EXPLANATION,
    BooleanJudgment,
    Judgment,
    NumericJudgment,
    fallback_judgment,
)
from .question import (
    BooleanQuestion,
    FilterQuestion,
    NumericQuestion,
    Question,
    QuestionSet,
    effective_max_points,
)

__all__ = [
    "BooleanJudgment",
    "BooleanQuestion",
    "Candidate",
    "CandidateStatus",
    "Document",
    "FALLBACK_EXPLANATION",
    "FilterQuestion",
    "Judgment",
    "NumericJudgment",
    "NumericQuestion",
    "Outcome",
    "Question",
    "QuestionSet",
    "effective_max_points",
    "fallback_judgment",
]
