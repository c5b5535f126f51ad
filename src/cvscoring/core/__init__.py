"""Core screening engine components."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..schemas import Judgment, Question

# NOTE: keep imports explicit for export clarity.
from .evaluator import CandidateEvaluator, EvaluationError, OracleError
from .export import export_bytes, export_table
from .orchestrator import BatchInProgressError, BatchOrchestrator, BatchProgress
from .scoring import aggregate
from .view import FilterOptions, SortOptions, select, status_counts


@runtime_checkable
class Oracle(Protocol):
    """Contract for the external judge of one (document, question) pair."""

    async def judge(self, document_text: str, question: Question, guidance: str = "") -> Judgment:
        """Return a judgment of the question's kind or raise ``OracleError``."""


__all__ = [
    "Oracle",
    "OracleError",
    "EvaluationError",
    "CandidateEvaluator",
    "BatchOrchestrator",
    "BatchProgress",
    "BatchInProgressError",
    "aggregate",
    "FilterOptions",
    "SortOptions",
    "select",
    "status_counts",
    "export_table",
    "export_bytes",
]
