"""Per-document evaluation: one oracle call per question, run concurrently."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import structlog

from ..schemas import Judgment, Question, fallback_judgment


class OracleError(RuntimeError):
    """Raised by an oracle when a single judgment could not be produced."""


class EvaluationError(RuntimeError):
    """Raised when a whole document could not be evaluated."""


class CandidateEvaluator:
    """Drive the oracle over every question for a single document.

    An :class:`OracleError` on one question is replaced with a fallback
    judgment and does not affect the other questions. Anything else is a
    hard failure, surfaced as :class:`EvaluationError` once every question
    has settled.
    """

    def __init__(self, oracle: Any, *, max_concurrency: int | None = None) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._oracle = oracle
        self._max_concurrency = max_concurrency
        self._logger = structlog.get_logger(__name__)

    async def evaluate(
        self,
        document_text: str,
        questions: Sequence[Question],
        guidance: str = "",
    ) -> dict[str, Judgment]:
        if not document_text or not document_text.strip():
            raise EvaluationError("Document has no extractable text")

        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
        results = await asyncio.gather(
            *(self._judge(document_text, question, guidance, semaphore) for question in questions),
            return_exceptions=True,
        )

        judgments: dict[str, Judgment] = {}
        for question, result in zip(questions, results):
            if isinstance(result, Exception):
                raise EvaluationError(
                    f"Failed to evaluate question {question.id!r}: {result}"
                ) from result
            if isinstance(result, BaseException):
                raise result
            judgments[question.id] = result
        return judgments

    async def _judge(
        self,
        document_text: str,
        question: Question,
        guidance: str,
        semaphore: asyncio.Semaphore | None,
    ) -> Judgment:
        try:
            if semaphore is None:
                judgment = await self._oracle.judge(document_text, question, guidance)
            else:
                async with semaphore:
                    judgment = await self._oracle.judge(document_text, question, guidance)
        except OracleError as exc:
            self._logger.warning("oracle.fallback", question_id=question.id, error=str(exc))
            return fallback_judgment(question)

        if judgment.kind != question.kind:
            self._logger.warning(
                "oracle.fallback",
                question_id=question.id,
                error=f"expected {question.kind} judgment, got {judgment.kind}",
            )
            return fallback_judgment(question)
        return judgment
