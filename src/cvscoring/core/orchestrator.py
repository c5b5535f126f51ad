"""Batch orchestration over a candidate set."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Sequence

import pendulum
import structlog

from ..schemas import Candidate, CandidateStatus, Document, Question
from .evaluator import CandidateEvaluator, EvaluationError
from .scoring import aggregate

ProgressCallback = Callable[[int, int], None]
UpdateCallback = Callable[[Candidate], None]

CANCELLED_MESSAGE = "Evaluation cancelled"


class BatchInProgressError(RuntimeError):
    """Raised when the candidate set is touched while a batch is running."""


@dataclass(slots=True)
class BatchProgress:
    """Progress counters for the current or last batch."""

    processed: int = 0
    total: int = 0
    is_processing: bool = False
    cancelled: bool = False
    started_at: pendulum.DateTime | None = None
    finished_at: pendulum.DateTime | None = None


class BatchOrchestrator:
    """Owns the candidate set and evaluates it one candidate at a time.

    Candidates are processed strictly in input order and never concurrently,
    so the oracle sees at most one document's worth of questions in flight.
    Observers only receive deep copies of candidates, published when a
    candidate starts and when it reaches a terminal state.
    """

    def __init__(self, evaluator: CandidateEvaluator) -> None:
        self._evaluator = evaluator
        self._candidates: list[Candidate] = []
        self._progress = BatchProgress()
        self._cancel_requested = False
        self._logger = structlog.get_logger(__name__)

    @property
    def candidates(self) -> tuple[Candidate, ...]:
        """Snapshot of the candidate set."""
        return tuple(candidate.model_copy(deep=True) for candidate in self._candidates)

    @property
    def progress(self) -> BatchProgress:
        return replace(self._progress)

    @property
    def is_processing(self) -> bool:
        return self._progress.is_processing

    def load(self, documents: Iterable[Document]) -> tuple[Candidate, ...]:
        """Start a new batch: replace every candidate with a fresh pending one."""
        self._ensure_idle()
        self._candidates = [Candidate.from_document(document) for document in documents]
        self._progress = BatchProgress(total=len(self._candidates))
        self._cancel_requested = False
        self._logger.info("batch.loaded", candidate_count=len(self._candidates))
        return self.candidates

    def cancel(self) -> None:
        """Stop before the next candidate. In-flight oracle calls still complete."""
        if self._progress.is_processing:
            self._cancel_requested = True
            self._logger.info("batch.cancel_requested")

    async def run_batch(
        self,
        questions: Sequence[Question],
        guidance: str = "",
        on_progress: ProgressCallback | None = None,
        on_update: UpdateCallback | None = None,
    ) -> BatchProgress:
        """Evaluate every pending candidate against ``questions``.

        ``on_progress(processed, total)`` is called after each candidate
        finishes. Candidates already in a terminal state are left untouched.
        Exceptions raised by either callback are logged and do not stop the
        batch.
        """
        self._ensure_idle()

        pending = [c for c in self._candidates if c.status is CandidateStatus.PENDING]
        if not pending or not questions:
            self._logger.info(
                "batch.skipped",
                candidate_count=len(pending),
                question_count=len(questions),
            )
            return self.progress

        self._cancel_requested = False
        self._progress = BatchProgress(
            total=len(pending),
            is_processing=True,
            started_at=pendulum.now(),
        )
        self._logger.info(
            "batch.started",
            candidate_count=len(pending),
            question_count=len(questions),
        )

        try:
            for candidate in pending:
                if self._cancel_requested:
                    self._progress.cancelled = True
                    self._logger.info(
                        "batch.cancelled",
                        processed=self._progress.processed,
                        total=self._progress.total,
                    )
                    break

                await self._process(candidate, questions, guidance, on_update)

                self._progress.processed += 1
                self._logger.info(
                    "batch.progress",
                    processed=self._progress.processed,
                    total=self._progress.total,
                )
                self._notify(on_progress, self._progress.processed, self._progress.total)
        finally:
            self._progress.is_processing = False
            self._progress.finished_at = pendulum.now()
            self._cancel_requested = False

        self._logger.info(
            "batch.finished",
            processed=self._progress.processed,
            total=self._progress.total,
            cancelled=self._progress.cancelled,
        )
        return self.progress

    async def _process(
        self,
        candidate: Candidate,
        questions: Sequence[Question],
        guidance: str,
        on_update: UpdateCallback | None,
    ) -> None:
        candidate.status = CandidateStatus.PROCESSING
        self._publish(candidate, on_update)

        with structlog.contextvars.bound_contextvars(candidate_id=candidate.id):
            try:
                judgments = await self._evaluator.evaluate(candidate.text, questions, guidance)
            except EvaluationError as exc:
                candidate.status = CandidateStatus.ERROR
                candidate.error_message = str(exc)
                self._logger.warning("candidate.failed", name=candidate.name, error=str(exc))
            except asyncio.CancelledError:
                candidate.status = CandidateStatus.ERROR
                candidate.error_message = CANCELLED_MESSAGE
                self._logger.warning("candidate.cancelled", name=candidate.name)
                self._publish(candidate, on_update)
                raise
            else:
                candidate.judgments = judgments
                candidate.outcome = aggregate(questions, judgments)
                candidate.status = CandidateStatus.COMPLETED
                self._logger.info(
                    "candidate.completed",
                    name=candidate.name,
                    percentage=candidate.outcome.percentage,
                    excluded=candidate.outcome.excluded,
                )

        self._publish(candidate, on_update)

    def _publish(self, candidate: Candidate, on_update: UpdateCallback | None) -> None:
        if on_update is not None:
            self._notify(on_update, candidate.model_copy(deep=True))

    def _notify(self, callback: Callable[..., None] | None, *args: Any) -> None:
        # Observer failures must not leave a candidate stuck in Processing.
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            self._logger.warning(
                "batch.observer_failed",
                callback=getattr(callback, "__name__", repr(callback)),
                exc_info=True,
            )

    def _ensure_idle(self) -> None:
        if self._progress.is_processing:
            raise BatchInProgressError("A batch is already running on this candidate set")
