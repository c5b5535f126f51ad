"""Screening pipeline assembly and execution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import pendulum
import structlog
import yaml

from .core import (
    BatchOrchestrator,
    FilterOptions,
    SortOptions,
    export_bytes,
    select,
    status_counts,
)
from .extraction import SUPPORTED_SUFFIXES, ExtractionError, extract_text
from .schemas import Candidate, CandidateStatus, Document, Question, QuestionSet
from . import __version__


class DocumentLoadError(ValueError):
    """Raised when some documents could not be extracted."""

    def __init__(self, errors: list[str], partial: list[Document]):
        super().__init__("Document loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Document loading failed: {self.errors}"


class DocumentLoader:
    """Turn a CV file, or a directory of CV files, into documents."""

    def __init__(self, *, exclude_patterns: Sequence[str] | None = None) -> None:
        self._exclude_patterns = list(exclude_patterns) if exclude_patterns else None

    def load(self, path: Path) -> list[Document]:
        if path.is_dir():
            files = sorted(
                item
                for item in path.iterdir()
                if item.is_file() and item.suffix.lower() in SUPPORTED_SUFFIXES
            )
        else:
            files = [path]

        documents: list[Document] = []
        errors: list[str] = []
        for file in files:
            try:
                text = extract_text(file, exclude_patterns=self._exclude_patterns)
            except ExtractionError as exc:
                errors.append(f"{file.name}: {exc}")
                continue
            documents.append(Document(name=file.name, text=text))
        if errors:
            raise DocumentLoadError(errors, documents)
        return documents


class QuestionLoader:
    """Load question definitions from YAML or JSON."""

    def load(self, path: Path) -> list[Question]:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid questions file: {exc}") from exc
        if isinstance(data, list):
            data = {"questions": data}
        if not isinstance(data, dict):
            raise ValueError("Questions file must be a list or a mapping with 'questions'")
        return list(QuestionSet.model_validate(data).questions)


class OutputWriter:
    """Persist screening exports and results."""

    def __init__(self, *, delimiter: str | None = None) -> None:
        self._delimiter = delimiter or ","

    def write_export(
        self,
        path: Path,
        candidates: Sequence[Candidate],
        questions: Sequence[Question],
    ) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(export_bytes(candidates, questions, self._delimiter))

    def write_results(self, path: Path, payload: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )


class ScreeningPipeline:
    """End-to-end screening: load, evaluate, select, export."""

    def __init__(
        self,
        *,
        orchestrator: BatchOrchestrator,
        document_loader: DocumentLoader | None = None,
        question_loader: QuestionLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._documents = document_loader or DocumentLoader()
        self._questions = question_loader or QuestionLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    async def run(
        self,
        *,
        documents_path: Path,
        questions_path: Path,
        output_path: Path,
        results_path: Path | None = None,
        guidance: str = "",
        filters: FilterOptions | None = None,
        sort: SortOptions | None = None,
        audit_logger: "AuditLogger | None" = None,
    ) -> list[Candidate]:
        questions = self._questions.load(questions_path)
        documents, load_errors = self._load_documents(documents_path)

        self._orchestrator.load(documents)

        def on_update(candidate: Candidate) -> None:
            if audit_logger and candidate.status.is_terminal:
                audit_logger.append(_audit_record(candidate))

        progress = await self._orchestrator.run_batch(
            questions,
            guidance,
            on_update=on_update,
        )

        snapshot = self._orchestrator.candidates
        selected = select(snapshot, filters, sort)
        self._writer.write_export(output_path, selected, questions)

        if results_path:
            metadata = {
                "candidate_count": len(snapshot),
                "processed": progress.processed,
                "status_counts": status_counts(snapshot),
                "errors": load_errors,
                "started_at": progress.started_at,
                "finished_at": progress.finished_at,
                "timestamp": pendulum.now().to_iso8601_string(),
                "app_version": __version__,
            }
            self._writer.write_results(
                results_path,
                {
                    "metadata": metadata,
                    "questions": [question.model_dump(mode="json") for question in questions],
                    "results": [candidate.model_dump(mode="json") for candidate in selected],
                },
            )

        self._logger.info(
            "screening.finished",
            selected=len(selected),
            output=str(output_path),
            **status_counts(snapshot),
        )
        return selected

    async def analyze(
        self,
        *,
        document_path: Path,
        questions_path: Path,
        guidance: str = "",
    ) -> tuple[Candidate, list[Question]]:
        """Evaluate a single document and return it with the questions used."""
        questions = self._questions.load(questions_path)
        documents, errors = self._load_documents(document_path)
        if not documents:
            detail = "; ".join(errors) or "no supported files"
            raise ValueError(f"No readable document at {document_path} ({detail})")

        self._orchestrator.load(documents[:1])
        await self._orchestrator.run_batch(questions, guidance)
        return self._orchestrator.candidates[0], questions

    def _load_documents(self, path: Path) -> tuple[list[Document], list[str]]:
        try:
            return self._documents.load(path), []
        except DocumentLoadError as exc:
            self._logger.warning("documents.partial_load", errors=exc.errors)
            return exc.partial, exc.errors


def _audit_record(candidate: Candidate) -> dict[str, Any]:
    record: dict[str, Any] = {
        "candidate_id": candidate.id,
        "name": candidate.name,
        "status": candidate.status.value,
        "timestamp": pendulum.now().to_iso8601_string(),
    }
    if candidate.status is CandidateStatus.COMPLETED:
        record["outcome"] = candidate.outcome.model_dump(mode="json")
        record["judgments"] = {
            question_id: judgment.model_dump(mode="json")
            for question_id, judgment in candidate.judgments.items()
        }
    else:
        record["error"] = candidate.error_message
    return record


def _json_default(value):  # type: ignore[override]
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")
