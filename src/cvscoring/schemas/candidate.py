from __future__ import annotations

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .judgment import Judgment


class CandidateStatus(str, Enum):
    """Lifecycle of a candidate within one batch."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (CandidateStatus.COMPLETED, CandidateStatus.ERROR)


class Document(BaseModel):
    """Extracted document admitted to a batch."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    text: str

    model_config = ConfigDict(frozen=True, extra="forbid")


class Outcome(BaseModel):
    """Aggregated score of one candidate.

    ``excluded`` is a tag only: ``total_points`` and ``percentage`` keep the
    computed score for excluded candidates.
    """

    total_points: float = 0.0
    max_points: float = 0.0
    percentage: float = 0.0
    excluded: bool = False
    excluded_reason: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _reason_matches_flag(self) -> "Outcome":
        if self.excluded and not self.excluded_reason:
            raise ValueError("excluded outcomes require an excluded_reason")
        if not self.excluded and self.excluded_reason is not None:
            raise ValueError("excluded_reason is only allowed on excluded outcomes")
        return self


class Candidate(BaseModel):
    """One document under evaluation, mutated only by the batch orchestrator."""

    id: str
    name: str
    text: str
    judgments: dict[str, Judgment] = Field(default_factory=dict)
    outcome: Outcome = Field(default_factory=Outcome)
    status: CandidateStatus = CandidateStatus.PENDING
    error_message: str | None = None

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_document(cls, document: Document) -> "Candidate":
        return cls(id=document.id, name=document.name, text=document.text)
