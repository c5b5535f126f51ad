"""Read-only filtering and sorting over candidate snapshots."""

from __future__ import annotations

from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from ..schemas import Candidate, CandidateStatus

StatusFilter = Literal["all", "completed", "pending", "error", "excluded"]
SortField = Literal["name", "score"]
SortDirection = Literal["asc", "desc"]

SCORE_BUCKET_SIZE = 20
SCORE_BUCKETS: tuple[int, ...] = (0, 20, 40, 60, 80)


class FilterOptions(BaseModel):
    """Criteria a candidate must meet to be listed.

    ``score_range`` is the lower bound of a 20 point percentage bucket.
    The ``pending`` status also matches candidates still processing. The
    ``excluded`` status only requires the name match.
    """

    search_term: str = ""
    score_range: int | None = None
    show_excluded: bool = True
    status_filter: StatusFilter = "all"

    model_config = ConfigDict(frozen=True)

    @field_validator("score_range")
    @classmethod
    def _known_bucket(cls, value: int | None) -> int | None:
        if value is not None and value not in SCORE_BUCKETS:
            raise ValueError(f"score_range must be one of {SCORE_BUCKETS}")
        return value


class SortOptions(BaseModel):
    field: SortField = "score"
    direction: SortDirection = "desc"

    model_config = ConfigDict(frozen=True)


def select(
    candidates: Iterable[Candidate],
    filters: FilterOptions | None = None,
    sort: SortOptions | None = None,
) -> list[Candidate]:
    """Return the candidates passing ``filters``, ordered by ``sort``.

    Ties keep their input order in both directions.
    """
    filters = filters or FilterOptions()
    sort = sort or SortOptions()

    selected = [candidate for candidate in candidates if _matches(candidate, filters)]
    if sort.field == "name":
        return sorted(selected, key=lambda c: c.name, reverse=sort.direction == "desc")
    return sorted(
        selected,
        key=lambda c: c.outcome.percentage,
        reverse=sort.direction == "desc",
    )


def status_counts(candidates: Iterable[Candidate]) -> dict[str, int]:
    """Count candidates per status bucket."""
    counts = {"all": 0, "completed": 0, "pending": 0, "error": 0, "excluded": 0}
    for candidate in candidates:
        counts["all"] += 1
        if candidate.status is CandidateStatus.COMPLETED:
            counts["completed"] += 1
        elif candidate.status is CandidateStatus.ERROR:
            counts["error"] += 1
        else:
            counts["pending"] += 1
        if candidate.outcome.excluded:
            counts["excluded"] += 1
    return counts


def _matches(candidate: Candidate, filters: FilterOptions) -> bool:
    if not filters.show_excluded and candidate.outcome.excluded:
        return False

    name_match = filters.search_term.lower() in candidate.name.lower()
    if filters.status_filter == "excluded":
        return candidate.outcome.excluded and name_match

    score_match = filters.score_range is None or (
        filters.score_range
        <= candidate.outcome.percentage
        < filters.score_range + SCORE_BUCKET_SIZE
    )
    return name_match and score_match and _status_matches(candidate.status, filters.status_filter)


def _status_matches(status: CandidateStatus, status_filter: StatusFilter) -> bool:
    if status_filter == "all":
        return True
    if status_filter == "completed":
        return status is CandidateStatus.COMPLETED
    if status_filter == "pending":
        return status in (CandidateStatus.PENDING, CandidateStatus.PROCESSING)
    if status_filter == "error":
        return status is CandidateStatus.ERROR
    return False
