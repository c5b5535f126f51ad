from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from cvscoring.core import FilterOptions, SortOptions, select, status_counts
from cvscoring.schemas import Candidate, CandidateStatus, Outcome


def build_candidate(name: str, percentage: float = 0.0, **kwargs: Any) -> Candidate:
    excluded = kwargs.pop("excluded", False)
    outcome = Outcome(
        total_points=percentage,
        max_points=100,
        percentage=percentage,
        excluded=excluded,
        excluded_reason="Failed filter" if excluded else None,
    )
    defaults: dict[str, Any] = {
        "id": name,
        "name": name,
        "text": "",
        "outcome": outcome,
        "status": CandidateStatus.COMPLETED,
    }
    defaults.update(kwargs)
    return Candidate(**defaults)


@pytest.fixture
def candidates() -> list[Candidate]:
    return [
        build_candidate("alice.pdf", 85),
        build_candidate("bob.pdf", 45, excluded=True),
        build_candidate("carol.pdf", 60),
        build_candidate("dave.pdf", status=CandidateStatus.PENDING),
        build_candidate("erin.pdf", status=CandidateStatus.PROCESSING),
        build_candidate("frank.pdf", status=CandidateStatus.ERROR, error_message="failed"),
    ]


def names(selected: list[Candidate]) -> list[str]:
    return [candidate.name for candidate in selected]


def test_default_selection_keeps_everything_sorted_by_score_desc(candidates):
    selected = select(candidates)

    assert names(selected) == [
        "alice.pdf",
        "carol.pdf",
        "bob.pdf",
        "dave.pdf",
        "erin.pdf",
        "frank.pdf",
    ]


def test_hide_excluded(candidates):
    selected = select(candidates, FilterOptions(show_excluded=False))

    assert "bob.pdf" not in names(selected)


def test_search_is_case_insensitive_substring(candidates):
    selected = select(candidates, FilterOptions(search_term="CAR"))

    assert names(selected) == ["carol.pdf"]


def test_score_range_is_half_open_bucket(candidates):
    candidates.append(build_candidate("gina.pdf", 80))
    candidates.append(build_candidate("hank.pdf", 100))

    selected = select(candidates, FilterOptions(score_range=80))

    assert names(selected) == ["alice.pdf", "gina.pdf"]


def test_status_buckets(candidates):
    completed = select(candidates, FilterOptions(status_filter="completed"))
    pending = select(candidates, FilterOptions(status_filter="pending"))
    errors = select(candidates, FilterOptions(status_filter="error"))

    assert set(names(completed)) == {"alice.pdf", "bob.pdf", "carol.pdf"}
    assert set(names(pending)) == {"dave.pdf", "erin.pdf"}
    assert names(errors) == ["frank.pdf"]


def test_excluded_bucket_ignores_score_range_but_not_name(candidates):
    selected = select(candidates, FilterOptions(status_filter="excluded", score_range=80))
    no_match = select(candidates, FilterOptions(status_filter="excluded", search_term="alice"))

    assert names(selected) == ["bob.pdf"]
    assert no_match == []


def test_sort_by_name_both_directions(candidates):
    ascending = select(candidates, sort=SortOptions(field="name", direction="asc"))
    descending = select(candidates, sort=SortOptions(field="name", direction="desc"))

    assert names(ascending) == sorted(names(candidates))
    assert names(descending) == sorted(names(candidates), reverse=True)


def test_ties_keep_input_order():
    tied = [build_candidate(name, 50) for name in ("z.pdf", "a.pdf", "m.pdf")]

    ascending = select(tied, sort=SortOptions(field="score", direction="asc"))
    descending = select(tied, sort=SortOptions(field="score", direction="desc"))

    assert names(ascending) == ["z.pdf", "a.pdf", "m.pdf"]
    assert names(descending) == ["z.pdf", "a.pdf", "m.pdf"]


def test_select_is_idempotent_and_does_not_mutate(candidates):
    before = [candidate.model_copy(deep=True) for candidate in candidates]
    filters = FilterOptions(search_term=".pdf", show_excluded=False)
    sort = SortOptions(field="score", direction="asc")

    first = select(candidates, filters, sort)
    second = select(candidates, filters, sort)

    assert first == second
    assert candidates == before


def test_unknown_score_bucket_is_rejected():
    with pytest.raises(ValidationError):
        FilterOptions(score_range=15)


def test_status_counts(candidates):
    assert status_counts(candidates) == {
        "all": 6,
        "completed": 3,
        "pending": 2,
        "error": 1,
        "excluded": 1,
    }
