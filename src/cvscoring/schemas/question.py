from __future__ import annotations

from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    model_validator,
)

MAX_SCORE = 10
DEFAULT_BOOLEAN_POINTS = 10


def _new_question_id() -> str:
    return uuid4().hex


class _QuestionBase(BaseModel):
    """Fields shared by every question variant."""

    id: str = Field(default_factory=_new_question_id, min_length=1)
    text: str = Field(min_length=1)
    guidance: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class NumericQuestion(_QuestionBase):
    """Question answered with a 0-10 score, multiplied by its weight."""

    kind: Literal["numeric"] = "numeric"
    weight: int = Field(default=1, ge=1)

    @property
    def max_points(self) -> int:
        return MAX_SCORE * self.weight


class FilterQuestion(_QuestionBase):
    """Yes/no question that excludes candidates whose answer differs.

    Filters never contribute points; ``points`` and ``weight`` given in raw
    input are dropped.
    """

    kind: Literal["boolean"] = "boolean"
    is_filter: Literal[True] = True
    expected_answer: bool

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def max_points(self) -> int:
        return 0


class BooleanQuestion(_QuestionBase):
    """Yes/no question worth ``points`` for a yes and nothing for a no.

    A ``weight`` key in raw input is dropped, as for filters; any other
    unknown key is rejected.
    """

    kind: Literal["boolean"] = "boolean"
    is_filter: Literal[False] = False
    points: int = Field(default=DEFAULT_BOOLEAN_POINTS, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _drop_weight(cls, data: Any) -> Any:
        if isinstance(data, dict) and "weight" in data:
            data = {key: value for key, value in data.items() if key != "weight"}
        return data

    @property
    def max_points(self) -> int:
        return self.points


def _question_tag(value: Any) -> str | None:
    if isinstance(value, dict):
        kind = value.get("kind")
        is_filter = value.get("is_filter", False)
    else:
        kind = getattr(value, "kind", None)
        is_filter = getattr(value, "is_filter", False)
    if kind == "numeric":
        return "numeric"
    if kind == "boolean":
        return "filter" if is_filter else "boolean"
    return None


Question = Annotated[
    Union[
        Annotated[NumericQuestion, Tag("numeric")],
        Annotated[FilterQuestion, Tag("filter")],
        Annotated[BooleanQuestion, Tag("boolean")],
    ],
    Discriminator(_question_tag),
]


class QuestionSet(BaseModel):
    """Ordered collection of questions with unique ids."""

    questions: list[Question] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "QuestionSet":
        seen: set[str] = set()
        duplicates: list[str] = []
        for question in self.questions:
            if question.id in seen:
                duplicates.append(question.id)
            seen.add(question.id)
        if duplicates:
            raise ValueError(f"Duplicate question ids: {sorted(set(duplicates))}")
        return self


def effective_max_points(question: NumericQuestion | FilterQuestion | BooleanQuestion) -> int:
    """Return the denominator contribution of ``question``."""
    return question.max_points


__all__ = [
    "BooleanQuestion",
    "FilterQuestion",
    "NumericQuestion",
    "Question",
    "QuestionSet",
    "effective_max_points",
    "MAX_SCORE",
    "DEFAULT_BOOLEAN_POINTS",
]
