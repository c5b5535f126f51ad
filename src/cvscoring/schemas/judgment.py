from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .question import BooleanQuestion, FilterQuestion, NumericQuestion

FALLBACK_EXPLANATION = "Error analyzing this question"


class NumericJudgment(BaseModel):
    """Oracle score for a numeric question. Values are stored unclamped."""

    kind: Literal["numeric"] = "numeric"
    value: float
    explanation: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class BooleanJudgment(BaseModel):
    """Oracle yes/no answer for a boolean question."""

    kind: Literal["boolean"] = "boolean"
    value: bool
    explanation: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


Judgment = Annotated[
    Union[NumericJudgment, BooleanJudgment],
    Field(discriminator="kind"),
]


def fallback_judgment(
    question: NumericQuestion | FilterQuestion | BooleanQuestion,
) -> NumericJudgment | BooleanJudgment:
    """Judgment substituted when the oracle could not answer ``question``."""
    if question.kind == "numeric":
        return NumericJudgment(value=0, explanation=FALLBACK_EXPLANATION)
    return BooleanJudgment(value=False, explanation=FALLBACK_EXPLANATION)


__all__ = [
    "BooleanJudgment",
    "FALLBACK_EXPLANATION",
    "Judgment",
    "NumericJudgment",
    "fallback_judgment",
]
