"""Prompt construction, response parsing and the OpenAI-backed oracle."""

from __future__ import annotations

import json
import math
import re
import time
from typing import Any

import openai
import structlog
from pydantic import ValidationError

from .core import OracleError
from .schemas import BooleanJudgment, Judgment, NumericJudgment, Question

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_TEMPERATURE = 0.0

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")

_NUMERIC_SYSTEM_PROMPT = """\
You are an experienced HR assistant reviewing CVs.
You receive a CV and one question about the candidate.
Rate how well the CV satisfies the question on a scale from 0 to 10, where 0
means the criterion is not met at all and 10 means expectations are exceeded,
and give a short explanation.
{instructions}
Reply with a raw JSON object only, no markdown and no surrounding text:
{{"score": <number between 0 and 10>, "explanation": "<short explanation>"}}
"""

_BOOLEAN_SYSTEM_PROMPT = """\
You are an experienced HR assistant reviewing CVs.
You receive a CV and one yes/no question about the candidate.
Answer the question from the CV contents and give a short explanation.
{instructions}
Reply with a raw JSON object only, no markdown and no surrounding text:
{{"answer": <true for yes, false for no>, "explanation": "<short explanation>"}}
"""

_USER_PROMPT = """\
CV:
{document}

Question: {question}
{question_guidance}
{task}
"""


def build_prompts(document_text: str, question: Question, guidance: str = "") -> tuple[str, str]:
    """Return the ``(system, user)`` prompt pair for one question."""

    instructions = f"Additional instructions: {guidance}" if guidance else ""
    question_guidance = f"Examples/Guidance: {question.guidance}" if question.guidance else ""

    if question.kind == "numeric":
        system = _NUMERIC_SYSTEM_PROMPT.format(instructions=instructions)
        task = "Score the CV from 0 to 10 for this question and explain briefly."
    else:
        system = _BOOLEAN_SYSTEM_PROMPT.format(instructions=instructions)
        task = "Answer yes or no for this question and explain briefly."

    user = _USER_PROMPT.format(
        document=document_text,
        question=question.text,
        question_guidance=question_guidance,
        task=task,
    )
    return system, user


def parse_judgment(text: str, question: Question) -> Judgment:
    """Parse a raw model reply into a judgment of ``question``'s kind."""

    match = _FENCED_JSON.search(text)
    json_text = match.group(1).strip() if match else text.strip()

    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise OracleError(f"Oracle reply is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise OracleError("Oracle reply must be a JSON object")

    key = "score" if question.kind == "numeric" else "answer"
    if key not in payload:
        raise OracleError(f"Oracle reply is missing {key!r}")

    value = payload[key]
    explanation = payload.get("explanation")
    try:
        if question.kind == "numeric":
            if isinstance(value, bool):
                raise OracleError("Oracle score must be a number")
            judgment = NumericJudgment(value=value, explanation=explanation)
            if not math.isfinite(judgment.value):
                raise OracleError("Oracle score must be a finite number")
            return judgment
        if not isinstance(value, bool):
            raise OracleError("Oracle answer must be a boolean")
        return BooleanJudgment(value=value, explanation=explanation)
    except ValidationError as exc:
        raise OracleError(f"Oracle reply failed validation: {exc}") from exc


class OpenAIOracle:
    """Oracle asking an OpenAI chat model one question at a time."""

    def __init__(
        self,
        *,
        model: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        temperature: float | None = None,
        client: Any | None = None,
    ) -> None:
        self._model = model or DEFAULT_MODEL
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
        self._max_retries = max_retries if max_retries is not None else DEFAULT_MAX_RETRIES
        self._temperature = temperature if temperature is not None else DEFAULT_TEMPERATURE
        self._client = client
        self._logger = structlog.get_logger(__name__)

    def _get_client(self) -> Any:
        # Created lazily so that building the container never needs credentials.
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=self._max_retries,
            )
        return self._client

    async def judge(self, document_text: str, question: Question, guidance: str = "") -> Judgment:
        system, user = build_prompts(document_text, question, guidance)

        start = time.perf_counter()
        try:
            response = await self._get_client().chat.completions.create(
                model=self._model,
                temperature=self._temperature,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            )
        except openai.OpenAIError as exc:
            self._logger.warning(
                "oracle.request_failed",
                question_id=question.id,
                error=str(exc),
            )
            raise OracleError(f"Oracle request failed: {exc}") from exc

        self._logger.debug(
            "oracle.request",
            question_id=question.id,
            model=self._model,
            seconds=round(time.perf_counter() - start, 3),
        )

        if not response.choices:
            raise OracleError("Oracle returned no choices")
        content = response.choices[0].message.content or ""
        return parse_judgment(content, question)
