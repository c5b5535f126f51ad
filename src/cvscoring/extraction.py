"""Utilities for extracting plain text from CV files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Sequence

import pymupdf4llm

PDF_SUFFIXES: frozenset[str] = frozenset({".pdf"})
TEXT_SUFFIXES: frozenset[str] = frozenset({".txt", ".md", ".markdown"})
SUPPORTED_SUFFIXES: frozenset[str] = PDF_SUFFIXES | TEXT_SUFFIXES


class ExtractionError(ValueError):
    """Raised when a document cannot be turned into text."""


def extract_text(
    path: str | Path,
    *,
    exclude_patterns: Sequence[str] | None = None,
) -> str:
    """Return the text of a CV file, removing boilerplate lines.

    Parameters
    ----------
    path:
        PDF, plain text or markdown file.
    exclude_patterns:
        Optional substrings; any line containing one of them, optionally
        followed by a page counter such as ``1 / 3``, is dropped.
    """

    path = Path(path)
    if not path.is_file():
        raise ExtractionError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ExtractionError(f"Unsupported document type {suffix!r}: {path.name}")

    try:
        if suffix in PDF_SUFFIXES:
            text = pymupdf4llm.to_markdown(str(path))
        else:
            text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError, RuntimeError, ValueError) as exc:
        raise ExtractionError(f"Could not read {path.name}: {exc}") from exc

    if exclude_patterns:
        text = _strip_lines(text, _build_patterns(exclude_patterns))
    return text


def _strip_lines(text: str, patterns: list[re.Pattern[str]]) -> str:
    cleaned_lines: list[str] = []
    for line in text.splitlines():
        if line.strip() and any(pattern.search(line) for pattern in patterns):
            continue
        cleaned_lines.append(line)
    return "\n".join(cleaned_lines)


def _build_patterns(excludes: Iterable[str]) -> list[re.Pattern[str]]:
    patterns: list[re.Pattern[str]] = []
    for text in excludes:
        escaped = re.escape(text)
        # Page counter suffix like " 1 / 63".
        patterns.append(re.compile(rf"{escaped}(?:\s+\d+\s*/\s*\d+)?"))
    return patterns


__all__ = ["ExtractionError", "extract_text", "SUPPORTED_SUFFIXES"]
