"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class OracleConfig(BaseModel):
    model: str | None = None
    api_key: str | None = None
    base_url: str | None = None
    timeout: float | None = Field(default=None, gt=0)
    max_retries: int | None = Field(default=None, ge=0)
    temperature: float | None = Field(default=None, ge=0, le=2)


class BatchConfig(BaseModel):
    max_concurrency: int | None = Field(default=None, ge=1)
    guidance: str | None = None


class ExportConfig(BaseModel):
    delimiter: str | None = Field(default=None, min_length=1, max_length=1)


class ExtractionConfig(BaseModel):
    exclude_patterns: list[str] | None = None


class AppConfig(BaseModel):
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("oracle", "batch", "export", "extraction"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    """Validate a parsed YAML document. ``None`` (empty file) means defaults."""
    return AppConfig.model_validate(raw if raw is not None else {})
