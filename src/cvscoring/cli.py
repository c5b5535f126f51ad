"""Typer CLI entrypoint for CV screening."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .core import FilterOptions, SortOptions
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas.config import AppConfig, load_config

app = typer.Typer(help="Score CVs against weighted questions and filter criteria.")


def _load_app_config(config: Optional[Path]) -> AppConfig:
    if not config:
        return AppConfig()
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    try:
        return load_config(loaded)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _settings(app_config: AppConfig, *, model: Optional[str], api_key: Optional[str]) -> dict[str, Any]:
    settings = app_config.to_settings()
    oracle_overrides = {key: value for key, value in (("model", model), ("api_key", api_key)) if value}
    if oracle_overrides:
        settings.setdefault("oracle", {}).update(oracle_overrides)
    return settings


@app.command()
def run(
    documents: Path = typer.Option(..., exists=True, readable=True, help="CV file or directory of CVs."),
    questions: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Questions YAML/JSON path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output CSV path.",
    ),
    results: Optional[Path] = typer.Option(None, dir_okay=False, help="Optional JSON results path."),
    guidance: Optional[str] = typer.Option(None, help="Additional instructions passed to the oracle."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    model: Optional[str] = typer.Option(None, help="Oracle model name."),
    api_key: Optional[str] = typer.Option(None, help="Oracle API key."),
    search: str = typer.Option("", help="Only export candidates whose name contains this text."),
    score_range: Optional[int] = typer.Option(None, help="Lower bound of a 20 point percentage bucket."),
    status: str = typer.Option("all", help="all, completed, pending, error or excluded."),
    hide_excluded: bool = typer.Option(False, "--hide-excluded", help="Drop candidates failing a filter."),
    sort_by: str = typer.Option("score", help="Sort field: name or score."),
    ascending: bool = typer.Option(False, "--ascending", help="Sort ascending instead of descending."),
) -> None:
    """Evaluate every CV and export the completed results."""
    app_config = _load_app_config(config)
    configure_logging(log_level)

    try:
        filters = FilterOptions(
            search_term=search,
            score_range=score_range,
            show_excluded=not hide_excluded,
            status_filter=status,
        )
        sort = SortOptions(field=sort_by, direction="asc" if ascending else "desc")
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    container = create_container(settings=_settings(app_config, model=model, api_key=api_key))
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    selected = asyncio.run(
        pipeline.run(
            documents_path=documents,
            questions_path=questions,
            output_path=output,
            results_path=results,
            guidance=guidance if guidance is not None else (app_config.batch.guidance or ""),
            filters=filters,
            sort=sort,
            audit_logger=audit_logger,
        )
    )
    typer.echo(f"Processed {len(selected)} candidates. Results saved to {output}.")


@app.command()
def analyze(
    document: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="CV file path."),
    questions: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Questions YAML/JSON path."),
    guidance: Optional[str] = typer.Option(None, help="Additional instructions passed to the oracle."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
    model: Optional[str] = typer.Option(None, help="Oracle model name."),
    api_key: Optional[str] = typer.Option(None, help="Oracle API key."),
) -> None:
    """Evaluate a single CV and print every answer."""
    app_config = _load_app_config(config)
    configure_logging(log_level)

    container = create_container(settings=_settings(app_config, model=model, api_key=api_key))
    pipeline = container.pipeline()

    try:
        candidate, used_questions = asyncio.run(
            pipeline.analyze(
                document_path=document,
                questions_path=questions,
                guidance=guidance if guidance is not None else (app_config.batch.guidance or ""),
            )
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="questions") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="document") from exc

    if candidate.error_message:
        typer.echo(f"{candidate.name}: error: {candidate.error_message}", err=True)
        raise typer.Exit(code=1)

    for question in used_questions:
        judgment = candidate.judgments.get(question.id)
        if judgment is None:
            answer = "N/A"
        elif question.kind == "numeric":
            answer = f"{judgment.value:g}/10"
        else:
            answer = "Yes" if judgment.value else "No"
        typer.echo(f"- {question.text}: {answer}")
        if judgment is not None and judgment.explanation:
            typer.echo(f"    {judgment.explanation}")

    outcome = candidate.outcome
    typer.echo(
        f"Total: {outcome.total_points:g}/{outcome.max_points:g} ({round(outcome.percentage)}%)"
    )
    if outcome.excluded:
        typer.echo(f"Excluded: {outcome.excluded_reason}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
