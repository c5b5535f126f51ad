"""Dependency injection container for the screening system."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import BatchOrchestrator, CandidateEvaluator
from .llm import OpenAIOracle
from .pipeline import DocumentLoader, OutputWriter, QuestionLoader, ScreeningPipeline


class ScreeningContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    oracle = providers.Singleton(
        OpenAIOracle,
        model=config.oracle.model,
        api_key=config.oracle.api_key,
        base_url=config.oracle.base_url,
        timeout=config.oracle.timeout,
        max_retries=config.oracle.max_retries,
        temperature=config.oracle.temperature,
    )

    evaluator = providers.Singleton(
        CandidateEvaluator,
        oracle=oracle,
        max_concurrency=config.batch.max_concurrency,
    )

    orchestrator = providers.Factory(BatchOrchestrator, evaluator=evaluator)

    document_loader = providers.Singleton(
        DocumentLoader,
        exclude_patterns=config.extraction.exclude_patterns,
    )
    question_loader = providers.Singleton(QuestionLoader)
    writer = providers.Singleton(OutputWriter, delimiter=config.export.delimiter)

    pipeline = providers.Factory(
        ScreeningPipeline,
        orchestrator=orchestrator,
        document_loader=document_loader,
        question_loader=question_loader,
        writer=writer,
    )


def create_container(*, settings: dict | None = None) -> ScreeningContainer:
    """Instantiate container with optional overrides."""

    container = ScreeningContainer()

    if settings:
        container.config.override(settings)

    return container
