from __future__ import annotations

import pytest
from pydantic import ValidationError

from cvscoring.container import create_container
from cvscoring.llm import DEFAULT_MODEL
from cvscoring.schemas.config import AppConfig, load_config


def test_create_container_with_overrides():
    container = create_container(
        settings={
            "oracle": {"model": "gpt-4o", "timeout": 15.0, "max_retries": 5},
            "batch": {"max_concurrency": 3},
            "export": {"delimiter": ";"},
            "extraction": {"exclude_patterns": ["Confidential"]},
        }
    )

    oracle = container.oracle()
    evaluator = container.evaluator()
    writer = container.writer()
    loader = container.document_loader()

    assert oracle._model == "gpt-4o"
    assert oracle._timeout == 15.0
    assert oracle._max_retries == 5
    assert evaluator._max_concurrency == 3
    assert evaluator._oracle is oracle
    assert writer._delimiter == ";"
    assert loader._exclude_patterns == ["Confidential"]


def test_create_container_defaults():
    container = create_container()

    assert container.oracle()._model == DEFAULT_MODEL
    assert container.evaluator()._max_concurrency is None
    assert container.writer()._delimiter == ","
    assert container.orchestrator() is not container.orchestrator()


def test_load_config_validation():
    app_config = load_config(
        {
            "oracle": {"model": "gpt-4o-mini"},
            "batch": {"max_concurrency": 4, "guidance": "Prefer backend experience"},
        }
    )

    assert isinstance(app_config, AppConfig)
    settings = app_config.to_settings()
    assert settings["oracle"] == {"model": "gpt-4o-mini"}
    assert settings["batch"]["max_concurrency"] == 4
    assert "export" not in settings


def test_load_config_accepts_empty_document():
    assert load_config(None).to_settings() == {}


def test_load_config_rejects_invalid_values():
    with pytest.raises(ValidationError):
        load_config({"batch": {"max_concurrency": 0}})
    with pytest.raises(ValidationError):
        load_config({"export": {"delimiter": ",,"}})
    with pytest.raises(ValidationError):
        load_config(["not", "a", "mapping"])
