"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import pytest

from gitlab_provisioner.config import load
from gitlab_provisioner.core import GitLabProvider
from gitlab_provisioner.engine.handlers import EngineContext

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from gitlab_provisioner.config.schema import Config

_GITLAB_ENV_VARS = ("GITLAB_URL", "GITLAB_TOKEN", "GITLAB_SSL_VERIFY", "GITLAB_PROVISIONER_LOG")


@pytest.fixture(autouse=True)
def _clean_gitlab_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove GITLAB_* env vars so unit tests don't leak host config."""
    for var in _GITLAB_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make


@pytest.fixture
def mock_client() -> MagicMock:
    """Stand-in for ``gitlab.Gitlab``."""
    return MagicMock()


@pytest.fixture
def ctx(mock_client: MagicMock) -> EngineContext:
    return EngineContext(provider=GitLabProvider.from_client(mock_client))


@pytest.fixture
def list_response() -> Callable[..., MagicMock]:
    """Factory for ``requests.Response`` look-alikes returned by list endpoints."""

    def _make(items: list[dict[str, Any]], *, total_pages: int | None = 1) -> MagicMock:
        response = MagicMock()
        response.json.return_value = items
        response.headers = {} if total_pages is None else {"X-Total-Pages": str(total_pages)}
        return response

    return _make
