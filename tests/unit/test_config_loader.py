"""Tests for the YAML configuration loader."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from gitlab_provisioner.config.loader import ConfigError, load_config
from gitlab_provisioner.resources import (
    FreezePeriodResource,
    PipelineScheduleVariableResource,
    ProtectedEnvironmentResource,
    UserResource,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from gitlab_provisioner.config.schema import Config

_FULL_YAML = """\
provider:
  url: https://gitlab.example.com
  user_delete:
    ignore_statuses: [404, 409]

state_path: custom-state.json

users:
  - name: alice
    username: alice
    password: correct-horse
    email: alice@example.com
    display_name: Alice Liddell
    can_create_group: true

protected_environments:
  - name: prod
    project: group/app
    environment: production
    deploy_access_levels:
      - access_level: maintainer
      - user_id: 12

pipeline_schedule_variables:
  - name: nightly_target
    project: "42"
    pipeline_schedule_id: 7
    key: TARGET
    value: staging

freeze_periods:
  - name: holidays
    project: group/app
    freeze_start: "0 0 24 12 *"
    freeze_end: "0 0 2 1 *"
    cron_timezone: Europe/Berlin
"""


@pytest.fixture
def full_config(make_config: Callable[..., Config]) -> Config:
    return make_config(_FULL_YAML)


class TestLoadConfigFull:
    def test_full_yaml_parses(self, full_config: Config, tmp_path: Path) -> None:
        assert full_config.provider.url == "https://gitlab.example.com"
        assert full_config.state_path == tmp_path / "custom-state.json"
        assert len(full_config.resources) == 4

    def test_resource_types(self, full_config: Config) -> None:
        types = [type(r) for r in full_config.resources]
        assert types == [
            UserResource,
            ProtectedEnvironmentResource,
            PipelineScheduleVariableResource,
            FreezePeriodResource,
        ]

    def test_user_fields(self, full_config: Config) -> None:
        user = full_config.users[0]
        assert user.address == "gitlab_user.alice"
        assert user.display_name == "Alice Liddell"
        assert user.can_create_group is True
        assert user.is_admin is False

    def test_access_levels_parsed(self, full_config: Config) -> None:
        env = full_config.protected_environments[0]
        assert env.deploy_access_levels[0].access_level == "maintainer"
        assert env.deploy_access_levels[1].user_id == 12

    def test_user_delete_settings(self, full_config: Config) -> None:
        policy = full_config.provider.user_delete.to_policy()
        assert policy.ignore_statuses == frozenset({404, 409})
        assert policy.ignore_all is False

    def test_resource_by_address(self, full_config: Config) -> None:
        found = full_config.resource("gitlab_project_freeze_period.holidays")
        assert isinstance(found, FreezePeriodResource)
        assert found.cron_timezone == "Europe/Berlin"
        assert full_config.resource("gitlab_user.bob") is None

    def test_absolute_state_path_kept(
        self, make_config: Callable[..., Config], tmp_path: Path
    ) -> None:
        target = tmp_path / "elsewhere" / "state.json"
        config = make_config(f"state_path: {target}\n")
        assert config.state_path == target


class TestConfigErrors:
    def test_unknown_resource_field_rejected(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="color"):
            make_config(
                "freeze_periods:\n"
                "  - name: f\n    project: '1'\n    freeze_start: a\n    freeze_end: b\n"
                "    color: red\n"
            )

    def test_unknown_top_level_key_rejected(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="groups"):
            make_config("groups: []\n")

    def test_unknown_provider_key_rejected(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="provider: unknown keys colour"):
            make_config("provider:\n  colour: blue\n")

    def test_provider_must_be_a_mapping(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="provider: expected a mapping"):
            make_config("provider: [a, b]\n")

    def test_unknown_user_delete_field_rejected(
        self, make_config: Callable[..., Config]
    ) -> None:
        with pytest.raises(ConfigError, match="ignore_everything"):
            make_config("provider:\n  user_delete:\n    ignore_everything: true\n")

    def test_provider_block_is_optional(self, make_config: Callable[..., Config]) -> None:
        config = make_config("users: []\n")
        assert config.provider.url is None
        assert config.provider.ssl_verify is True

    def test_empty_sections(self, make_config: Callable[..., Config]) -> None:
        config = make_config("provider:\nusers:\nfreeze_periods:\n")
        assert config.resources == []

    def test_default_state_path(self, make_config: Callable[..., Config], tmp_path: Path) -> None:
        config = make_config("provider: {}\n")
        assert config.state_path == tmp_path / ".gitlab-state.json"

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yaml"
        f.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(f)

    def test_empty_file(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yaml"
        f.write_text("")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(f)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Failed to read"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yaml"
        f.write_text("provider: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to read"):
            load_config(f)


class TestUniqueness:
    def test_duplicate_address(self, make_config: Callable[..., Config]) -> None:
        yaml_str = (
            "freeze_periods:\n"
            "  - {name: f, project: '1', freeze_start: a, freeze_end: b}\n"
            "  - {name: f, project: '2', freeze_start: a, freeze_end: b}\n"
        )
        with pytest.raises(
            ConfigError, match="unique per type: gitlab_project_freeze_period.f"
        ):
            make_config(yaml_str)

    def test_same_name_across_types_allowed(self, make_config: Callable[..., Config]) -> None:
        config = make_config(
            "pipeline_schedule_variables:\n"
            "  - {name: a, project: '42', pipeline_schedule_id: 7, key: K, value: x}\n"
            "freeze_periods:\n"
            "  - {name: a, project: '1', freeze_start: x, freeze_end: y}\n"
        )
        assert len(config.resources) == 2


class TestProviderResolution:
    def test_env_var_fills_missing_url(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITLAB_URL", "https://from-env")
        config = make_config("provider: {}\n")
        assert config.provider.url == "https://from-env"

    def test_yaml_beats_env(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITLAB_URL", "https://from-env")
        config = make_config("provider:\n  url: https://from-yaml\n")
        assert config.provider.url == "https://from-yaml"

    def test_null_in_yaml_falls_back_to_env(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITLAB_URL", "https://from-env")
        config = make_config("provider:\n  url:\n")
        assert config.provider.url == "https://from-env"

    def test_env_beats_dotenv(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITLAB_TOKEN", "env-token")
        config = make_config("provider: {}\n", dotenv="GITLAB_TOKEN=dotenv-token\n")
        assert config.provider.token == "env-token"

    def test_dotenv_fallback(self, make_config: Callable[..., Config]) -> None:
        config = make_config(
            "provider: {}\n",
            dotenv="GITLAB_URL=https://from-dotenv\nGITLAB_TOKEN=glpat-dotenv\n",
        )
        assert config.provider.url == "https://from-dotenv"
        assert config.provider.token == "glpat-dotenv"

    def test_ssl_verify_from_env(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITLAB_SSL_VERIFY", "false")
        config = make_config("provider: {}\n")
        assert config.provider.ssl_verify is False

    def test_invalid_ssl_verify(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITLAB_SSL_VERIFY", "sometimes")
        with pytest.raises(ConfigError, match="ssl_verify"):
            make_config("provider: {}\n")

    def test_user_delete_passes_through(self, make_config: Callable[..., Config]) -> None:
        config = make_config("provider:\n  user_delete:\n    ignore_all: true\n")
        assert config.provider.user_delete.ignore_all is True
