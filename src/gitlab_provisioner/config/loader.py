"""Reads ``gitlab-provisioner.yaml`` into a validated :class:`Config`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from gitlab_provisioner.config.schema import Config, ProviderConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The configuration file cannot be read or does not validate."""


def _provider_settings(raw: Any, config_dir: Path) -> ProviderConfig:
    """Resolve the ``provider`` block.

    pydantic-settings ranks sources as init arguments (the YAML values), then
    ``GITLAB_*`` environment variables, then the ``.env`` file beside the
    configuration.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("provider: expected a mapping")
    unknown = sorted(set(raw) - set(ProviderConfig.model_fields))
    if unknown:
        raise ConfigError(f"provider: unknown keys {', '.join(unknown)}")

    env_file = config_dir / ".env"
    return ProviderConfig(
        _env_file=env_file if env_file.is_file() else None,
        _env_file_encoding="utf-8-sig",
        **{k: v for k, v in raw.items() if v is not None},
    )


def load_config(path: Path | str) -> Config:
    """Parse and validate the configuration at *path*.

    A relative ``state_path`` is taken relative to the configuration file.

    Raises:
        ConfigError: unreadable YAML, wrong top-level shape or invalid values.
    """
    path = Path(path)
    try:
        raw = YAML(typ="safe").load(path)
    except (OSError, YAMLError) as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    try:
        raw["provider"] = _provider_settings(raw.get("provider"), path.parent)
        config = Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    if not config.state_path.is_absolute():
        config.state_path = path.parent / config.state_path
    logger.info("Loaded %s: %d resources", path, len(config.resources))
    return config
