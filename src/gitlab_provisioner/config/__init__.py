"""Python API: load a configuration and run the engine against it.

Example::

    from gitlab_provisioner import config

    cfg = config.load("gitlab-provisioner.yaml")
    plan = config.plan(cfg)
    if plan.pending():
        config.apply(plan, cfg)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import SecretStr

from gitlab_provisioner.config.loader import ConfigError, load_config
from gitlab_provisioner.config.registry import builtin_registry
from gitlab_provisioner.config.schema import Config, ProviderConfig, UserDeleteConfig
from gitlab_provisioner.core.provider import GitLabProvider, TokenAuth
from gitlab_provisioner.data.protected_branches import ProtectedBranches
from gitlab_provisioner.data.protected_branches import (
    read_protected_branches as _read_protected_branches,
)
from gitlab_provisioner.engine.engine import GitLabEngine

if TYPE_CHECKING:
    from pathlib import Path

    from gitlab_provisioner.core.state import ManagedObject
    from gitlab_provisioner.engine.engine import ProgressCallback
    from gitlab_provisioner.engine.types import ApplyResult, Change, Plan

__all__ = [
    "Config",
    "ConfigError",
    "ProviderConfig",
    "UserDeleteConfig",
    "apply",
    "engine_for",
    "import_resource",
    "load",
    "plan",
    "provider_for",
    "read_protected_branches",
    "refresh",
]


def load(path: Path | str) -> Config:
    """Load a YAML configuration file."""
    return load_config(path)


def provider_for(config: Config) -> GitLabProvider:
    """Connection to the instance named by ``config.provider``."""
    settings = config.provider
    missing = [name for name in ("url", "token") if not getattr(settings, name)]
    if missing:
        raise ConfigError(
            "Missing provider settings: "
            + ", ".join(f"{m} (GITLAB_{m.upper()})" for m in missing)
        )
    return GitLabProvider(
        url=settings.url,
        auth=TokenAuth(token=SecretStr(settings.token or "")),
        ssl_verify=settings.ssl_verify,
    )


def engine_for(config: Config) -> GitLabEngine:
    return GitLabEngine(
        provider=provider_for(config),
        registry=builtin_registry(user_delete_policy=config.provider.user_delete.to_policy()),
        state_path=config.state_path,
        gitlab_url=config.provider.url or "",
    )


def plan(config: Config, *, destroy: bool = False, refresh: bool = True) -> Plan:
    return engine_for(config).plan(config.resources, destroy=destroy, refresh=refresh)


def apply(
    proposed: Plan, config: Config, *, progress: ProgressCallback | None = None
) -> ApplyResult:
    return engine_for(config).apply(proposed, progress=progress)


def refresh(config: Config, *, write: bool = True) -> list[Change]:
    """Drift between state and GitLab; written back to state unless ``write`` is off."""
    return engine_for(config).refresh(write=write)


def import_resource(config: Config, address: str, import_id: str) -> ManagedObject:
    """Adopt the GitLab object *import_id* as the declared *address*."""
    resource = config.resource(address)
    if resource is None:
        raise ConfigError(f"{address} is not declared in the configuration")
    return engine_for(config).import_resource(resource, import_id)


def read_protected_branches(config: Config, project_id: str) -> ProtectedBranches:
    """Every protected branch of *project_id*, fetched live."""
    return _read_protected_branches(provider_for(config).api, project_id)
