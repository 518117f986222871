"""Configuration models for YAML-based provisioning."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gitlab_provisioner.engine.handlers import DeleteErrorPolicy
from gitlab_provisioner.resources.base import Resource
from gitlab_provisioner.resources.freeze_period import FreezePeriodResource
from gitlab_provisioner.resources.pipeline_schedule_variable import (
    PipelineScheduleVariableResource,
)
from gitlab_provisioner.resources.protected_environment import ProtectedEnvironmentResource
from gitlab_provisioner.resources.user import UserResource


class UserDeleteConfig(BaseModel):
    """Which failures of a user delete are treated as success.

    ``ignore_all: true`` logs and discards every delete failure. Some GitLab
    instances answer a successful user deletion with an error, this switch
    lets such deletions go through.
    """

    model_config = ConfigDict(extra="forbid")

    ignore_statuses: list[int] = Field(default_factory=lambda: [404])
    ignore_all: bool = False

    def to_policy(self) -> DeleteErrorPolicy:
        return DeleteErrorPolicy(
            ignore_statuses=frozenset(self.ignore_statuses), ignore_all=self.ignore_all
        )


class ProviderConfig(BaseSettings):
    """Where and how to reach GitLab.

    Every field can come from the YAML ``provider`` block, a ``GITLAB_*``
    environment variable or a ``.env`` file, in that order of precedence.
    Keep ``token`` out of YAML.
    """

    model_config = SettingsConfigDict(env_prefix="GITLAB_", extra="ignore")

    url: str | None = None
    token: str | None = None
    ssl_verify: bool = True
    user_delete: UserDeleteConfig = Field(default_factory=UserDeleteConfig)


def _none_to_list(v: Any) -> Any:
    return v if v is not None else []


class Config(BaseModel):
    """Provisioning configuration, validated straight from the YAML document."""

    model_config = ConfigDict(extra="forbid")

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    state_path: Path = Path(".gitlab-state.json")
    users: Annotated[list[UserResource], BeforeValidator(_none_to_list)] = []
    protected_environments: Annotated[
        list[ProtectedEnvironmentResource], BeforeValidator(_none_to_list)
    ] = []
    pipeline_schedule_variables: Annotated[
        list[PipelineScheduleVariableResource], BeforeValidator(_none_to_list)
    ] = []
    freeze_periods: Annotated[list[FreezePeriodResource], BeforeValidator(_none_to_list)] = []

    @property
    def resources(self) -> list[Resource]:
        """All declared resources; ordering is not significant."""
        return [
            *self.users,
            *self.protected_environments,
            *self.pipeline_schedule_variables,
            *self.freeze_periods,
        ]

    @model_validator(mode="after")
    def _unique_addresses(self) -> Config:
        counts = Counter(r.address for r in self.resources)
        repeated = sorted(a for a, n in counts.items() if n > 1)
        if repeated:
            raise ValueError(f"Resource names must be unique per type: {', '.join(repeated)}")
        return self

    def resource(self, address: str) -> Resource | None:
        return next((r for r in self.resources if r.address == address), None)
