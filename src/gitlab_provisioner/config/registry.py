"""The handlers shipped with gitlab-provisioner."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitlab_provisioner.engine.freeze_period_handler import FreezePeriodHandler
from gitlab_provisioner.engine.pipeline_schedule_variable_handler import (
    PipelineScheduleVariableHandler,
)
from gitlab_provisioner.engine.protected_environment_handler import ProtectedEnvironmentHandler
from gitlab_provisioner.engine.registry import HandlerRegistry
from gitlab_provisioner.engine.user_handler import UserHandler
from gitlab_provisioner.resources.freeze_period import FreezePeriodResource
from gitlab_provisioner.resources.pipeline_schedule_variable import (
    PipelineScheduleVariableResource,
)
from gitlab_provisioner.resources.protected_environment import ProtectedEnvironmentResource
from gitlab_provisioner.resources.user import UserResource

if TYPE_CHECKING:
    from gitlab_provisioner.engine.handlers import DeleteErrorPolicy


def builtin_registry(*, user_delete_policy: DeleteErrorPolicy | None = None) -> HandlerRegistry:
    """A registry binding the four GitLab resource types to their handlers."""
    registry = HandlerRegistry()
    registry.bind(UserResource, UserHandler(delete_policy=user_delete_policy))
    registry.bind(ProtectedEnvironmentResource, ProtectedEnvironmentHandler())
    registry.bind(PipelineScheduleVariableResource, PipelineScheduleVariableHandler())
    registry.bind(FreezePeriodResource, FreezePeriodHandler())
    return registry
