"""GitLab resource definitions."""

from gitlab_provisioner.resources.access import AccessDescriptor
from gitlab_provisioner.resources.base import Resource
from gitlab_provisioner.resources.freeze_period import FreezePeriodResource
from gitlab_provisioner.resources.pipeline_schedule_variable import (
    PipelineScheduleVariableResource,
)
from gitlab_provisioner.resources.protected_environment import ProtectedEnvironmentResource
from gitlab_provisioner.resources.user import UserResource

__all__ = [
    "AccessDescriptor",
    "FreezePeriodResource",
    "PipelineScheduleVariableResource",
    "ProtectedEnvironmentResource",
    "Resource",
    "UserResource",
]
