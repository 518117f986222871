"""Project protected environment resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from gitlab_provisioner.resources.access import AccessDescriptor
from gitlab_provisioner.resources.base import Resource
from gitlab_provisioner.resources.markers import ApiField, Compare, ForceNew


class ProtectedEnvironmentResource(Resource):
    """A protected environment of a GitLab project.

    GitLab has no update endpoint for protected environments, so every field
    forces a replacement.
    """

    resource_type: ClassVar[str] = "gitlab_project_protected_environment"

    project: Annotated[str, ForceNew()] = Field(min_length=1)
    environment: Annotated[str, ApiField("name"), ForceNew()] = Field(min_length=1)
    deploy_access_levels: Annotated[
        list[AccessDescriptor], ForceNew(), Compare("partial")
    ] = Field(min_length=1)

    def natural_key(self) -> tuple[str, ...]:
        return (self.project, self.environment)
