"""Pipeline schedule variable resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from gitlab_provisioner.resources.base import Resource
from gitlab_provisioner.resources.markers import ApiField, ForceNew


class PipelineScheduleVariableResource(Resource):
    """A variable attached to a project's pipeline schedule.

    Only ``value`` can change in place.
    """

    resource_type: ClassVar[str] = "gitlab_pipeline_schedule_variable"

    project: Annotated[str, ForceNew()] = Field(min_length=1)
    pipeline_schedule_id: Annotated[int, ForceNew()] = Field(ge=1)
    key: Annotated[str, ApiField("key"), ForceNew()] = Field(min_length=1)
    value: Annotated[str, ApiField("value")]

    def natural_key(self) -> tuple[str, ...]:
        return (self.project, str(self.pipeline_schedule_id), self.key)
