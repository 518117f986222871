"""Project deploy freeze period resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from gitlab_provisioner.resources.base import Resource
from gitlab_provisioner.resources.markers import ApiField, ForceNew


class FreezePeriodResource(Resource):
    """A deploy freeze window, expressed as cron start/end in a timezone."""

    resource_type: ClassVar[str] = "gitlab_project_freeze_period"

    project: Annotated[str, ForceNew()] = Field(min_length=1)
    freeze_start: Annotated[str, ApiField("freeze_start")] = Field(min_length=1)
    freeze_end: Annotated[str, ApiField("freeze_end")] = Field(min_length=1)
    cron_timezone: Annotated[str, ApiField("cron_timezone")] = "UTC"
