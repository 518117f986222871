"""Pipeline schedule variable handler implementing CRUD via the GitLab REST API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitlab.exceptions import GitlabError

from gitlab_provisioner.core.api import RemoteNotFoundError, encode
from gitlab_provisioner.engine.errors import MalformedIdentifierError
from gitlab_provisioner.engine.handlers import Observed, ResourceHandler, changed_fields
from gitlab_provisioner.engine.ids import check_id_part, decode_id, encode_id, parse_int_part
from gitlab_provisioner.resources.markers import build_api_payload

if TYPE_CHECKING:
    from gitlab_provisioner.core.state import ManagedObject
    from gitlab_provisioner.engine.handlers import EngineContext
    from gitlab_provisioner.resources.pipeline_schedule_variable import (
        PipelineScheduleVariableResource,
    )

logger = logging.getLogger(__name__)

IMPORT_FORMAT = "{project_id}:{pipeline_schedule_id}:{key}"


def _schedule_path(project: str, schedule_id: int) -> str:
    return f"/projects/{encode(project)}/pipeline_schedules/{schedule_id}"


def _variable_path(project: str, schedule_id: int, key: str | None = None) -> str:
    base = f"{_schedule_path(project, schedule_id)}/variables"
    if key is None:
        return base
    return f"{base}/{encode(key)}"


def _split_id(value: str) -> tuple[int, str]:
    raw_schedule_id, key = decode_id(value, 2)
    return parse_int_part(raw_schedule_id, "pipeline_schedule_id"), key


class PipelineScheduleVariableHandler(ResourceHandler["PipelineScheduleVariableResource"]):
    """CRUD handler for pipeline schedule variables.

    Identity: ``{pipeline_schedule_id}:{key}``. The project is not part of
    the id and is kept as an attribute; every call needs it.
    """

    def validate(
        self, ctx: EngineContext, desired: PipelineScheduleVariableResource
    ) -> list[str]:
        _ = ctx
        problem = check_id_part(desired.key)
        return [] if problem is None else [f"{desired.address}: {problem}"]

    def _find(self, ctx: EngineContext, project: str, variable_id: str) -> Observed | None:
        schedule_id, key = _split_id(variable_id)
        logger.debug("Read pipeline schedule %s/%d", project, schedule_id)
        try:
            schedule = ctx.api.get(_schedule_path(project, schedule_id))
        except RemoteNotFoundError:
            logger.debug("Pipeline schedule %s/%d not found", project, schedule_id)
            return None

        for variable in schedule.get("variables") or []:
            if variable.get("key") == key:
                return Observed(
                    encode_id(schedule_id, key),
                    {
                        "project": project,
                        "pipeline_schedule_id": schedule_id,
                        "key": variable["key"],
                        "value": variable.get("value"),
                    },
                )

        logger.debug("Pipeline schedule %s/%d has no variable %r", project, schedule_id, key)
        return None

    def create(self, ctx: EngineContext, desired: PipelineScheduleVariableResource) -> Observed:
        logger.debug(
            "Create pipeline schedule variable %s on %s/%d",
            desired.key,
            desired.project,
            desired.pipeline_schedule_id,
        )
        created = ctx.api.create(
            _variable_path(desired.project, desired.pipeline_schedule_id),
            build_api_payload(desired),
        )
        variable_id = encode_id(desired.pipeline_schedule_id, created["key"])
        observed = self._find(ctx, desired.project, variable_id)
        if observed is None:
            raise RuntimeError(
                f"Pipeline schedule variable {variable_id} disappeared right after creation"
            )
        return observed

    def read(self, ctx: EngineContext, current: ManagedObject) -> Observed | None:
        return self._find(ctx, str(current.attributes["project"]), current.id)

    def update(
        self,
        ctx: EngineContext,
        desired: PipelineScheduleVariableResource,
        current: ManagedObject,
    ) -> Observed:
        dirty = changed_fields(desired, current)
        if dirty:
            logger.debug("Update pipeline schedule variable %s: %s", current.id, dirty)
            ctx.api.update(
                _variable_path(desired.project, desired.pipeline_schedule_id, desired.key),
                build_api_payload(desired, fields=dirty),
            )
        observed = self._find(ctx, desired.project, current.id)
        if observed is None:
            raise RuntimeError(f"Pipeline schedule variable {current.id} not found for update")
        return observed

    def delete(self, ctx: EngineContext, current: ManagedObject) -> None:
        project = str(current.attributes["project"])
        schedule_id, key = _split_id(current.id)
        try:
            ctx.api.delete(_variable_path(project, schedule_id, key))
        except (RemoteNotFoundError, GitlabError) as exc:
            msg = f"{current.id} failed to delete pipeline schedule variable: {exc}"
            raise RuntimeError(msg) from exc

    def import_seed(self, ctx: EngineContext, import_id: str) -> Observed:
        """Parse ``{project_id}:{pipeline_schedule_id}:{key}``."""
        _ = ctx
        try:
            project, raw_schedule_id, key = decode_id(import_id, 3)
        except MalformedIdentifierError as exc:
            raise MalformedIdentifierError(import_id, f"expected '{IMPORT_FORMAT}'") from exc
        schedule_id = parse_int_part(raw_schedule_id, "pipeline_schedule_id")
        return Observed(
            encode_id(schedule_id, key),
            {"project": project, "pipeline_schedule_id": schedule_id, "key": key},
        )
