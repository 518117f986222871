"""Protected environment handler implementing CRUD via the GitLab REST API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gitlab_provisioner.core.api import RemoteNotFoundError, encode
from gitlab_provisioner.engine.handlers import Observed, ResourceHandler
from gitlab_provisioner.engine.ids import check_id_part, decode_id, encode_id
from gitlab_provisioner.resources.access import expand_access_levels, flatten_access_levels
from gitlab_provisioner.resources.markers import build_api_payload

if TYPE_CHECKING:
    from gitlab_provisioner.core.state import ManagedObject
    from gitlab_provisioner.engine.handlers import EngineContext
    from gitlab_provisioner.resources.protected_environment import ProtectedEnvironmentResource

logger = logging.getLogger(__name__)


def _path(project: str, environment: str | None = None) -> str:
    base = f"/projects/{encode(project)}/protected_environments"
    if environment is None:
        return base
    return f"{base}/{encode(environment)}"


def _project_attrs(project: str, wire: dict[str, Any]) -> dict[str, Any]:
    return {
        "project": project,
        "environment": wire["name"],
        "deploy_access_levels": flatten_access_levels(wire.get("deploy_access_levels")),
    }


class ProtectedEnvironmentHandler(ResourceHandler["ProtectedEnvironmentResource"]):
    """CRUD handler for project protected environments.

    Identity: ``{project}:{environment}``. GitLab offers no update call, so
    every change is planned as a replacement.
    """

    def validate(self, ctx: EngineContext, desired: ProtectedEnvironmentResource) -> list[str]:
        _ = ctx
        problems = (check_id_part(desired.project), check_id_part(desired.environment))
        return [f"{desired.address}: {p}" for p in problems if p is not None]

    def _get(self, ctx: EngineContext, env_id: str) -> Observed | None:
        project, environment = decode_id(env_id, 2)
        logger.debug("Read protected environment %s", env_id)
        try:
            wire = ctx.api.get(_path(project, environment))
        except RemoteNotFoundError:
            logger.debug("Project %s protected environment %r not found", project, environment)
            return None
        return Observed(encode_id(project, wire["name"]), _project_attrs(project, wire))

    def create(self, ctx: EngineContext, desired: ProtectedEnvironmentResource) -> Observed:
        payload = build_api_payload(desired)
        payload["deploy_access_levels"] = expand_access_levels(desired.deploy_access_levels)
        logger.debug(
            "Project %s create protected environment %r", desired.project, desired.environment
        )
        try:
            created = ctx.api.create(_path(desired.project), payload)
        except RemoteNotFoundError as exc:
            msg = (
                f"Protected environments are not available for project '{desired.project}' "
                "(project missing or feature not licensed)"
            )
            raise RuntimeError(msg) from exc

        env_id = encode_id(desired.project, created["name"])
        observed = self._get(ctx, env_id)
        if observed is None:
            raise RuntimeError(f"Protected environment {env_id} disappeared right after creation")
        return observed

    def read(self, ctx: EngineContext, current: ManagedObject) -> Observed | None:
        return self._get(ctx, current.id)

    def update(
        self,
        ctx: EngineContext,
        desired: ProtectedEnvironmentResource,
        current: ManagedObject,
    ) -> Observed:
        # Every field forces a replacement; an update only re-reads.
        _ = desired
        observed = self._get(ctx, current.id)
        if observed is None:
            raise RuntimeError(f"Protected environment {current.id} not found for update")
        return observed

    def delete(self, ctx: EngineContext, current: ManagedObject) -> None:
        project, environment = decode_id(current.id, 2)
        logger.debug("Project %s unprotect environment %r", project, environment)
        try:
            ctx.api.delete(_path(project, environment))
        except RemoteNotFoundError:
            logger.debug("Protected environment %s already gone", current.id)
