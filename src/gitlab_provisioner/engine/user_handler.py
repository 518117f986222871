"""User handler implementing CRUD via the GitLab users API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gitlab.exceptions import GitlabError

from gitlab_provisioner.core.api import RemoteNotFoundError
from gitlab_provisioner.engine.handlers import (
    DeleteErrorPolicy,
    Observed,
    ResourceHandler,
    changed_fields,
)
from gitlab_provisioner.engine.ids import parse_int_part
from gitlab_provisioner.resources.markers import (
    build_api_payload,
    extract_api_attrs,
    unreadable_fields,
)
from gitlab_provisioner.resources.user import UserResource

if TYPE_CHECKING:
    from collections.abc import Mapping

    from gitlab_provisioner.core.state import ManagedObject
    from gitlab_provisioner.engine.handlers import EngineContext

logger = logging.getLogger(__name__)


def _path(user_id: int) -> str:
    return f"/users/{user_id}"


def _write_only(source: Mapping[str, Any]) -> dict[str, Any]:
    """Fields GitLab never returns; state keeps the last value sent."""
    return {f: source.get(f) for f in unreadable_fields(UserResource)}


class UserHandler(ResourceHandler["UserResource"]):
    """CRUD handler for GitLab users. Identity: the numeric user id."""

    def __init__(self, delete_policy: DeleteErrorPolicy | None = None) -> None:
        self.delete_policy = delete_policy or DeleteErrorPolicy()

    def _get(
        self, ctx: EngineContext, user_id: str, carried: Mapping[str, Any]
    ) -> Observed | None:
        uid = parse_int_part(user_id, "user id")
        logger.debug("Read user %d", uid)
        try:
            wire = ctx.api.get(_path(uid))
        except RemoteNotFoundError:
            logger.warning("User %d no longer exists in GitLab", uid)
            return None
        return Observed(str(wire["id"]), {**extract_api_attrs(UserResource, wire), **carried})

    def create(self, ctx: EngineContext, desired: UserResource) -> Observed:
        payload = build_api_payload(desired)
        payload["skip_confirmation"] = not desired.confirm
        logger.debug("Create user %r", desired.username)
        created = ctx.api.create("/users", payload)

        observed = self._get(ctx, str(created["id"]), _write_only(desired.model_dump()))
        if observed is None:
            raise RuntimeError(f"User {created['id']} disappeared right after creation")
        return observed

    def read(self, ctx: EngineContext, current: ManagedObject) -> Observed | None:
        return self._get(ctx, current.id, _write_only(current.attributes))

    def update(
        self,
        ctx: EngineContext,
        desired: UserResource,
        current: ManagedObject,
    ) -> Observed:
        uid = parse_int_part(current.id, "user id")
        dirty = changed_fields(desired, current)
        if dirty:
            logger.debug("Update user %d: %s", uid, dirty)
            ctx.api.update(_path(uid), build_api_payload(desired, fields=dirty))

        observed = self._get(ctx, current.id, _write_only(desired.model_dump()))
        if observed is None:
            raise RuntimeError(f"User {uid} not found for update")
        return observed

    def delete(self, ctx: EngineContext, current: ManagedObject) -> None:
        uid = parse_int_part(current.id, "user id")
        logger.debug("Delete user %d", uid)
        try:
            ctx.api.delete(_path(uid))
        except (RemoteNotFoundError, GitlabError) as exc:
            if not self.delete_policy.tolerates(exc):
                raise
            logger.warning("Ignoring error while deleting user %d: %s", uid, exc)
