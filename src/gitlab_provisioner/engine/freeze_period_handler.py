"""Freeze period handler implementing CRUD via the GitLab REST API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitlab_provisioner.core.api import RemoteNotFoundError, encode
from gitlab_provisioner.engine.handlers import Observed, ResourceHandler, changed_fields
from gitlab_provisioner.engine.ids import check_id_part, decode_id, encode_id, parse_int_part
from gitlab_provisioner.resources.freeze_period import FreezePeriodResource
from gitlab_provisioner.resources.markers import build_api_payload, extract_api_attrs

if TYPE_CHECKING:
    from gitlab_provisioner.core.state import ManagedObject
    from gitlab_provisioner.engine.handlers import EngineContext

logger = logging.getLogger(__name__)


def _path(project: str, freeze_period_id: int | None = None) -> str:
    base = f"/projects/{encode(project)}/freeze_periods"
    if freeze_period_id is None:
        return base
    return f"{base}/{freeze_period_id}"


def _split_id(value: str) -> tuple[str, int]:
    project, raw_id = decode_id(value, 2)
    return project, parse_int_part(raw_id, "freeze period id")


class FreezePeriodHandler(ResourceHandler["FreezePeriodResource"]):
    """CRUD handler for project deploy freeze periods.

    Identity: ``{project}:{freeze_period_id}``. There is no usable single-get
    call, so reads scan the paginated list for the id.
    """

    def validate(self, ctx: EngineContext, desired: FreezePeriodResource) -> list[str]:
        _ = ctx
        problem = check_id_part(desired.project)
        return [] if problem is None else [f"{desired.address}: {problem}"]

    def _find(self, ctx: EngineContext, period_id: str) -> Observed | None:
        project, freeze_period_id = _split_id(period_id)
        logger.debug("Read freeze period %s/%d", project, freeze_period_id)
        try:
            periods = ctx.api.list_all(_path(project))
        except RemoteNotFoundError:
            logger.debug("Project %s not found while reading freeze periods", project)
            return None

        match = next((p for p in periods if p.get("id") == freeze_period_id), None)
        if match is None:
            logger.debug("Freeze period %s no longer exists", period_id)
            return None
        return Observed(
            encode_id(project, freeze_period_id),
            {"project": project, **extract_api_attrs(FreezePeriodResource, match)},
        )

    def create(self, ctx: EngineContext, desired: FreezePeriodResource) -> Observed:
        payload = build_api_payload(desired)
        logger.debug("Project %s create freeze period %s", desired.project, payload)
        created = ctx.api.create(_path(desired.project), payload)

        period_id = encode_id(desired.project, created["id"])
        observed = self._find(ctx, period_id)
        if observed is None:
            raise RuntimeError(f"Freeze period {period_id} disappeared right after creation")
        return observed

    def read(self, ctx: EngineContext, current: ManagedObject) -> Observed | None:
        return self._find(ctx, current.id)

    def update(
        self,
        ctx: EngineContext,
        desired: FreezePeriodResource,
        current: ManagedObject,
    ) -> Observed:
        project, freeze_period_id = _split_id(current.id)
        dirty = changed_fields(desired, current)
        if dirty:
            logger.debug("Update freeze period %s: %s", current.id, dirty)
            ctx.api.update(
                _path(project, freeze_period_id), build_api_payload(desired, fields=dirty)
            )
        observed = self._find(ctx, current.id)
        if observed is None:
            raise RuntimeError(f"Freeze period {current.id} not found for update")
        return observed

    def delete(self, ctx: EngineContext, current: ManagedObject) -> None:
        project, freeze_period_id = _split_id(current.id)
        logger.debug("Delete freeze period %s", current.id)
        try:
            ctx.api.delete(_path(project, freeze_period_id))
        except RemoteNotFoundError:
            logger.debug("Freeze period %s already gone", current.id)
