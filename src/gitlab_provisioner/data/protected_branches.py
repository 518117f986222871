"""Project protected branches data source.

Every read is a full re-fetch: nothing is cached and nothing is written to
the state file.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from gitlab_provisioner.core.api import encode
from gitlab_provisioner.resources.access import flatten_branch_access_levels

if TYPE_CHECKING:
    from collections.abc import Mapping

    from gitlab_provisioner.core.api import GitLabAPI

logger = logging.getLogger(__name__)


class ProtectedBranch(BaseModel):
    """One protected branch as seen by the data source."""

    id: int
    name: str
    push_access_levels: list[dict[str, Any]] = Field(default_factory=list)
    merge_access_levels: list[dict[str, Any]] = Field(default_factory=list)
    unprotect_access_levels: list[dict[str, Any]] = Field(default_factory=list)
    code_owner_approval_required: bool = False


class ProtectedBranches(BaseModel):
    """Result of a protected branches read."""

    id: str
    project_id: str
    protected_branches: list[ProtectedBranch] = Field(default_factory=list)


def params_hash(params: Mapping[str, Any]) -> int:
    """Stable unsigned 64-bit digest of the input parameters."""
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def _flatten(wire: Mapping[str, Any]) -> ProtectedBranch:
    return ProtectedBranch(
        id=wire["id"],
        name=wire["name"],
        push_access_levels=flatten_branch_access_levels(wire.get("push_access_levels")),
        merge_access_levels=flatten_branch_access_levels(wire.get("merge_access_levels")),
        unprotect_access_levels=flatten_branch_access_levels(wire.get("unprotect_access_levels")),
        code_owner_approval_required=bool(wire.get("code_owner_approval_required", False)),
    )


def read_protected_branches(api: GitLabAPI, project_id: str) -> ProtectedBranches:
    """List every protected branch of *project_id* (numeric id or full path).

    The result id combines the numeric project id with a hash of the inputs,
    so the same project reached by id or by path yields different ids.
    """
    logger.info("Reading protected branches of project %s", project_id)
    project_path = f"/projects/{encode(project_id)}"
    project = api.get(project_path)
    branches = [_flatten(pb) for pb in api.list_all(f"{project_path}/protected_branches")]
    return ProtectedBranches(
        id=f"{project['id']}-{params_hash({'project_id': project_id})}",
        project_id=project_id,
        protected_branches=branches,
    )
