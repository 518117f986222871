"""Access level descriptors and their wire projections.

GitLab grants deploy/push/merge/unprotect rights through lists of access
entries. Each entry addresses exactly one grantee: a role (access level), a
single user, or a group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

# GitLab role name <-> numeric access level.
ACCESS_LEVEL_VALUES: dict[str, int] = {
    "no one": 0,
    "minimal": 5,
    "guest": 10,
    "reporter": 20,
    "developer": 30,
    "maintainer": 40,
    "owner": 50,
    "admin": 60,
}
ACCESS_LEVEL_NAMES: dict[int, str] = {v: k for k, v in ACCESS_LEVEL_VALUES.items()}

DeployRole = Literal["developer", "maintainer"]


class AccessDescriptor(BaseModel):
    """One deploy-access entry: a role, a user, or a group.

    Exactly one of the three fields must be set.
    """

    model_config = ConfigDict(extra="forbid")

    access_level: DeployRole | None = None
    user_id: int | None = Field(default=None, ge=1)
    group_id: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _exactly_one_grantee(self) -> Self:
        chosen = [
            f for f in ("access_level", "user_id", "group_id") if getattr(self, f) is not None
        ]
        if len(chosen) != 1:
            msg = "Exactly one of 'access_level', 'user_id' or 'group_id' must be set"
            raise ValueError(msg)
        return self


def _nonzero(value: Any) -> int | None:
    return value if isinstance(value, int) and value != 0 else None


def expand_access_levels(entries: Iterable[AccessDescriptor]) -> list[dict[str, Any]]:
    """Local descriptors -> GitLab request entries.

    Fields are inspected in priority order (role, user, group) and only the
    first one present is sent.
    """
    result: list[dict[str, Any]] = []
    for entry in entries:
        if entry.access_level is not None:
            result.append({"access_level": ACCESS_LEVEL_VALUES[entry.access_level]})
        elif entry.user_id is not None:
            result.append({"user_id": entry.user_id})
        elif entry.group_id is not None:
            result.append({"group_id": entry.group_id})
    return result


def flatten_access_levels(wire: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """GitLab deploy-access entries -> local records.

    GitLab reports a role level on every entry, including user and group
    grants, so a non-zero ``user_id`` or ``group_id`` takes precedence over
    the role. Unset values are omitted rather than zero-filled.
    """
    result: list[dict[str, Any]] = []
    for entry in wire or []:
        record: dict[str, Any] = {}
        if (user_id := _nonzero(entry.get("user_id"))) is not None:
            record["user_id"] = user_id
        elif (group_id := _nonzero(entry.get("group_id"))) is not None:
            record["group_id"] = group_id
        elif (level := entry.get("access_level")) is not None:
            record["access_level"] = ACCESS_LEVEL_NAMES.get(level, str(level))
        if entry.get("access_level_description") is not None:
            record["access_level_description"] = entry["access_level_description"]
        result.append(record)
    return result


def flatten_branch_access_levels(
    wire: Iterable[Mapping[str, Any]] | None,
) -> list[dict[str, Any]]:
    """GitLab push/merge/unprotect entries -> local records."""
    result: list[dict[str, Any]] = []
    for entry in wire or []:
        level = entry.get("access_level")
        record: dict[str, Any] = {
            "access_level": None if level is None else ACCESS_LEVEL_NAMES.get(level, str(level)),
            "access_level_description": entry.get("access_level_description"),
        }
        if (user_id := _nonzero(entry.get("user_id"))) is not None:
            record["user_id"] = user_id
        if (group_id := _nonzero(entry.get("group_id"))) is not None:
            record["group_id"] = group_id
        result.append(record)
    return result
