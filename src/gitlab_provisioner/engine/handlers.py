"""Handler contract shared by every GitLab resource type."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Generic, NamedTuple, TypeVar

from gitlab_provisioner.core.api import RemoteNotFoundError
from gitlab_provisioner.resources.base import Resource
from gitlab_provisioner.resources.markers import mutable_fields

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gitlab_provisioner.core import GitLabAPI, GitLabProvider
    from gitlab_provisioner.core.state import ManagedObject

R = TypeVar("R", bound=Resource)


@dataclass(frozen=True)
class EngineContext:
    provider: GitLabProvider

    @property
    def api(self) -> GitLabAPI:
        return self.provider.api


class Observed(NamedTuple):
    """A GitLab object as read back: its composite id and projected attributes."""

    id: str
    attributes: dict[str, Any]


@dataclass(frozen=True)
class DeleteErrorPolicy:
    """Which delete failures count as "already gone".

    ``ignore_statuses`` lists HTTP status codes treated as success.
    ``ignore_all`` accepts every GitLab failure on delete; it exists for
    instances whose delete endpoint reports errors for deletions that did
    happen.
    """

    ignore_statuses: frozenset[int] = field(
        default_factory=lambda: frozenset({HTTPStatus.NOT_FOUND.value})
    )
    ignore_all: bool = False

    def tolerates(self, exc: Exception) -> bool:
        if self.ignore_all:
            return True
        if isinstance(exc, RemoteNotFoundError):
            return HTTPStatus.NOT_FOUND in self.ignore_statuses
        return getattr(exc, "response_code", None) in self.ignore_statuses


class Claims:
    """Which addresses claim which GitLab object.

    Built from the declared resources of one plan; a resource whose natural
    key is ``None`` claims nothing until GitLab assigns it an id.
    """

    def __init__(self, declared: Iterable[Resource], tracked: Iterable[str]) -> None:
        self._owners: dict[tuple[str, tuple[str, ...]], list[str]] = {}
        self._known: set[str] = set(tracked)
        for r in declared:
            self._known.add(r.address)
            key = r.natural_key()
            if key is not None:
                self._owners.setdefault((r.resource_type, key), []).append(r.address)

    def known(self, address: str) -> bool:
        """Declared now or still tracked in state."""
        return address in self._known

    def rivals(self, resource: Resource) -> list[str]:
        """Other addresses declaring the same GitLab object as *resource*."""
        key = resource.natural_key()
        if key is None:
            return []
        owners = self._owners.get((resource.resource_type, key), [])
        return sorted(a for a in owners if a != resource.address)


def changed_fields(desired: Resource, current: ManagedObject) -> list[str]:
    """Mutable fields whose declared value differs from the last read."""
    return [
        name
        for name in mutable_fields(desired)
        if getattr(desired, name) != current.attributes.get(name)
    ]


class ResourceHandler(Generic[R]):
    """Turns one resource type into GitLab REST calls.

    ``create``, ``read`` and ``update`` return an :class:`Observed` read
    back from GitLab; ``read`` returns ``None`` once the object is gone.
    """

    def validate(self, ctx: EngineContext, desired: R) -> list[str]:
        """Problems with *desired* alone, checked before any remote call."""
        _ = ctx, desired
        return []

    def validate_plan(self, ctx: EngineContext, desired: R, claims: Claims) -> list[str]:
        """Problems involving other declared resources.

        By default two addresses may not manage the same object.
        """
        _ = ctx
        rivals = claims.rivals(desired)
        if not rivals:
            return []
        return [f"{desired.address} and {', '.join(rivals)} manage the same GitLab object"]

    def create(self, ctx: EngineContext, desired: R) -> Observed:
        raise NotImplementedError

    def read(self, ctx: EngineContext, current: ManagedObject) -> Observed | None:
        raise NotImplementedError

    def update(self, ctx: EngineContext, desired: R, current: ManagedObject) -> Observed:
        raise NotImplementedError

    def delete(self, ctx: EngineContext, current: ManagedObject) -> None:
        raise NotImplementedError

    def import_seed(self, ctx: EngineContext, import_id: str) -> Observed:
        """What is known about an object from its import id alone.

        The seed is passed to ``read``; by default the import id is the
        stored id.
        """
        _ = ctx
        return Observed(import_id, {})
