"""Local record of the GitLab objects under management."""

from __future__ import annotations

import logging
import os
import shutil
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


class ManagedObject(BaseModel):
    """One GitLab object bound to a resource address.

    ``id`` is the composite identifier understood by the handler of
    ``resource_type`` (``"19"`` for a user, ``"42:production"`` for a
    protected environment, ``"7:DEPLOY_TARGET"`` for a schedule variable).
    ``attributes`` holds what GitLab reported the last time the object was
    read, in the shape of the resource model.
    """

    address: str
    resource_type: str
    id: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    depends_on: list[str] = Field(default_factory=list)
    synced_at: datetime = Field(default_factory=_now)

    @property
    def name(self) -> str:
        return self.address.partition(".")[2]

    def observed(
        self, object_id: str, attributes: dict[str, Any], depends_on: Iterable[str] | None = None
    ) -> ManagedObject:
        """Copy of this entry carrying a fresh read of the remote object."""
        return self.model_copy(
            update={
                "id": object_id,
                "attributes": attributes,
                "depends_on": self.depends_on if depends_on is None else list(depends_on),
                "synced_at": _now(),
            }
        )


class State(BaseModel):
    """Every managed object of one GitLab instance, keyed by address.

    ``serial`` grows by one on every write so two copies of the file can be
    told apart.
    """

    format: int = 1
    instance_url: str = ""
    serial: int = 0
    objects: dict[str, ManagedObject] = Field(default_factory=dict)

    def __contains__(self, address: object) -> bool:
        return address in self.objects

    def get(self, address: str) -> ManagedObject | None:
        return self.objects.get(address)

    def record(self, obj: ManagedObject) -> None:
        self.objects[obj.address] = obj

    def forget(self, address: str) -> ManagedObject | None:
        return self.objects.pop(address, None)

    @classmethod
    def read(cls, path: Path, instance_url: str = "") -> State:
        """Load *path*; a missing file yields an empty state for *instance_url*."""
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No state at %s, starting empty", path)
            return cls(instance_url=instance_url)
        state = cls.model_validate_json(raw)
        logger.debug(
            "Read state serial %d from %s (%d objects)", state.serial, path, len(state.objects)
        )
        return state

    def write(self, path: Path) -> None:
        """Bump ``serial`` and replace *path* in one rename.

        The previous file is kept next to it as ``<name>.backup``.
        """
        self.serial += 1
        path.parent.mkdir(parents=True, exist_ok=True)
        staging = path.with_name(f".{path.name}.{os.getpid()}")
        staging.write_text(self.model_dump_json(indent=2) + "\n", encoding="utf-8")
        if path.exists():
            shutil.copyfile(path, path.with_name(f"{path.name}.backup"))
        os.replace(staging, path)
        logger.debug("Wrote state serial %d to %s", self.serial, path)
