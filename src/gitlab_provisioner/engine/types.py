"""What a plan proposes and what an apply did."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gitlab_provisioner.core.state import ManagedObject
    from gitlab_provisioner.resources.base import Resource


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    NOOP = "no-op"


@dataclass(frozen=True)
class FieldChange:
    """Old and new value of one attribute."""

    before: Any
    after: Any
    forces_replacement: bool = False
    sensitive: bool = False


@dataclass
class Change:
    """The action for one address.

    ``desired`` is the declared resource (absent for deletions and drift),
    ``current`` the state entry it is compared with (absent for creations).
    """

    address: str
    resource_type: str
    action: Action
    desired: Resource | None = None
    current: ManagedObject | None = None
    fields: dict[str, FieldChange] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.address.partition(".")[2]


def count_actions(changes: Iterable[Change]) -> Counter[Action]:
    """Number of changes per action, NOOP excluded."""
    return Counter(c.action for c in changes if c.action is not Action.NOOP)


@dataclass
class Plan:
    instance_url: str
    changes: list[Change] = field(default_factory=list)
    destroy: bool = False

    def pending(self) -> list[Change]:
        return [c for c in self.changes if c.action is not Action.NOOP]

    def summary(self) -> Counter[Action]:
        return count_actions(self.changes)


@dataclass
class ApplyResult:
    applied: list[Change] = field(default_factory=list)

    def summary(self) -> Counter[Action]:
        return count_actions(self.applied)
