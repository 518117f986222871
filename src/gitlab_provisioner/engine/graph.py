"""Ordering of addresses by ``depends_on``."""

from __future__ import annotations

import heapq
from graphlib import CycleError, TopologicalSorter
from typing import TYPE_CHECKING

from gitlab_provisioner.engine.errors import DependencyCycleError

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping


def dependency_order(
    addresses: Collection[str],
    depends_on: Mapping[str, Collection[str]],
    priorities: Mapping[str, int] | None = None,
) -> list[str]:
    """Dependencies first; among ready addresses, lowest priority then name.

    Edges to addresses outside *addresses* are ignored.
    """
    members = set(addresses)
    sorter: TopologicalSorter[str] = TopologicalSorter(
        {a: [d for d in depends_on.get(a, ()) if d in members] for a in members}
    )
    try:
        sorter.prepare()
    except CycleError as exc:
        raise DependencyCycleError(list(exc.args[1])) from exc

    rank = priorities or {}
    ready: list[tuple[int, str]] = []
    order: list[str] = []
    while sorter.is_active():
        for address in sorter.get_ready():
            heapq.heappush(ready, (rank.get(address, 0), address))
        _, address = heapq.heappop(ready)
        order.append(address)
        sorter.done(address)
    return order
