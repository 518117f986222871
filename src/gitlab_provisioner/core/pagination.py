"""Page-by-page accumulation of GitLab list endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a listing.

    ``total_pages`` is ``None`` when the server did not report it (GitLab
    drops ``X-Total-Pages`` for collections over 10,000 items). ``next_page``
    is ``None`` on the last page.
    """

    items: list[T] = field(default_factory=list)
    total_pages: int | None = None
    next_page: int | None = None


def fetch_all(fetch_page: Callable[[int], Page[T]]) -> list[T]:
    """Request pages 1, 2, 3, ... until the collection is exhausted.

    The total is unknown until the first response arrives. Iteration stops
    once the reported total is reached, when the server reports no next page,
    or on an empty page. A failing page request propagates; nothing collected
    so far is returned.
    """
    items: list[T] = []
    total_pages: int | None = None
    page = 1
    requests = 0
    while True:
        result = fetch_page(page)
        requests += 1
        items.extend(result.items)
        if result.total_pages is not None:
            total_pages = result.total_pages

        if total_pages is not None and page >= total_pages:
            break
        if total_pages is None and result.next_page is None:
            break
        if not result.items:
            break
        page = result.next_page if result.next_page is not None else page + 1

    logger.debug("Fetched %d items in %d page request(s)", len(items), requests)
    return items
