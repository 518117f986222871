"""Thin REST facade over ``gitlab.Gitlab``.

Handlers speak in plain JSON dicts (the wire representation) and never see
python-gitlab's object managers. This keeps every remote call a single,
mockable method and gives list endpoints access to the pagination headers.
"""

from __future__ import annotations

import contextlib
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from gitlab.exceptions import GitlabError
from gitlab.utils import EncodedId

from gitlab_provisioner.core.pagination import Page, fetch_all

if TYPE_CHECKING:
    from collections.abc import Iterator

    import gitlab

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 100


class RemoteNotFoundError(Exception):
    """The remote entity does not exist (HTTP 404)."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not found: {path}")
        self.path = path


def encode(value: str | int) -> str:
    """URL-encode a path segment (project path, environment name, key)."""
    return str(EncodedId(value))


def _header_int(headers: Any, name: str) -> int | None:
    raw = headers.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


@contextlib.contextmanager
def _not_found_as_remote(path: str) -> Iterator[None]:
    try:
        yield
    except GitlabError as exc:
        if exc.response_code == HTTPStatus.NOT_FOUND:
            raise RemoteNotFoundError(path) from exc
        raise


class GitLabAPI:
    """Create/Get/List/Update/Delete primitives against GitLab's v4 API.

    404 responses surface as :class:`RemoteNotFoundError`; every other
    ``GitlabError`` propagates unchanged.
    """

    def __init__(self, client: gitlab.Gitlab, *, per_page: int = DEFAULT_PER_PAGE) -> None:
        self._client = client
        self._per_page = per_page

    @property
    def client(self) -> gitlab.Gitlab:
        return self._client

    def get(self, path: str, **query: Any) -> dict[str, Any]:
        logger.debug("GET %s", path)
        with _not_found_as_remote(path):
            return self._client.http_get(path, query_data=query or None)

    def create(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("POST %s", path)
        with _not_found_as_remote(path):
            return self._client.http_post(path, post_data=payload)

    def update(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("PUT %s fields=%s", path, sorted(payload))
        with _not_found_as_remote(path):
            return self._client.http_put(path, post_data=payload)

    def delete(self, path: str) -> None:
        logger.debug("DELETE %s", path)
        with _not_found_as_remote(path):
            self._client.http_delete(path)

    def list_page(self, path: str, page: int, **query: Any) -> Page[dict[str, Any]]:
        """Fetch one page of a list endpoint together with its pagination headers."""
        query_data = {**query, "page": page, "per_page": self._per_page}
        logger.debug("GET %s page=%d", path, page)
        with _not_found_as_remote(path):
            response = self._client.http_request("get", path, query_data=query_data)
        return Page(
            items=list(response.json()),
            total_pages=_header_int(response.headers, "X-Total-Pages"),
            next_page=_header_int(response.headers, "X-Next-Page"),
        )

    def list_all(self, path: str, **query: Any) -> list[dict[str, Any]]:
        """Fetch every page of a list endpoint."""
        return fetch_all(lambda page: self.list_page(path, page, **query))
