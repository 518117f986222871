"""Connection settings for one GitLab instance."""

from functools import cached_property
from typing import Self

import gitlab
from pydantic import BaseModel, ConfigDict, SecretStr

from gitlab_provisioner.core.api import GitLabAPI


class TokenAuth(BaseModel):
    """A personal, group or project access token."""

    token: SecretStr


class GitLabProvider(BaseModel):
    """Where to reach GitLab and how to authenticate.

    ``client`` is built lazily from ``url`` and ``auth``. Scripts and tests
    that already hold a ``gitlab.Gitlab`` session pass it to
    :meth:`from_client` instead:

        provider = GitLabProvider(url="https://gitlab.example.com",
                                  auth=TokenAuth(token="glpat-..."))
        provider = GitLabProvider.from_client(gitlab.Gitlab.from_config("work"))
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str | None = None
    auth: TokenAuth | None = None
    ssl_verify: bool = True

    _session: gitlab.Gitlab | None = None

    @classmethod
    def from_client(cls, client: gitlab.Gitlab) -> Self:
        provider = cls.model_construct()
        provider._session = client
        return provider

    @cached_property
    def client(self) -> gitlab.Gitlab:
        if self._session is not None:
            return self._session
        if not self.url or self.auth is None:
            raise ValueError("GitLabProvider needs url and auth, or use from_client()")
        return gitlab.Gitlab(
            self.url,
            private_token=self.auth.token.get_secret_value(),
            ssl_verify=self.ssl_verify,
        )

    @cached_property
    def api(self) -> GitLabAPI:
        """REST helper shared by every handler."""
        return GitLabAPI(self.client)
