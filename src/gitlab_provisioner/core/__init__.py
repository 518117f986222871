"""Core infrastructure components for GitLab Provisioner."""

from gitlab_provisioner.core.api import GitLabAPI, RemoteNotFoundError
from gitlab_provisioner.core.pagination import Page, fetch_all
from gitlab_provisioner.core.provider import GitLabProvider, TokenAuth
from gitlab_provisioner.core.state import ManagedObject, State

__all__ = [
    "GitLabAPI",
    "GitLabProvider",
    "ManagedObject",
    "Page",
    "RemoteNotFoundError",
    "State",
    "TokenAuth",
    "fetch_all",
]
