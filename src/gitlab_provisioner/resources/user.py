"""GitLab user resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from gitlab_provisioner.resources.base import Resource
from gitlab_provisioner.resources.markers import ApiField, CreateOnly, ForceNew, Sensitive


class UserResource(Resource):
    """A GitLab user account (requires an administrator token).

    ``display_name`` is the user's full name (GitLab's ``name``); the
    resource ``name`` is only the address label.
    """

    resource_type: ClassVar[str] = "gitlab_user"
    plan_priority: ClassVar[int] = 10

    username: Annotated[str, ApiField("username")] = Field(min_length=1)
    password: Annotated[str, ApiField("password"), Sensitive()] = Field(min_length=8)
    email: Annotated[str, ApiField("email"), ForceNew()] = Field(min_length=3)
    display_name: Annotated[str, ApiField("name")] = Field(min_length=1)
    is_admin: Annotated[bool, ApiField("admin", read_key="is_admin")] = False
    can_create_group: Annotated[bool, ApiField("can_create_group")] = False
    confirm: Annotated[bool, CreateOnly()] = False
    projects_limit: Annotated[int, ApiField("projects_limit")] = Field(default=0, ge=0)

    def natural_key(self) -> tuple[str, ...]:
        return (self.username,)
