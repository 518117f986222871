"""Common base of the declared GitLab resources."""

from typing import Annotated, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class Resource(BaseModel):
    """Desired state of one GitLab object, addressed as ``<resource_type>.<name>``.

    ``plan_priority`` orders resources that do not depend on each other;
    lower values are created first and destroyed last.
    """

    model_config = ConfigDict(extra="forbid")

    resource_type: ClassVar[str]
    plan_priority: ClassVar[int] = 100

    name: Annotated[str, Field(pattern=r"^[A-Za-z0-9_]+$")]
    depends_on: list[str] = Field(default_factory=list)

    @property
    def address(self) -> str:
        return f"{self.resource_type}.{self.name}"

    def natural_key(self) -> tuple[str, ...] | None:
        """Fields naming the GitLab object itself, independent of ``name``.

        Two resources of one type with the same key would fight over one
        object. ``None`` when GitLab assigns the identity (freeze periods).
        """
        return None
