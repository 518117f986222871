"""Which model and handler serve each resource type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from gitlab_provisioner.engine.errors import UnknownResourceTypeError

if TYPE_CHECKING:
    from gitlab_provisioner.engine.handlers import ResourceHandler
    from gitlab_provisioner.resources.base import Resource


@dataclass(frozen=True)
class Binding:
    model: type[Resource]
    handler: ResourceHandler[Any]


class HandlerRegistry:
    """``resource_type`` to :class:`Binding`."""

    def __init__(self) -> None:
        self._bindings: dict[str, Binding] = {}

    def bind(self, model: type[Resource], handler: ResourceHandler[Any]) -> None:
        if model.resource_type in self._bindings:
            raise ValueError(f"{model.resource_type} already has a handler")
        self._bindings[model.resource_type] = Binding(model, handler)

    def lookup(self, resource_type: str) -> Binding:
        try:
            return self._bindings[resource_type]
        except KeyError:
            raise UnknownResourceTypeError(resource_type) from None
