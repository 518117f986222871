"""Errors raised while planning, applying or importing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gitlab_provisioner.engine.types import ApplyResult


class EngineError(Exception):
    """Base class for engine failures."""


class UnknownResourceTypeError(EngineError):
    def __init__(self, resource_type: str) -> None:
        super().__init__(f"No handler registered for resource type {resource_type!r}")
        self.resource_type = resource_type


class DuplicateAddressError(EngineError):
    def __init__(self, address: str) -> None:
        super().__init__(f"Resource address declared twice: {address}")
        self.address = address


class DependencyCycleError(EngineError):
    def __init__(self, addresses: list[str]) -> None:
        super().__init__("depends_on forms a cycle: " + " -> ".join(addresses))
        self.addresses = addresses


class MalformedIdentifierError(EngineError):
    """A composite identifier cannot be built or parsed."""

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"Malformed identifier {value!r}: {reason}")
        self.value = value
        self.reason = reason


class StateInstanceMismatchError(EngineError):
    """The state file was written for another GitLab instance."""

    def __init__(self, expected: str, got: str) -> None:
        super().__init__(f"State belongs to {got}, refusing to use it against {expected}")
        self.expected = expected
        self.got = got


class StateLockError(EngineError):
    """The state lock file cannot be opened or locked."""


class ValidationError(EngineError):
    """Declared resources were rejected before any remote call."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


class ResourceAlreadyManagedError(EngineError):
    def __init__(self, address: str) -> None:
        super().__init__(f"{address} is already in state")
        self.address = address


class ImportNotFoundError(EngineError):
    def __init__(self, address: str, import_id: str) -> None:
        super().__init__(f"Cannot import {address}: no GitLab object for id {import_id!r}")
        self.address = address
        self.import_id = import_id


class ApplyError(EngineError):
    """An apply stopped at ``address``.

    ``result`` lists the changes that went through before it. The remote
    failure is chained as ``__cause__``.
    """

    def __init__(self, result: ApplyResult, address: str, message: str) -> None:
        super().__init__(f"{address}: {message}")
        self.result = result
        self.address = address


class ApplyCanceled(EngineError):
    """The apply was interrupted (Ctrl-C)."""
