"""Plan and apply engine for GitLab resources."""

from gitlab_provisioner.engine.engine import GitLabEngine
from gitlab_provisioner.engine.errors import (
    ApplyCanceled,
    ApplyError,
    DependencyCycleError,
    DuplicateAddressError,
    EngineError,
    ImportNotFoundError,
    MalformedIdentifierError,
    ResourceAlreadyManagedError,
    StateInstanceMismatchError,
    StateLockError,
    UnknownResourceTypeError,
    ValidationError,
)
from gitlab_provisioner.engine.handlers import (
    Claims,
    DeleteErrorPolicy,
    EngineContext,
    Observed,
    ResourceHandler,
)
from gitlab_provisioner.engine.registry import Binding, HandlerRegistry
from gitlab_provisioner.engine.types import Action, ApplyResult, Change, FieldChange, Plan

__all__ = [
    "Action",
    "ApplyCanceled",
    "ApplyError",
    "ApplyResult",
    "Binding",
    "Change",
    "Claims",
    "DeleteErrorPolicy",
    "DependencyCycleError",
    "DuplicateAddressError",
    "EngineContext",
    "EngineError",
    "FieldChange",
    "GitLabEngine",
    "HandlerRegistry",
    "ImportNotFoundError",
    "MalformedIdentifierError",
    "Observed",
    "Plan",
    "ResourceAlreadyManagedError",
    "ResourceHandler",
    "StateInstanceMismatchError",
    "StateLockError",
    "UnknownResourceTypeError",
    "ValidationError",
]
