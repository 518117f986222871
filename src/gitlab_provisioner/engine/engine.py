"""Reconciles declared GitLab resources with the objects recorded in state."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Any

from gitlab_provisioner.core.state import ManagedObject, State
from gitlab_provisioner.engine.errors import (
    ApplyCanceled,
    ApplyError,
    DuplicateAddressError,
    EngineError,
    ImportNotFoundError,
    ResourceAlreadyManagedError,
    StateInstanceMismatchError,
    ValidationError,
)
from gitlab_provisioner.engine.graph import dependency_order
from gitlab_provisioner.engine.handlers import Claims, EngineContext
from gitlab_provisioner.engine.lock import state_lock
from gitlab_provisioner.engine.types import Action, ApplyResult, Change, FieldChange, Plan
from gitlab_provisioner.resources.markers import (
    CompareStrategy,
    compare_strategies,
    force_new_fields,
    sensitive_fields,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from pathlib import Path

    from gitlab_provisioner.core import GitLabProvider
    from gitlab_provisioner.engine.handlers import Observed, ResourceHandler
    from gitlab_provisioner.engine.registry import HandlerRegistry
    from gitlab_provisioner.resources.base import Resource

    # Called with (change, finished) before and after each change is applied.
    ProgressCallback = Callable[[Change, bool], None]

logger = logging.getLogger(__name__)

# Model fields that describe the address, not the GitLab object.
_ADDRESSING = frozenset({"name", "depends_on"})


def _differs(desired: Any, current: Any, *, strategy: CompareStrategy | None = None) -> bool:
    """Whether a declared value differs from the value last read from GitLab.

    Unless ``strategy`` is ``"exact"``, dicts compare only the keys that are
    declared, so keys GitLab adds on its own (``access_level_description``,
    the role of a user entry) do not count. Lists must have the same length
    and compare element by element in order.
    """
    if strategy == "exact":
        return desired != current
    if isinstance(desired, dict) and isinstance(current, dict):
        return any(_differs(v, current.get(k)) for k, v in desired.items())
    if isinstance(desired, list) and isinstance(current, list):
        return len(desired) != len(current) or any(
            _differs(d, c) for d, c in zip(desired, current, strict=True)
        )
    return desired != current


def _drift(
    before: dict[str, Any], after: dict[str, Any], hidden: set[str]
) -> dict[str, FieldChange]:
    return {
        k: FieldChange(before.get(k), after.get(k), sensitive=k in hidden)
        for k in sorted(before.keys() | after.keys())
        if before.get(k) != after.get(k)
    }


class GitLabEngine:
    """Plans and applies declared resources against one GitLab instance.

    The state file at ``state_path`` records which GitLab object each address
    manages; it is locked whenever it may be written.
    """

    def __init__(
        self,
        *,
        provider: GitLabProvider,
        registry: HandlerRegistry,
        state_path: Path,
        gitlab_url: str = "",
    ) -> None:
        self._ctx = EngineContext(provider=provider)
        self._registry = registry
        self._state_path = state_path
        self._gitlab_url = gitlab_url

    @property
    def state_path(self) -> Path:
        return self._state_path

    def _handler(self, resource_type: str) -> ResourceHandler[Any]:
        return self._registry.lookup(resource_type).handler

    def _open_state(self) -> State:
        state = State.read(self._state_path, self._gitlab_url)
        if not state.instance_url:
            state.instance_url = self._gitlab_url
        elif self._gitlab_url and state.instance_url != self._gitlab_url:
            raise StateInstanceMismatchError(self._gitlab_url, state.instance_url)
        return state

    @contextlib.contextmanager
    def _locked_state(self) -> Iterator[State]:
        with state_lock(self._state_path):
            yield self._open_state()

    def read_state(self) -> State:
        """The state file as it is on disk, without contacting GitLab."""
        return self._open_state()

    # -- reading ---------------------------------------------------------

    def _sync(self, state: State) -> list[Change]:
        """Re-read every tracked object; returns what GitLab changed."""
        drift: list[Change] = []
        for address, obj in sorted(state.objects.items()):
            observed = self._handler(obj.resource_type).read(self._ctx, obj)
            if observed is None:
                logger.info("%s (%s) is gone from GitLab, forgetting it", address, obj.id)
                state.forget(address)
                drift.append(Change(address, obj.resource_type, Action.DELETE, current=obj))
                continue

            fresh = obj.observed(observed.id, observed.attributes)
            hidden = sensitive_fields(self._registry.lookup(obj.resource_type).model)
            fields = _drift(obj.attributes, fresh.attributes, hidden)
            if fresh.id != obj.id:
                fields["id"] = FieldChange(obj.id, fresh.id)
            state.record(fresh)
            if fields:
                drift.append(
                    Change(address, obj.resource_type, Action.UPDATE, current=fresh, fields=fields)
                )
        logger.debug("Read back %d objects, %d drifted", len(state.objects), len(drift))
        return drift

    def refresh(self, *, write: bool = True) -> list[Change]:
        """Compare state with GitLab, writing GitLab's view back unless ``write`` is off."""
        with self._locked_state() as state:
            drift = self._sync(state)
            if drift and write:
                state.write(self._state_path)
        return drift

    # -- planning --------------------------------------------------------

    def _index(self, resources: Sequence[Resource]) -> dict[str, Resource]:
        declared: dict[str, Resource] = {}
        for r in resources:
            if r.address in declared:
                raise DuplicateAddressError(r.address)
            self._registry.lookup(r.resource_type)
            declared[r.address] = r
        return declared

    def _validate(self, declared: dict[str, Resource], state: State) -> None:
        claims = Claims(declared.values(), state.objects)
        errors: list[str] = []
        for r in declared.values():
            handler = self._handler(r.resource_type)
            errors.extend(handler.validate(self._ctx, r))
            errors.extend(handler.validate_plan(self._ctx, r, claims))
            errors.extend(
                f"{r.address} depends on unknown address {dep!r}"
                for dep in r.depends_on
                if not claims.known(dep)
            )
        if errors:
            raise ValidationError(errors)

    def _compare(self, resource: Resource, current: ManagedObject | None) -> Change:
        hidden = sensitive_fields(resource)
        wanted = resource.model_dump(exclude_none=True, exclude=set(_ADDRESSING))
        if current is None:
            fields = {k: FieldChange(None, v, sensitive=k in hidden) for k, v in wanted.items()}
            return Change(
                resource.address, resource.resource_type, Action.CREATE, resource, fields=fields
            )

        strategies = compare_strategies(resource)
        force_new = force_new_fields(resource)
        fields = {
            k: FieldChange(
                current.attributes.get(k),
                v,
                forces_replacement=k in force_new,
                sensitive=k in hidden,
            )
            for k, v in wanted.items()
            if _differs(v, current.attributes.get(k), strategy=strategies.get(k))
        }
        if any(f.forces_replacement for f in fields.values()):
            action = Action.REPLACE
        else:
            action = Action.UPDATE if fields else Action.NOOP
        return Change(resource.address, resource.resource_type, action, resource, current, fields)

    def _removals(self, state: State, addresses: set[str]) -> list[Change]:
        """Deletions, dependents before what they depend on."""
        order = dependency_order(
            addresses,
            {a: state.objects[a].depends_on for a in addresses},
            {
                a: self._registry.lookup(state.objects[a].resource_type).model.plan_priority
                for a in addresses
            },
        )
        return [
            Change(a, state.objects[a].resource_type, Action.DELETE, current=state.objects[a])
            for a in reversed(order)
        ]

    def plan(
        self, resources: Sequence[Resource], *, destroy: bool = False, refresh: bool = True
    ) -> Plan:
        """Changes that bring GitLab in line with *resources*.

        Creations, updates and replacements come in dependency order,
        followed by deletions of tracked addresses no longer declared. With
        ``destroy`` every tracked address is deleted.
        """
        declared = self._index(resources)
        logger.info(
            "Planning %d resources (destroy=%s, refresh=%s)", len(declared), destroy, refresh
        )
        guard = state_lock(self._state_path) if refresh else contextlib.nullcontext()
        with guard:
            state = self._open_state()
            if refresh and self._sync(state):
                state.write(self._state_path)

            if destroy:
                return Plan(self._gitlab_url, self._removals(state, set(state.objects)), True)

            self._validate(declared, state)
            order = dependency_order(
                declared,
                {a: r.depends_on for a, r in declared.items()},
                {a: r.plan_priority for a, r in declared.items()},
            )
            changes = [self._compare(declared[a], state.get(a)) for a in order]
            changes += self._removals(state, set(state.objects) - set(declared))
        for c in changes:
            logger.debug("%s: %s", c.address, c.action.value)
        return Plan(self._gitlab_url, changes)

    # -- applying --------------------------------------------------------

    def _tracked(self, state: State, address: str) -> ManagedObject:
        obj = state.get(address)
        if obj is None:
            raise EngineError(f"{address} is not in state any more; plan again")
        return obj

    def _record(self, state: State, resource: Resource, observed: Observed) -> None:
        state.record(
            ManagedObject(
                address=resource.address,
                resource_type=resource.resource_type,
                id=observed.id,
                attributes=observed.attributes,
                depends_on=list(resource.depends_on),
            )
        )

    def _execute(self, state: State, change: Change) -> None:
        handler = self._handler(change.resource_type)
        desired = change.desired
        match change.action:
            case Action.CREATE:
                assert desired is not None
                self._record(state, desired, handler.create(self._ctx, desired))
            case Action.UPDATE:
                assert desired is not None
                current = self._tracked(state, change.address)
                observed = handler.update(self._ctx, desired, current)
                state.record(current.observed(observed.id, observed.attributes, desired.depends_on))
            case Action.REPLACE:
                assert desired is not None
                current = state.get(change.address)
                if current is not None:
                    handler.delete(self._ctx, current)
                    state.forget(change.address)
                self._record(state, desired, handler.create(self._ctx, desired))
            case Action.DELETE:
                handler.delete(self._ctx, self._tracked(state, change.address))
                state.forget(change.address)

    def apply(self, plan: Plan, *, progress: ProgressCallback | None = None) -> ApplyResult:
        """Run every pending change of *plan* in order, writing state after each.

        The first failure stops the run with :class:`ApplyError`. A replace
        whose create failed leaves the address out of state, so the next
        plan creates it again.
        """
        if plan.instance_url != self._gitlab_url:
            raise StateInstanceMismatchError(self._gitlab_url, plan.instance_url)

        result = ApplyResult()
        pending = plan.pending()
        logger.info("Applying %d changes", len(pending))
        with self._locked_state() as state:
            for change in pending:
                if progress is not None:
                    progress(change, False)
                try:
                    self._execute(state, change)
                except KeyboardInterrupt as exc:
                    raise ApplyCanceled(f"Canceled while applying {change.address}") from exc
                except Exception as exc:
                    if change.action is Action.REPLACE and change.address not in state:
                        state.write(self._state_path)
                    raise ApplyError(result, change.address, str(exc)) from exc
                state.write(self._state_path)
                result.applied.append(change)
                if progress is not None:
                    progress(change, True)
        return result

    # -- importing -------------------------------------------------------

    def import_resource(self, resource: Resource, import_id: str) -> ManagedObject:
        """Adopt an existing GitLab object under *resource*'s address.

        Nothing changes remotely; the object is read and written to state.
        """
        handler = self._handler(resource.resource_type)
        errors = handler.validate(self._ctx, resource)
        if errors:
            raise ValidationError(errors)

        with self._locked_state() as state:
            if resource.address in state:
                raise ResourceAlreadyManagedError(resource.address)

            seed = handler.import_seed(self._ctx, import_id)
            logger.info("Importing %s from %r", resource.address, import_id)
            target = ManagedObject(
                address=resource.address,
                resource_type=resource.resource_type,
                id=seed.id,
                attributes=seed.attributes,
            )
            observed = handler.read(self._ctx, target)
            if observed is None:
                raise ImportNotFoundError(resource.address, import_id)

            self._record(state, resource, observed)
            state.write(self._state_path)
            return state.objects[resource.address]
