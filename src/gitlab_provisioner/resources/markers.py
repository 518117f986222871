"""``Annotated`` markers describing how resource fields map onto GitLab.

- ``ApiField``: the field is sent to and read from a GitLab JSON key
- ``ForceNew``: changing the field replaces the object (delete + create)
- ``CreateOnly``: sent on create only, never echoed back
- ``Sensitive``: a secret, masked in output and never echoed back
- ``Compare``: how the planner compares the field with the last read
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, TypeAlias, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from pydantic.fields import FieldInfo

M = TypeVar("M")
CompareStrategy: TypeAlias = Literal["partial", "exact"]


@dataclass(frozen=True, slots=True)
class ApiField:
    """JSON key of the field in GitLab requests.

    ``read_key`` is set when responses use another name (``admin`` is sent,
    ``is_admin`` comes back).
    """

    key: str
    read_key: str | None = None

    @property
    def response_key(self) -> str:
        return self.read_key or self.key


@dataclass(frozen=True, slots=True)
class ForceNew:
    pass


@dataclass(frozen=True, slots=True)
class CreateOnly:
    pass


@dataclass(frozen=True, slots=True)
class Sensitive:
    pass


@dataclass(frozen=True, slots=True)
class Compare:
    """``"partial"`` ignores keys GitLab adds to dicts; ``"exact"`` is plain equality."""

    strategy: CompareStrategy


def _fields_with(model: Any, marker_type: type[M]) -> Iterator[tuple[str, FieldInfo, M]]:
    cls = model if isinstance(model, type) else type(model)
    for name, info in cls.model_fields.items():
        marker = next((m for m in info.metadata if isinstance(m, marker_type)), None)
        if marker is not None:
            yield name, info, marker


def _names_with(model: Any, marker_type: type) -> set[str]:
    return {name for name, _, _ in _fields_with(model, marker_type)}


def compare_strategies(model: Any) -> dict[str, CompareStrategy]:
    return {name: marker.strategy for name, _, marker in _fields_with(model, Compare)}


def force_new_fields(model: Any) -> set[str]:
    return _names_with(model, ForceNew)


def sensitive_fields(model: Any) -> set[str]:
    return _names_with(model, Sensitive)


def unreadable_fields(model: Any) -> set[str]:
    """Fields GitLab never returns; state carries their last value forward."""
    return _names_with(model, Sensitive) | _names_with(model, CreateOnly)


def mutable_fields(model: Any) -> list[str]:
    """GitLab fields an in-place update may send."""
    fixed = _names_with(model, ForceNew) | _names_with(model, CreateOnly)
    return [name for name, _, _ in _fields_with(model, ApiField) if name not in fixed]


def build_api_payload(resource: Any, *, fields: list[str] | None = None) -> dict[str, Any]:
    """Request body from the ``ApiField`` fields of *resource*.

    ``None`` values are left out; *fields* restricts the body to those names.
    """
    return {
        marker.key: value
        for name, _, marker in _fields_with(resource, ApiField)
        if (fields is None or name in fields) and (value := getattr(resource, name)) is not None
    }


def extract_api_attrs(model: type, wire: Mapping[str, Any]) -> dict[str, Any]:
    """Project a GitLab response onto the readable ``ApiField`` fields.

    A key missing from the response falls back to the field default.
    """
    skip = unreadable_fields(model)
    return {
        name: wire.get(
            marker.response_key,
            None if info.is_required() else info.get_default(call_default_factory=True),
        )
        for name, info, marker in _fields_with(model, ApiField)
        if name not in skip
    }
