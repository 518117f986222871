"""Composite identifiers for GitLab objects.

Objects scoped under a parent (a project, a pipeline schedule) are stored in
state as a single ``:``-joined token, e.g. ``"42:production"``. Parts may not
contain the delimiter; this is checked when the token is built, so every
stored identifier decodes back to the parts it was made from.
"""

from __future__ import annotations

from gitlab_provisioner.engine.errors import MalformedIdentifierError

DELIMITER = ":"


def check_id_part(part: str | int) -> str | None:
    """Return an error message if *part* cannot be used in a composite id."""
    text = str(part)
    if not text:
        return "identifier parts must not be empty"
    if DELIMITER in text:
        return f"identifier part {text!r} must not contain {DELIMITER!r}"
    return None


def encode_id(*parts: str | int) -> str:
    """Join *parts* into a composite identifier."""
    for part in parts:
        if (problem := check_id_part(part)) is not None:
            raise MalformedIdentifierError(
                DELIMITER.join(str(p) for p in parts), problem
            )
    return DELIMITER.join(str(p) for p in parts)


def decode_id(value: str, arity: int) -> tuple[str, ...]:
    """Split a composite identifier into exactly *arity* parts."""
    parts = tuple(value.split(DELIMITER))
    if len(parts) != arity:
        raise MalformedIdentifierError(
            value, f"expected {arity} {DELIMITER!r}-separated parts, got {len(parts)}"
        )
    if any(not p for p in parts):
        raise MalformedIdentifierError(value, "identifier parts must not be empty")
    return parts


def parse_int_part(value: str, label: str) -> int:
    """Parse a numeric identifier segment."""
    try:
        return int(value)
    except ValueError as exc:
        raise MalformedIdentifierError(value, f"{label} must be an integer") from exc
