"""Terraform-style text for plans, drift and data sources."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import typer
from rich.table import Table

from gitlab_provisioner.engine.types import Action

if TYPE_CHECKING:
    from collections import Counter
    from collections.abc import Iterable

    from gitlab_provisioner.data.protected_branches import ProtectedBranches
    from gitlab_provisioner.engine.types import ApplyResult, Change, FieldChange, Plan

MASK = "(sensitive value)"

# symbol, color, headline
_LOOK: dict[Action, tuple[str, str, str]] = {
    Action.CREATE: ("+", "green", "will be created"),
    Action.UPDATE: ("~", "yellow", "will be updated in-place"),
    Action.REPLACE: ("-/+", "magenta", "must be replaced"),
    Action.DELETE: ("-", "red", "will be destroyed"),
    Action.NOOP: (" ", "bright_black", "is up-to-date"),
}

# What the apply progress prints before and after a change.
VERBS: dict[Action, tuple[str, str]] = {
    Action.CREATE: ("Creating", "created"),
    Action.UPDATE: ("Updating", "updated"),
    Action.REPLACE: ("Replacing", "replaced"),
    Action.DELETE: ("Destroying", "destroyed"),
}


class Painter:
    """``typer.style`` when color is on, the bare text otherwise."""

    def __init__(self, color: bool) -> None:
        self.color = color

    def __call__(self, text: str, **style: Any) -> str:
        return typer.style(text, **style) if self.color else text


def render_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, sort_keys=True, default=str)


def _shown(value: Any, fc: FieldChange) -> str:
    return MASK if fc.sensitive else render_value(value)


def _rows(change: Change) -> list[tuple[str, str]]:
    if change.action is Action.CREATE:
        return [(k, _shown(fc.after, fc)) for k, fc in change.fields.items()]
    rows = []
    for key, fc in change.fields.items():
        text = f"{_shown(fc.before, fc)} -> {_shown(fc.after, fc)}"
        if fc.forces_replacement:
            text += "  # forces replacement"
        rows.append((key, text))
    return rows


def render_change(change: Change, *, color: bool = True) -> str:
    paint = Painter(color)
    symbol, fg, headline = _LOOK[change.action]
    known_as = f" (id {change.current.id})" if change.current is not None else ""
    rows = _rows(change)
    width = max((len(k) for k, _ in rows), default=0)
    return "\n".join(
        [
            paint(f"  # {change.address}{known_as} {headline}", fg=fg, bold=True),
            paint(f'  {symbol} resource "{change.resource_type}" "{change.name}" {{', fg=fg),
            *(paint(f"      {symbol} {k.ljust(width)} = {v}", fg=fg) for k, v in rows),
            paint("    }", fg=fg),
        ]
    )


def render_changes(changes: Iterable[Change], *, color: bool = True) -> str:
    blocks = [render_change(c, color=color) for c in changes if c.action is not Action.NOOP]
    return "\n\n".join(blocks) if blocks else "No changes. GitLab matches the configuration."


def count_phrase(
    counts: Counter[Action], verbs: tuple[str, str, str], *, color: bool = False
) -> str:
    """``"1 to add, 0 to change, 2 to destroy"``; a replacement adds and destroys."""
    paint = Painter(color)
    replaced = counts[Action.REPLACE]
    numbers = (
        counts[Action.CREATE] + replaced,
        counts[Action.UPDATE],
        counts[Action.DELETE] + replaced,
    )
    return ", ".join(
        paint(f"{n} {verb}", fg=fg) if n else f"{n} {verb}"
        for n, verb, fg in zip(numbers, verbs, ("green", "yellow", "red"), strict=True)
    )


def plan_summary(plan: Plan, *, color: bool = True) -> str:
    pending = count_phrase(plan.summary(), ("to add", "to change", "to destroy"), color=color)
    return f"Plan: {pending}."


def apply_summary(result: ApplyResult, *, color: bool = True) -> str:
    done = count_phrase(result.summary(), ("added", "changed", "destroyed"), color=color)
    return f"{Painter(color)('Apply complete!', fg='green', bold=True)} Resources: {done}."


def drift_summary(drift: list[Change]) -> str:
    changed = sum(c.action is Action.UPDATE for c in drift)
    gone = sum(c.action is Action.DELETE for c in drift)
    return f"Drift: {changed} changed in GitLab, {gone} gone from GitLab."


def _grantees(entries: list[dict[str, Any]]) -> str:
    names = []
    for e in entries:
        if "user_id" in e:
            names.append(f"user:{e['user_id']}")
        elif "group_id" in e:
            names.append(f"group:{e['group_id']}")
        else:
            names.append(str(e.get("access_level")))
    return ", ".join(names) or "-"


def protected_branches_table(result: ProtectedBranches) -> Table:
    table = Table(title=f"Protected branches (id {result.id})", header_style="bold cyan")
    for column in ("Branch", "Id", "Push", "Merge", "Unprotect", "Code owner approval"):
        table.add_column(column, overflow="fold")
    for pb in result.protected_branches:
        table.add_row(
            pb.name,
            str(pb.id),
            _grantees(pb.push_access_levels),
            _grantees(pb.merge_access_levels),
            _grantees(pb.unprotect_access_levels),
            render_value(pb.code_owner_approval_required),
        )
    return table
