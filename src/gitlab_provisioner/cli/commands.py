"""CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console

from gitlab_provisioner import config as api
from gitlab_provisioner.cli import app, data_app
from gitlab_provisioner.cli.errors import exit_on_error
from gitlab_provisioner.cli.formatting import (
    VERBS,
    apply_summary,
    drift_summary,
    plan_summary,
    protected_branches_table,
    render_changes,
)

if TYPE_CHECKING:
    from gitlab_provisioner.cli import Session
    from gitlab_provisioner.engine.types import Change, Plan

AutoApprove = Annotated[bool, typer.Option("--auto-approve", help="Do not ask for confirmation.")]
NoRefresh = Annotated[bool, typer.Option("--no-refresh", help="Do not re-read GitLab first.")]


def _show_plan(plan: Plan, session: Session) -> None:
    typer.echo(render_changes(plan.changes, color=session.color))
    typer.echo()
    typer.echo(plan_summary(plan, color=session.color))


def _run(plan: Plan, session: Session, *, auto_approve: bool, question: str) -> None:
    """Show *plan*, ask before touching GitLab, then apply it change by change."""
    if not plan.pending():
        typer.echo("Nothing to do. GitLab matches the configuration.")
        return
    _show_plan(plan, session)
    typer.echo()
    if not auto_approve and not typer.confirm(question):
        typer.echo("Apply canceled.", err=True)
        raise typer.Exit(1)

    console = Console(no_color=not session.color, highlight=False, soft_wrap=True)
    with console.status("Applying") as status:

        def report(change: Change, finished: bool) -> None:
            before, after = VERBS[change.action]
            if finished:
                console.print(f"  {change.address}: {after}", markup=False)
            else:
                status.update(f"{before} {change.address}...")

        with exit_on_error(color=session.color):
            result = api.apply(plan, session.config, progress=report)
    typer.echo()
    typer.echo(apply_summary(result, color=session.color))


@app.command()
def plan(
    ctx: typer.Context,
    no_refresh: NoRefresh = False,
) -> None:
    """Show what apply would change. Exits 2 when there are pending changes."""
    session: Session = ctx.obj
    with exit_on_error(color=session.color):
        proposed = api.plan(session.config, refresh=not no_refresh)
    _show_plan(proposed, session)
    if proposed.pending():
        raise typer.Exit(2)


@app.command()
def apply(
    ctx: typer.Context,
    auto_approve: AutoApprove = False,
    no_refresh: NoRefresh = False,
) -> None:
    """Create, update and delete GitLab objects to match the configuration."""
    session: Session = ctx.obj
    with exit_on_error(color=session.color):
        proposed = api.plan(session.config, refresh=not no_refresh)
    _run(proposed, session, auto_approve=auto_approve, question="Apply these changes?")


@app.command()
def destroy(ctx: typer.Context, auto_approve: AutoApprove = False) -> None:
    """Delete every GitLab object recorded in state."""
    session: Session = ctx.obj
    with exit_on_error(color=session.color):
        proposed = api.plan(session.config, destroy=True)
    _run(proposed, session, auto_approve=auto_approve, question="Destroy all managed objects?")


@app.command()
def refresh(
    ctx: typer.Context,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Only report drift; leave state untouched.")
    ] = False,
) -> None:
    """Re-read every managed object and record what GitLab reports."""
    session: Session = ctx.obj
    with exit_on_error(color=session.color):
        drift = api.refresh(session.config, write=not dry_run)
    if not drift:
        typer.echo("No drift. State matches GitLab.")
        return
    typer.echo(render_changes(drift, color=session.color))
    typer.echo()
    typer.echo(drift_summary(drift))
    if not dry_run:
        typer.echo(f"State updated: {session.config.state_path}")


@app.command(name="import")
def import_(
    ctx: typer.Context,
    address: Annotated[str, typer.Argument(help="Declared address, e.g. gitlab_user.alice.")],
    import_id: Annotated[str, typer.Argument(help="Id of the existing GitLab object.")],
) -> None:
    """Record an existing GitLab object as a declared resource."""
    session: Session = ctx.obj
    with exit_on_error(color=session.color):
        obj = api.import_resource(session.config, address, import_id)
    typer.secho(
        f"{address}: imported (id {obj.id})", fg="green" if session.color else None
    )


@data_app.command(name="protected-branches")
def protected_branches(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Project id or path, e.g. group/app.")],
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON.")] = False,
) -> None:
    """List the protected branches of a project."""
    session: Session = ctx.obj
    with exit_on_error(color=session.color):
        result = api.read_protected_branches(session.config, project)
    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return
    Console(no_color=not session.color, soft_wrap=True).print(protected_branches_table(result))
