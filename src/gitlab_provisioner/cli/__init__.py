"""``gitlab-provisioner`` command line."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from gitlab_provisioner import __version__

if TYPE_CHECKING:
    from gitlab_provisioner.config.schema import Config

LOG_ENV_VAR = "GITLAB_PROVISIONER_LOG"
DEFAULT_CONFIG = Path("gitlab-provisioner.yaml")

app = typer.Typer(name="gitlab-provisioner", no_args_is_help=True, add_completion=False)
data_app = typer.Typer(name="data", help="Read-only data sources.", no_args_is_help=True)
app.add_typer(data_app)


@dataclass
class Session:
    """Options shared by every command, kept on ``ctx.obj``."""

    config_path: Path
    color: bool

    @cached_property
    def config(self) -> Config:
        from gitlab_provisioner.config import load

        return load(self.config_path)


def _log_level(verbose: int) -> int | None:
    """``GITLAB_PROVISIONER_LOG`` wins over ``-v``; ``None`` keeps logging off."""
    named = os.environ.get(LOG_ENV_VAR, "").strip().upper()
    if named:
        level = logging.getLevelName(named)
        if isinstance(level, int):
            return level
        typer.echo(f"Ignoring {LOG_ENV_VAR}={named!r}: not a logging level, using INFO", err=True)
        return logging.INFO
    if verbose <= 0:
        return None
    return logging.DEBUG if verbose > 1 else logging.INFO


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"gitlab-provisioner {__version__}")
        raise typer.Exit


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Path, typer.Option("--config", "-c", help="Configuration file.")
    ] = DEFAULT_CONFIG,
    no_color: Annotated[bool, typer.Option("--no-color", help="Plain output.")] = False,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="-v for info, -vv for debug logs.")
    ] = 0,
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V", callback=_show_version, is_eager=True, help="Print the version."
        ),
    ] = False,
) -> None:
    """Terraform-style infrastructure-as-code for GitLab."""
    _ = version
    level = _log_level(verbose)
    if level is not None:
        logging.basicConfig(
            format="%(levelname)s %(name)s: %(message)s", level=logging.WARNING, force=True
        )
        logging.getLogger("gitlab_provisioner").setLevel(level)
    ctx.obj = Session(config_path=config, color=not (no_color or os.environ.get("NO_COLOR")))


# Commands register themselves on ``app`` when imported.
from gitlab_provisioner.cli import commands as _commands  # noqa: E402, F401
