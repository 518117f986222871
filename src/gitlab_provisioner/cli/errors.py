"""One-line error reports for the CLI; every failure exits with status 1."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import typer
from gitlab.exceptions import GitlabError

from gitlab_provisioner.config.loader import ConfigError
from gitlab_provisioner.engine.errors import (
    ApplyCanceled,
    ApplyError,
    ImportNotFoundError,
    MalformedIdentifierError,
    ResourceAlreadyManagedError,
    StateInstanceMismatchError,
    StateLockError,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


def describe(exc: Exception) -> list[str]:
    """Lines explaining *exc* to the user, without a traceback."""
    from gitlab_provisioner.cli.formatting import count_phrase

    match exc:
        case ConfigError():
            return [f"Configuration error: {exc}"]
        case ValidationError(errors=errors):
            return ["Validation failed:", *(f"  - {e}" for e in errors)]
        case StateInstanceMismatchError() | StateLockError():
            return [f"State error: {exc}"]
        case MalformedIdentifierError():
            return [f"Invalid identifier: {exc}"]
        case ImportNotFoundError() | ResourceAlreadyManagedError():
            return [f"Import failed: {exc}"]
        case ApplyError(result=result):
            lines = [f"Apply failed on {exc}"]
            done = count_phrase(result.summary(), ("added", "changed", "destroyed"))
            if result.applied:
                lines.append(f"  Already applied: {done}.")
            return lines
        case ApplyCanceled():
            return ["Apply canceled."]
        case GitlabError(response_code=code, error_message=message):
            return [f"GitLab API error{f' ({code})' if code else ''}: {message}"]
        case _:
            return [f"Error: {exc}"]


@contextmanager
def exit_on_error(*, color: bool) -> Iterator[None]:
    """Turn any exception raised in the block into a report and ``Exit(1)``."""
    try:
        yield
    except Exception as exc:
        for line in describe(exc):
            typer.secho(line, fg=typer.colors.RED if color else None, err=True)
        raise typer.Exit(1) from exc
