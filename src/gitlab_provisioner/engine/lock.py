"""Exclusive lock around reads and writes of the state file."""

from __future__ import annotations

import fcntl
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from gitlab_provisioner.engine.errors import StateLockError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


def lock_path_for(state_path: Path) -> Path:
    return state_path.with_name(f"{state_path.name}.lock")


@contextmanager
def state_lock(state_path: Path) -> Iterator[Path]:
    """Hold ``flock(LOCK_EX)`` on ``<state>.lock``; waits if another process has it."""
    path = lock_path_for(Path(state_path))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = path.open("a", encoding="utf-8")
    except OSError as exc:
        raise StateLockError(f"Cannot open lock file {path}: {exc}") from exc

    with handle:
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            logger.info("State is locked by another process, waiting on %s", path)
            fcntl.flock(handle, fcntl.LOCK_EX)
        except OSError as exc:
            raise StateLockError(f"Cannot lock {path}: {exc}") from exc
        try:
            yield path
        finally:
            fcntl.flock(handle, fcntl.LOCK_UN)
