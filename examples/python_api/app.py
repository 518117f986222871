from __future__ import annotations

import argparse
from pathlib import Path

from gitlab_provisioner.config import apply, load, plan
from gitlab_provisioner.engine.types import Action, Change


def _progress(change: Change, finished: bool) -> None:
    print(f"[{'done' if finished else 'start'}] {change.address}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Plan and optionally apply a configuration")
    parser.add_argument("--config", default="gitlab-provisioner.yaml", help="Config file")
    parser.add_argument("--apply", action="store_true", help="Apply the plan")
    parser.add_argument("--no-refresh", action="store_true", help="Trust the state file as is")
    args = parser.parse_args()

    config = load(Path(args.config))

    proposed = plan(config, refresh=not args.no_refresh)
    for change in proposed.changes:
        forcing = [key for key, fc in change.fields.items() if fc.forces_replacement]
        suffix = f" (replaced because of {', '.join(forcing)})" if forcing else ""
        print(f"- {change.action.value:7} {change.address}{suffix}")
    print("Pending:", {a.value: n for a, n in proposed.summary().items()})

    if args.apply and proposed.pending():
        result = apply(proposed, config, progress=_progress)
        created = result.summary()[Action.CREATE]
        print(f"Applied {len(result.applied)} change(s), {created} new object(s)")


if __name__ == "__main__":
    main()
