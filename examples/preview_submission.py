#!/usr/bin/env python3
"""Preview a merge-queue submission without creating anything.

This uses the merge-queue service directly:

* load settings from `.env`
* compose the merge request for the current branch (trunk check, issue
  parsing, integration target, inherited priority)
* print the description the merge-request issue would carry

Run it from inside a worker checkout.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from agent_fleet.orchestrator.beads.client import BeadsClient
from agent_fleet.orchestrator.config import FleetSettings
from agent_fleet.orchestrator.errors import FleetError
from agent_fleet.orchestrator.logging import configure_logging
from agent_fleet.orchestrator.merge_queue import MergeQueueService, format_mr_fields
from agent_fleet.orchestrator.vcs.git import GitClient
from agent_fleet.orchestrator.workspace import find_current_rig, find_workspace_or_error


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview a merge-queue submission.")
    parser.add_argument("--branch", default=None, help="Branch to preview (default: current)")
    parser.add_argument("--issue", default=None, help="Source issue override")
    parser.add_argument("--priority", type=int, default=None, help="Priority override (0-4)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = FleetSettings()
    configure_logging(settings.log_level)

    cwd = Path.cwd()
    try:
        town_root = find_workspace_or_error(cwd)
        git = GitClient(cwd)
        branch = args.branch or git.current_branch()

        service = MergeQueueService(
            store=BeadsClient(cwd, command=settings.beads_command),
            vcs=git,
            settings=settings,
        )
        draft = service.compose(
            branch,
            issue_id=args.issue,
            priority=args.priority,
            rig=find_current_rig(town_root, cwd),
        )
    except FleetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Title: {draft.to_create_options().title}")
    print(f"Priority: P{draft.priority}")
    print()
    print(format_mr_fields(draft.fields))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
