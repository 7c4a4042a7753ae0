"""CLI entrypoint for the fleet tools.

Commands:
- submit-for-merge (alias: done): queue the current branch for the refinery
- start-fleet: bring up the Mayor and the Deacon
- fleet-status: show whether the supervisory sessions are running
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from agent_fleet import __version__
from agent_fleet.orchestrator.beads.client import BeadsClient
from agent_fleet.orchestrator.config import FleetSettings
from agent_fleet.orchestrator.errors import CurrentBranchError, FleetError
from agent_fleet.orchestrator.logging import configure_logging
from agent_fleet.orchestrator.merge_queue.submit import MergeQueueService
from agent_fleet.orchestrator.sessions.tmux import TmuxClient
from agent_fleet.orchestrator.startup import (
    SessionOutcome,
    SessionState,
    StartupOrchestrator,
    default_steps,
)
from agent_fleet.orchestrator.vcs.git import GitClient, GitError
from agent_fleet.orchestrator.workspace import find_current_rig, find_workspace_or_error

logger = logging.getLogger(__name__)

_PROGRESS = {
    SessionState.RUNNING: "  ○ {label} already running",
    SessionState.STARTING: "  → Starting {label}...",
    SessionState.STARTED: "  ✓ {label} started",
    SessionState.FAILED: "  ✗ {label} failed to start",
}


def _priority(value: str) -> int:
    try:
        priority = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"priority must be an integer, got {value!r}") from None
    if not 0 <= priority <= 4:
        raise argparse.ArgumentTypeError(f"priority must be between 0 and 4, got {priority}")
    return priority


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleet",
        description="Start the supervisory agents and feed the merge queue",
    )
    parser.add_argument("--version", action="version", version=f"agent-fleet {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    submit = subparsers.add_parser(
        "submit-for-merge",
        aliases=["done"],
        help="Submit the current branch to the merge queue",
        description=(
            "Create a merge-request issue for the current branch. The source issue is "
            "parsed from the branch name unless --issue is given."
        ),
    )
    submit.add_argument(
        "--issue",
        default=None,
        help="Source issue ID (default: parse from branch name)",
    )
    submit.add_argument(
        "-p",
        "--priority",
        type=_priority,
        default=None,
        help="Override priority (0-4, default: inherit from issue)",
    )

    subparsers.add_parser(
        "start-fleet",
        help="Start the Mayor, then the Deacon (running sessions are left alone)",
    )

    subparsers.add_parser(
        "fleet-status",
        help="Show whether the Mayor and the Deacon are running",
    )

    return parser


def _print_progress(outcome: SessionOutcome) -> None:
    line = _PROGRESS.get(outcome.state)
    if line is not None:
        print(line.format(label=outcome.label), flush=True)


def _submit(args: argparse.Namespace, settings: FleetSettings) -> int:
    town_root = find_workspace_or_error()
    cwd = Path.cwd()
    rig = find_current_rig(town_root, cwd)

    git = GitClient(cwd)
    try:
        branch = git.current_branch()
    except GitError as e:
        raise CurrentBranchError(directory=cwd, reason=str(e)) from e

    store = BeadsClient(cwd, command=settings.beads_command)
    service = MergeQueueService(store=store, vcs=git, settings=settings)
    result = service.submit(branch, issue_id=args.issue, priority=args.priority, rig=rig)

    print("✓ Work submitted to merge queue")
    print(f"  MR ID: {result.issue.id}")
    print(f"  Source: {result.fields.branch}")
    print(f"  Target: {result.fields.target}")
    print(f"  Issue: {result.fields.source_issue}")
    if result.fields.worker:
        print(f"  Worker: {result.fields.worker}")
    print(f"  Priority: P{result.priority}")
    print()
    print("The Refinery will process your merge request.")
    return 0


def _start_fleet(settings: FleetSettings) -> int:
    town_root = find_workspace_or_error()
    print(f"Starting fleet from {town_root}")
    print()

    orchestrator = StartupOrchestrator(
        TmuxClient(),
        default_steps(settings, town_root),
        on_event=_print_progress,
    )
    report = orchestrator.start()
    logger.info("Fleet started", extra=report.to_json())

    print()
    print("✓ Fleet is running")
    print()
    print(f"  Attach to Mayor:  tmux attach -t {settings.mayor_session}")
    print(f"  Attach to Deacon: tmux attach -t {settings.deacon_session}")
    print("  Check status:     fleet fleet-status")
    return 0


def _fleet_status(settings: FleetSettings) -> int:
    town_root = find_workspace_or_error()
    report = StartupOrchestrator(TmuxClient(), default_steps(settings, town_root)).probe()
    for outcome in report.outcomes:
        mark = "●" if outcome.is_up else "○"
        state = "running" if outcome.is_up else "stopped"
        print(f"  {mark} {outcome.label} ({outcome.session}): {state}")
    # Non-zero lets scripts test for a fully running fleet.
    return 0 if report.all_up else 3


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = FleetSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        if args.command in {"submit-for-merge", "done"}:
            return _submit(args, settings)

        if args.command == "start-fleet":
            return _start_fleet(settings)

        if args.command == "fleet-status":
            return _fleet_status(settings)

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except FleetError as e:
        logger.warning(str(e), extra={"command": args.command, "error_type": type(e).__name__})
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.exception("Command failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
