"""Workspace discovery.

A workspace ("town") is the directory that holds the Mayor's home:

    <town>/
      mayor/town.json     primary marker
      deacon/
      <rig>/...           one directory per managed repository

Commands may be run from anywhere inside the town, typically from a worker's
checkout under a rig.
"""

from __future__ import annotations

import logging
from pathlib import Path

from agent_fleet.orchestrator.errors import NotInWorkspace

logger = logging.getLogger(__name__)

PRIMARY_MARKER = Path("mayor") / "town.json"
SECONDARY_MARKER = Path("mayor")

# Top-level town directories that belong to the supervisors, not to a rig.
_NON_RIG_DIRS = frozenset({"mayor", "deacon"})


def find_workspace(start: Path | None = None) -> Path | None:
    """Return the nearest town root at or above `start`, or None.

    The primary marker wins over the secondary one even when the secondary is
    closer, so a stray `mayor/` directory inside a rig doesn't shadow the town.
    """

    origin = (start or Path.cwd()).resolve()
    candidates = [origin, *origin.parents]

    for directory in candidates:
        if (directory / PRIMARY_MARKER).is_file():
            return directory

    for directory in candidates:
        if (directory / SECONDARY_MARKER).is_dir():
            logger.debug(
                "Workspace found via secondary marker", extra={"root": str(directory)}
            )
            return directory

    return None


def find_workspace_or_error(start: Path | None = None) -> Path:
    origin = (start or Path.cwd()).resolve()
    root = find_workspace(origin)
    if root is None:
        raise NotInWorkspace(start=origin)
    return root


def find_current_rig(town_root: Path, cwd: Path | None = None) -> str:
    """Return the rig the working directory belongs to.

    Returns an empty string at the town root, inside the supervisors' own
    directories, or when `cwd` is outside the town.
    """

    here = (cwd or Path.cwd()).resolve()
    try:
        relative = here.relative_to(town_root.resolve())
    except ValueError:
        return ""

    if not relative.parts:
        return ""
    rig = relative.parts[0]
    if rig in _NON_RIG_DIRS or rig.startswith("."):
        return ""
    return rig
