"""Test configuration and fixtures."""

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import Mock

import pytest

from agent_fleet.orchestrator.beads.client import BeadsClient, Issue, IssueNotFound
from agent_fleet.orchestrator.config import FleetSettings
from agent_fleet.orchestrator.vcs.git import GitClient

_FLEET_ENV_VARS = (
    "LOG_LEVEL",
    "FLEET_TRUNK_BRANCH",
    "FLEET_DEFAULT_PRIORITY",
    "FLEET_ISSUE_PREFIXES",
    "FLEET_INTEGRATION_PREFIX",
    "FLEET_BEADS_COMMAND",
    "FLEET_AGENT_COMMAND",
    "FLEET_MAYOR_SESSION",
    "FLEET_DEACON_SESSION",
)


@pytest.fixture(autouse=True)
def clean_fleet_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell configuration out of the tests."""
    for name in _FLEET_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Undo configure_logging() calls made by the code under test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def settings() -> FleetSettings:
    """Provide default settings that ignore any local .env file."""
    return FleetSettings(_env_file=None)


@pytest.fixture
def town(tmp_path: Path) -> Path:
    """Provide a workspace root with one rig checkout."""
    root = tmp_path / "town"
    (root / "mayor").mkdir(parents=True)
    (root / "mayor" / "town.json").write_text('{"name": "town"}\n', encoding="utf-8")
    (root / "gastown" / "polecats" / "alice").mkdir(parents=True)
    return root


def _missing(issue_id: str) -> Issue:
    raise IssueNotFound(issue_id)


@pytest.fixture
def store() -> Mock:
    """Provide an issue store where no issue exists yet."""
    mock = Mock(spec=BeadsClient)
    mock.show.side_effect = _missing
    mock.create.side_effect = lambda opts: Issue(
        id="gt-mr1",
        title=opts.title,
        issue_type=opts.issue_type,
        priority=opts.priority,
        description=opts.description,
    )
    return mock


@pytest.fixture
def vcs() -> Mock:
    """Provide a git client that knows no branches."""
    mock = Mock(spec=GitClient)
    mock.branch_exists.return_value = False
    return mock
