"""Unit tests for the bd adapter (subprocess mocked)."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from agent_fleet.orchestrator.beads.client import (
    BeadsClient,
    BeadsError,
    CreateOptions,
    Issue,
    IssueNotFound,
)


def _make_result(stdout: str = "", returncode: int = 0, stderr: str = "") -> MagicMock:
    r = MagicMock(spec=subprocess.CompletedProcess)
    r.stdout = stdout
    r.stderr = stderr
    r.returncode = returncode
    return r


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_show_parses_list_response(mock_run: MagicMock, tmp_path: Path) -> None:
    bead = {
        "id": "gt-abc",
        "title": "Fix login",
        "issue_type": "bug",
        "priority": 1,
        "status": "open",
        "description": "",
    }
    mock_run.return_value = _make_result(json.dumps([bead]))

    issue = BeadsClient(tmp_path).show("gt-abc")

    assert issue == Issue(id="gt-abc", title="Fix login", issue_type="bug", priority=1)
    mock_run.assert_called_once_with(
        ["bd", "show", "gt-abc", "--json"],
        cwd=tmp_path,
        capture_output=True,
        text=True,
    )


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_show_reads_parent_from_dependencies(mock_run: MagicMock, tmp_path: Path) -> None:
    bead = {
        "id": "gt-abc",
        "type": "task",
        "dependencies": [
            {"depends_on_id": "gt-other", "dependency_type": "blocks"},
            {"depends_on_id": "gt-epic", "dependency_type": "parent-child"},
        ],
    }
    mock_run.return_value = _make_result(json.dumps(bead))

    issue = BeadsClient(tmp_path).show("gt-abc")

    assert issue.parent == "gt-epic"
    assert issue.issue_type == "task"


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_show_missing_issue(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = _make_result(returncode=1, stderr="Error: issue gt-nope not found")

    with pytest.raises(IssueNotFound) as excinfo:
        BeadsClient(tmp_path).show("gt-nope")
    assert excinfo.value.issue_id == "gt-nope"


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_show_empty_list_is_not_found(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = _make_result("[]")

    with pytest.raises(IssueNotFound):
        BeadsClient(tmp_path).show("gt-nope")


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_show_invalid_json(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = _make_result("not json")

    with pytest.raises(BeadsError):
        BeadsClient(tmp_path).show("gt-abc")


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_show_out_of_range_priority_is_an_error(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = _make_result(json.dumps([{"id": "gt-abc", "priority": 9}]))

    with pytest.raises(BeadsError):
        BeadsClient(tmp_path).show("gt-abc")


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_missing_executable(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.side_effect = FileNotFoundError("bd")

    with pytest.raises(BeadsError, match="running bd show"):
        BeadsClient(tmp_path).show("gt-abc")


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_create_passes_all_options(mock_run: MagicMock, tmp_path: Path) -> None:
    created = {
        "id": "gt-mr1",
        "title": "Merge: gt-abc",
        "issue_type": "merge-request",
        "priority": 0,
        "description": "Branch: gt-abc-alice",
    }
    mock_run.return_value = _make_result(json.dumps(created))

    issue = BeadsClient(tmp_path, command="bd-dev").create(
        CreateOptions(
            title="Merge: gt-abc",
            issue_type="merge-request",
            priority=0,
            description="Branch: gt-abc-alice",
        )
    )

    assert issue.id == "gt-mr1"
    assert issue.issue_type == "merge-request"
    cmd = mock_run.call_args.args[0]
    assert cmd == [
        "bd-dev",
        "create",
        "--title",
        "Merge: gt-abc",
        "--type",
        "merge-request",
        "--priority",
        "0",
        "--description",
        "Branch: gt-abc-alice",
        "--json",
    ]


@patch("agent_fleet.orchestrator.beads.client.subprocess.run")
def test_create_failure(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = _make_result(returncode=1, stderr="database is locked")

    with pytest.raises(BeadsError, match="database is locked"):
        BeadsClient(tmp_path).create(
            CreateOptions(title="Merge: gt-abc", issue_type="merge-request", priority=2)
        )
