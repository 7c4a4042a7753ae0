"""Unit tests for the CLI surface (adapters mocked)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest

from agent_fleet.orchestrator.beads.client import CreateOptions
from agent_fleet.orchestrator.main import build_parser, main
from agent_fleet.orchestrator.sessions.tmux import TmuxError
from agent_fleet.orchestrator.vcs.git import GitError


@pytest.fixture
def in_rig(town: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    cwd = town / "gastown" / "polecats" / "alice"
    monkeypatch.chdir(cwd)
    return cwd


def _git(branch: str) -> MagicMock:
    git_cls = MagicMock()
    git_cls.return_value.current_branch.return_value = branch
    git_cls.return_value.branch_exists.return_value = False
    return git_cls


def test_parser_accepts_done_alias_and_short_priority() -> None:
    args = build_parser().parse_args(["done", "--issue", "gt-abc", "-p", "1"])

    assert args.command == "done"
    assert args.issue == "gt-abc"
    assert args.priority == 1


@pytest.mark.parametrize("value", ["5", "-1", "urgent"])
def test_parser_rejects_bad_priority(value: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["submit-for-merge", "--priority", value])
    assert excinfo.value.code == 2


def test_submit_for_merge_prints_summary(
    in_rig: Path, store: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    with (
        patch("agent_fleet.orchestrator.main.GitClient", _git("gt-abc-alice")),
        patch("agent_fleet.orchestrator.main.BeadsClient", return_value=store),
    ):
        code = main(["submit-for-merge"])

    assert code == 0
    out = capsys.readouterr().out
    assert "MR ID: gt-mr1" in out
    assert "Target: main" in out
    assert "Worker: alice" in out
    assert "Priority: P2" in out

    opts = store.create.call_args.args[0]
    assert isinstance(opts, CreateOptions)
    assert "Rig: gastown" in opts.description


def test_submit_for_merge_with_flags(
    in_rig: Path, store: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    with (
        patch("agent_fleet.orchestrator.main.GitClient", _git("feature-x")),
        patch("agent_fleet.orchestrator.main.BeadsClient", return_value=store),
    ):
        code = main(["done", "--issue", "gt-42", "--priority", "0"])

    assert code == 0
    opts = store.create.call_args.args[0]
    assert opts.priority == 0
    assert "SourceIssue: gt-42" in opts.description
    assert "Worker: \n" in opts.description
    assert "Worker:" not in capsys.readouterr().out


def test_submit_for_merge_on_trunk_fails(
    in_rig: Path, store: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    with (
        patch("agent_fleet.orchestrator.main.GitClient", _git("main")),
        patch("agent_fleet.orchestrator.main.BeadsClient", return_value=store),
    ):
        code = main(["submit-for-merge"])

    assert code == 1
    assert "'main'" in capsys.readouterr().err
    store.create.assert_not_called()


def test_submit_for_merge_on_detached_head_is_a_clean_error(
    in_rig: Path, store: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    git_cls = MagicMock()
    git_cls.return_value.current_branch.side_effect = GitError(
        "HEAD is detached; check out a branch first"
    )

    with (
        patch("agent_fleet.orchestrator.main.GitClient", git_cls),
        patch("agent_fleet.orchestrator.main.BeadsClient", return_value=store),
    ):
        code = main(["submit-for-merge"])

    assert code == 1
    err = capsys.readouterr().err
    assert f"Error: getting current branch in {in_rig}: HEAD is detached" in err
    assert "Traceback" not in err
    assert '"exception"' not in err
    store.create.assert_not_called()


def test_submit_for_merge_outside_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)

    assert main(["submit-for-merge"]) == 1
    assert "not in a fleet workspace" in capsys.readouterr().err


def test_start_fleet(
    town: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(town)
    tmux = MagicMock()
    tmux.return_value.has_session.side_effect = lambda name: name == "gt-mayor"

    with patch("agent_fleet.orchestrator.main.TmuxClient", tmux):
        code = main(["start-fleet"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Mayor already running" in out
    assert "Deacon started" in out
    started = [c.args[0].session for c in tmux.return_value.start_session.call_args_list]
    assert started == ["gt-deacon"]


def test_start_fleet_failure(
    town: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(town)
    tmux = MagicMock()
    tmux.return_value.has_session.return_value = False
    tmux.return_value.start_session.side_effect = TmuxError("no space left")

    with patch("agent_fleet.orchestrator.main.TmuxClient", tmux):
        code = main(["start-fleet"])

    assert code == 1
    assert "starting Mayor: no space left" in capsys.readouterr().err
    assert tmux.return_value.start_session.call_count == 1


def test_fleet_status(
    town: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(town)
    tmux = MagicMock()
    tmux.return_value.has_session.side_effect = lambda name: name == "gt-mayor"

    with patch("agent_fleet.orchestrator.main.TmuxClient", tmux):
        code = main(["fleet-status"])

    assert code == 3
    out = capsys.readouterr().out
    assert "Mayor (gt-mayor): running" in out
    assert "Deacon (gt-deacon): stopped" in out
    tmux.return_value.start_session.assert_not_called()


def test_configuration_error_exits_2(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FLEET_DEFAULT_PRIORITY", "9")

    assert main(["fleet-status"]) == 2
    assert "Configuration error" in capsys.readouterr().err
