"""Recover the source issue and worker from a branch name.

Workers name their branches after the issue they picked up, e.g.

    gt-abc-alice            issue gt-abc, worker alice
    polecat/alice/gt-abc.1  issue gt-abc.1, worker alice
    alice/gt-abc            issue gt-abc, worker alice
    gt-abc                  issue gt-abc
    gt-abc-42               issue gt-abc (the tail is not a worker name)

Branches made by hand (`feature-x`, `wip`) don't follow any of these and
parse to empty fields. Parsing never fails.

Without configured issue prefixes any short lowercase word counts as a
prefix, so hand-made names like `fix-typo` or `add-tests` read as issue ids.
Set `FLEET_ISSUE_PREFIXES` to stop that.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

POLECAT_PREFIX = "polecat/"

_ISSUE_ID = r"[a-z]{1,5}-[a-z0-9]{2,}(?:\.[0-9]+)*"
_WORKER = r"[A-Za-z][A-Za-z0-9_-]*"

_ISSUE_RE = re.compile(rf"(?P<issue>{_ISSUE_ID})")
_LEADING_ISSUE_RE = re.compile(rf"(?P<issue>{_ISSUE_ID})(?:-|$)")
_ISSUE_WORKER_RE = re.compile(rf"(?P<issue>{_ISSUE_ID})(?:-(?P<worker>{_WORKER}))?")
_WORKER_RE = re.compile(_WORKER)


@dataclass(frozen=True, slots=True)
class BranchInfo:
    branch: str
    issue: str = ""
    worker: str = ""


def _issue_prefix(issue: str) -> str:
    return issue.split("-", 1)[0]


def _is_issue(token: str, prefixes: frozenset[str]) -> bool:
    if not _ISSUE_RE.fullmatch(token):
        return False
    return not prefixes or _issue_prefix(token) in prefixes


def _is_worker(token: str) -> bool:
    return bool(_WORKER_RE.fullmatch(token))


def _leading_issue(name: str, prefixes: frozenset[str]) -> str:
    match = _LEADING_ISSUE_RE.match(name)
    if match is None or not _is_issue(match.group("issue"), prefixes):
        return ""
    return match.group("issue")


def parse_branch_name(branch: str, *, issue_prefixes: Iterable[str] | None = None) -> BranchInfo:
    """Map a branch name to the issue and worker it encodes.

    Args:
        branch: The branch name as reported by git.
        issue_prefixes: If given and non-empty, only issue ids with one of
            these prefixes are recognised.
    """

    prefixes = frozenset(p.lower() for p in (issue_prefixes or ()))
    name = branch.strip()

    if name.startswith(POLECAT_PREFIX):
        rest = name[len(POLECAT_PREFIX) :]
        worker, _, tail = rest.partition("/")
        if not _is_worker(worker):
            return BranchInfo(branch=branch)
        issue = tail if _is_issue(tail, prefixes) else _leading_issue(tail, prefixes)
        return BranchInfo(branch=branch, issue=issue, worker=worker)

    if name.count("/") == 1:
        worker, issue = name.split("/")
        if not _is_worker(worker):
            return BranchInfo(branch=branch)
        if not _is_issue(issue, prefixes):
            issue = _leading_issue(issue, prefixes)
        if not issue:
            return BranchInfo(branch=branch)
        return BranchInfo(branch=branch, issue=issue, worker=worker)

    match = _ISSUE_WORKER_RE.fullmatch(name)
    if match is not None and _is_issue(match.group("issue"), prefixes):
        return BranchInfo(
            branch=branch, issue=match.group("issue"), worker=match.group("worker") or ""
        )

    # An issue followed by something that is not a worker name still names the issue.
    return BranchInfo(branch=branch, issue=_leading_issue(name, prefixes))
