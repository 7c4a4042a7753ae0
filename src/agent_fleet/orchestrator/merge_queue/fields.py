"""Merge-request fields stored in an issue description.

The issue store treats descriptions as opaque text, so the fields are written
as one `Key: value` line each, in a fixed order:

    Branch: polecat/alice/gt-abc
    Target: main
    SourceIssue: gt-abc
    Worker: alice
    Rig: gastown

Readers (the merge queue processor, `parse_mr_fields`) look lines up by key,
so extra free text before or after the block is tolerated. This format is
persisted in existing issues; keys and their meaning must not change.
"""

from __future__ import annotations

from dataclasses import dataclass

# Attribute name -> description key, in output order.
_KEYS: dict[str, str] = {
    "branch": "Branch",
    "target": "Target",
    "source_issue": "SourceIssue",
    "worker": "Worker",
    "rig": "Rig",
}
_ATTRS_BY_KEY = {key.lower(): attr for attr, key in _KEYS.items()}


@dataclass(frozen=True, slots=True)
class MergeRequestFields:
    branch: str = ""
    target: str = ""
    source_issue: str = ""
    worker: str = ""
    rig: str = ""


def format_mr_fields(mr: MergeRequestFields) -> str:
    """Encode fields as description text. Every key is always written."""

    lines = []
    for attr, key in _KEYS.items():
        value = getattr(mr, attr)
        if value.splitlines() not in ([], [value]):
            raise ValueError(f"{key} must be a single line, got {value!r}")
        lines.append(f"{key}: {value}")
    return "\n".join(lines)


def parse_mr_fields(description: str) -> MergeRequestFields | None:
    """Decode fields from description text.

    Returns None if no known key is present. Keys match case-insensitively;
    the first occurrence of a key wins.
    """

    found: dict[str, str] = {}
    for line in description.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        attr = _ATTRS_BY_KEY.get(key.strip().lower())
        if attr is None or attr in found:
            continue
        # Strip the single separator space only; values keep their own spacing.
        found[attr] = value[1:] if value.startswith(" ") else value

    if not found:
        return None
    return MergeRequestFields(**found)
