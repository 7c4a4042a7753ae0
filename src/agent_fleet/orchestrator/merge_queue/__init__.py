"""Branch -> merge-request derivation."""

from .branch import BranchInfo, parse_branch_name
from .fields import MergeRequestFields, format_mr_fields, parse_mr_fields
from .submit import MergeQueueService, MergeRequestDraft, SubmittedMergeRequest
from .target import TargetResolution, resolve_integration_target

__all__ = [
    "BranchInfo",
    "MergeQueueService",
    "MergeRequestDraft",
    "MergeRequestFields",
    "SubmittedMergeRequest",
    "TargetResolution",
    "format_mr_fields",
    "parse_branch_name",
    "parse_mr_fields",
    "resolve_integration_target",
]
