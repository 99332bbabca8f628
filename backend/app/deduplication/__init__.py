"""Duplicate detection and merge planning package."""

from app.deduplication.normalization import is_masked, normalize_email, normalize_name, normalize_tax_id
from app.deduplication.planner import (
    GroupMergePlan,
    MergeOperation,
    plan_automatic_merge,
    plan_group_operations,
    plan_interactive_merge,
)
from app.deduplication.scanner import DuplicateGroup, DuplicateScanner, DuplicateScanResult
from app.deduplication.similarity import name_similarity

__all__ = [
    "DuplicateGroup",
    "DuplicateScanResult",
    "DuplicateScanner",
    "GroupMergePlan",
    "MergeOperation",
    "is_masked",
    "name_similarity",
    "normalize_email",
    "normalize_name",
    "normalize_tax_id",
    "plan_automatic_merge",
    "plan_group_operations",
    "plan_interactive_merge",
]
