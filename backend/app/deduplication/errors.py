"""Error taxonomy for duplicate detection and record merges."""

from __future__ import annotations


class MergeError(Exception):
    """Base class for failures surfaced by the merge engine."""

    code = "merge_error"


class NotAuthenticatedError(MergeError):
    """No acting user was identified for a write path."""

    code = "not_authenticated"

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class RecordNotFoundError(MergeError):
    """A provider (or merge intent) required by the operation does not exist."""

    code = "not_found"


class StoreWriteError(MergeError):
    """An update, insert or delete against the registry store failed."""

    code = "store_write_failed"


class RegistryReadError(MergeError):
    """The registry could not be read; aborts a scan."""

    code = "registry_read_failed"


class MergePolicyError(MergeError):
    """The requested merge is not allowed by policy (e.g. automatic fuzzy merges)."""

    code = "policy_violation"
