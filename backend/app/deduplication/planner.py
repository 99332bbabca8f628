"""Field-level reconciliation for provider merges.

Nothing in this module touches the store: planners take provider snapshots
and return the canonical field set to be written to the survivor.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.deduplication.errors import MergePolicyError
from app.deduplication.scanner import DuplicateGroup
from app.schemas.duplicates import MergeFieldSelection
from app.schemas.provider import ProviderRead

SCALAR_MERGE_FIELDS: tuple[str, ...] = (
    "name",
    "email",
    "phone",
    "tax_id",
    "entity_type",
    "website",
    "team_size",
    "has_admin_team",
    "has_own_transport",
    "working_hours",
    "status",
    "relationship_owner_id",
)
ARRAY_MERGE_FIELDS: tuple[str, ...] = ("services", "districts")
MANUAL_MATCH_TYPE = "manual"


@dataclass(slots=True)
class MergeOperation:
    """One source provider to fold into a survivor."""

    target_id: int
    source_id: int
    canonical_fields: dict[str, Any]
    match_type: str
    source: ProviderRead
    field_selection: dict[str, str] | None = None

    @property
    def source_name(self) -> str:
        return self.source.name

    @property
    def source_email(self) -> str | None:
        return self.source.email

    @property
    def source_tax_id(self) -> str | None:
        return self.source.tax_id


@dataclass(slots=True)
class GroupMergePlan:
    """Operations for one exact-match group, all sharing the same survivor."""

    survivor: ProviderRead
    operations: list[MergeOperation] = field(default_factory=list)


def union_values(left: Iterable[str] | None, right: Iterable[str] | None) -> list[str]:
    """Set union that keeps first-seen order."""

    return list(dict.fromkeys([*(left or []), *(right or [])]))


def earliest(left: datetime | None, right: datetime | None) -> datetime | None:
    if left is not None and right is not None:
        return left if left <= right else right
    return left if left is not None else right


def plan_interactive_merge(
    provider_a: ProviderRead,
    provider_b: ProviderRead,
    selection: MergeFieldSelection,
) -> dict[str, Any]:
    """Canonical fields for a user-confirmed merge where A survives."""

    sides = {"A": provider_a, "B": provider_b}
    merged: dict[str, Any] = {
        name: getattr(sides[getattr(selection, name)], name) for name in SCALAR_MERGE_FIELDS
    }
    for name in ARRAY_MERGE_FIELDS:
        choice = getattr(selection, name)
        if choice == "merge":
            merged[name] = union_values(getattr(provider_a, name), getattr(provider_b, name))
        else:
            merged[name] = getattr(sides[choice], name)
    merged.update(_combined_counters(provider_a, provider_b))
    return merged


def plan_automatic_merge(target: ProviderRead, source: ProviderRead) -> dict[str, Any]:
    """Canonical fields where the target wins unless its value is empty."""

    merged: dict[str, Any] = {}
    for name in SCALAR_MERGE_FIELDS:
        target_value = getattr(target, name)
        merged[name] = getattr(source, name) if _is_blank(target_value) else target_value
    for name in ARRAY_MERGE_FIELDS:
        merged[name] = union_values(getattr(target, name), getattr(source, name))
    merged.update(_combined_counters(target, source))
    return merged


def plan_group_operations(group: DuplicateGroup) -> GroupMergePlan:
    """Oldest provider survives; every other member becomes one operation.

    Fields are folded cumulatively so each operation already carries the
    contributions of the sources planned before it.
    """

    if not group.is_exact:
        raise MergePolicyError(
            f"Automatic merge is only allowed for exact matches, got {group.match_type!r} "
            f"for {group.match_value!r}"
        )
    if len(group.providers) < 2:
        raise MergePolicyError(f"Duplicate group {group.match_value!r} has fewer than two providers")

    ordered = sorted(group.providers, key=_created_at_key)
    survivor = ordered[0]
    return GroupMergePlan(
        survivor=survivor,
        operations=rebase_operations(
            survivor,
            [
                MergeOperation(
                    target_id=survivor.id,
                    source_id=source.id,
                    canonical_fields={},
                    match_type=group.match_type,
                    source=source,
                )
                for source in ordered[1:]
            ],
        ),
    )


def rebase_operations(state: ProviderRead, operations: Sequence[MergeOperation]) -> list[MergeOperation]:
    """Re-plan pending operations on top of the survivor's current state."""

    rebased: list[MergeOperation] = []
    for operation in operations:
        fields = plan_automatic_merge(state, operation.source)
        rebased.append(
            MergeOperation(
                target_id=operation.target_id,
                source_id=operation.source_id,
                canonical_fields=fields,
                match_type=operation.match_type,
                source=operation.source,
                field_selection=operation.field_selection,
            )
        )
        state = apply_fields(state, fields)
    return rebased


def apply_fields(provider: ProviderRead, fields: dict[str, Any]) -> ProviderRead:
    return provider.model_copy(update=fields)


def _combined_counters(left: ProviderRead, right: ProviderRead) -> dict[str, Any]:
    return {
        "application_count": (left.application_count or 0) + (right.application_count or 0),
        "first_application_at": earliest(left.first_application_at, right.first_application_at),
    }


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _created_at_key(provider: ProviderRead) -> tuple[int, datetime | None]:
    # Missing creation time sorts first, matching an epoch default.
    if provider.created_at is None:
        return (0, None)
    return (1, provider.created_at)
