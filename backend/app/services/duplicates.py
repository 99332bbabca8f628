"""Duplicate scan and provider merge services."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from functools import partial
from time import perf_counter
from typing import Any

from app.config import get_settings
from app.deduplication.errors import (
    MergeError,
    MergePolicyError,
    NotAuthenticatedError,
    RecordNotFoundError,
    RegistryReadError,
    StoreWriteError,
)
from app.deduplication.planner import (
    MANUAL_MATCH_TYPE,
    GroupMergePlan,
    MergeOperation,
    apply_fields,
    plan_group_operations,
    plan_interactive_merge,
    rebase_operations,
)
from app.deduplication.scanner import DuplicateGroup, DuplicateScanner, DuplicateScanResult
from app.models.history_log import MERGE_EVENT_TYPE
from app.models.merge_intent import MergeIntent
from app.schemas.duplicates import (
    MergeCandidate,
    MergeComparison,
    MergeFieldSelection,
    MergeResult,
    QuickMergeResult,
)
from app.schemas.provider import ProviderMergeFields
from app.services.merge_migration import migrate_relationships, reconcile_onboarding_cards
from app.services.registry import RegistryStore

logger = logging.getLogger(__name__)


def scan_for_duplicates(
    store: RegistryStore,
    *,
    name_similarity_threshold: int | None = None,
    mask_character: str | None = None,
    limit: int | None = None,
) -> DuplicateScanResult:
    """Read the complete registry and group duplicates by email, tax id and name."""

    settings = get_settings()
    started = perf_counter()
    providers = store.list_providers(limit=limit or settings.registry_scan_limit)
    scanner = DuplicateScanner(
        name_similarity_threshold=(
            settings.duplicate_name_similarity_threshold
            if name_similarity_threshold is None
            else name_similarity_threshold
        ),
        mask_character=mask_character or settings.duplicate_mask_character,
    )
    result = scanner.scan(providers)
    logger.info(
        "dedup.scan_timing scanned=%d groups=%d duplicates=%d total_ms=%.2f",
        result.scanned_count,
        len(result.groups),
        result.total_duplicates,
        (perf_counter() - started) * 1000.0,
    )
    return result


def get_providers_for_merge(store: RegistryStore, provider_a_id: int, provider_b_id: int) -> MergeComparison:
    """Both providers with a summary of what would move on merge."""

    provider_a = store.get_provider(provider_a_id)
    provider_b = store.get_provider(provider_b_id)
    if provider_a is None or provider_b is None:
        missing = provider_a_id if provider_a is None else provider_b_id
        raise RecordNotFoundError(f"Provider {missing} not found")
    return MergeComparison(
        provider_a=MergeCandidate(provider=provider_a, related=store.summarize_related(provider_a)),
        provider_b=MergeCandidate(provider=provider_b, related=store.summarize_related(provider_b)),
    )


def merge_providers(
    store: RegistryStore,
    provider_a_id: int,
    provider_b_id: int,
    selection: MergeFieldSelection,
    *,
    actor_id: int | None,
) -> MergeResult:
    """Merge B into A using the user's field selection; B is deleted last."""

    try:
        _require_actor(store, actor_id)
        if provider_a_id == provider_b_id:
            raise MergePolicyError("A provider cannot be merged with itself")
        provider_a = store.get_provider(provider_a_id)
        provider_b = store.get_provider(provider_b_id)
        if provider_a is None or provider_b is None:
            missing = provider_a_id if provider_a is None else provider_b_id
            raise RecordNotFoundError(f"Provider {missing} not found")

        operation = MergeOperation(
            target_id=provider_a.id,
            source_id=provider_b.id,
            canonical_fields=plan_interactive_merge(provider_a, provider_b, selection),
            match_type=MANUAL_MATCH_TYPE,
            source=provider_b,
            field_selection=selection.model_dump(),
        )
        execute_merge_operation(store, operation, actor_id=actor_id)
    except MergeError as exc:
        logger.warning(
            "dedup.merge_failed target_id=%s source_id=%s code=%s error=%s",
            provider_a_id,
            provider_b_id,
            exc.code,
            exc,
        )
        return MergeResult(success=False, error=str(exc), error_code=exc.code)

    return MergeResult(success=True, survivor_id=provider_a_id, removed_id=provider_b_id)


def quick_merge_exact_duplicates(
    store: RegistryStore,
    *,
    actor_id: int | None,
    chunk_size: int | None = None,
    relation_workers: int | None = None,
    mask_character: str | None = None,
    limit: int | None = None,
) -> QuickMergeResult:
    """Automatically merge every email and tax-id duplicate group; the oldest record survives."""

    settings = get_settings()
    started = perf_counter()
    try:
        _require_actor(store, actor_id)
        providers = store.list_providers(limit=limit or settings.registry_scan_limit)
    except (NotAuthenticatedError, RegistryReadError) as exc:
        return QuickMergeResult(success=False, error=str(exc), error_code=exc.code)

    scanner = DuplicateScanner(mask_character=mask_character or settings.duplicate_mask_character)
    scan = scanner.scan(providers, include_name_pass=False)
    result = merge_duplicate_groups(
        store,
        scan.groups,
        actor_id=actor_id,
        chunk_size=chunk_size,
        relation_workers=relation_workers,
    )
    logger.info(
        "dedup.quick_merge_timing groups=%d merged=%d failed=%d total_ms=%.2f",
        len(scan.groups),
        result.merged_count,
        result.failed_count,
        (perf_counter() - started) * 1000.0,
    )
    return result


def merge_duplicate_groups(
    store: RegistryStore,
    groups: Sequence[DuplicateGroup],
    *,
    actor_id: int | None,
    chunk_size: int | None = None,
    relation_workers: int | None = None,
) -> QuickMergeResult:
    """Bulk-merge exact-match groups with bounded concurrency.

    Groups are processed in concurrent chunks; the operations of one group run
    in order against their shared survivor. A failed operation is counted and
    logged without stopping any other operation. Fuzzy groups are rejected
    before anything is written.
    """

    _require_actor(store, actor_id)
    settings = get_settings()
    chunk_size = chunk_size or settings.quick_merge_chunk_size
    relation_workers = relation_workers or settings.relation_migration_workers
    plans = [plan_group_operations(group) for group in groups]

    merged_count = 0
    failed_count = 0
    # Separate pools: merge workers block on relation updates, so they must not share workers.
    with ThreadPoolExecutor(max_workers=relation_workers, thread_name_prefix="dedup-relations") as relation_executor:
        run_plan = partial(
            _run_group_plan,
            store,
            actor_id=actor_id,
            relation_executor=relation_executor,
        )
        with ThreadPoolExecutor(max_workers=chunk_size, thread_name_prefix="dedup-merge") as merge_executor:
            for start in range(0, len(plans), chunk_size):
                for outcomes in merge_executor.map(run_plan, plans[start : start + chunk_size]):
                    merged_count += sum(outcomes)
                    failed_count += len(outcomes) - sum(outcomes)

    return QuickMergeResult(success=True, merged_count=merged_count, failed_count=failed_count)


def execute_merge_operation(
    store: RegistryStore,
    operation: MergeOperation,
    *,
    actor_id: int | None,
    relation_executor: Executor | None = None,
) -> None:
    """Record intent, write the canonical fields, move relations, audit, then delete the source."""

    audit = build_audit_payload(operation)
    fields = ProviderMergeFields.model_validate(operation.canonical_fields)
    intent_id = store.create_merge_intent(
        target_provider_id=operation.target_id,
        source_provider_id=operation.source_id,
        match_type=operation.match_type,
        canonical_fields=fields.model_dump(mode="json"),
        audit=audit,
        created_by=actor_id,
    )
    try:
        _apply_merge(
            store,
            intent_id=intent_id,
            target_id=operation.target_id,
            source_id=operation.source_id,
            fields=fields.model_dump(),
            audit=audit,
            actor_id=actor_id,
            audited=False,
            relation_executor=relation_executor,
        )
    except MergeError as exc:
        _mark_intent_failed(store, intent_id, exc)
        raise


def build_audit_payload(operation: MergeOperation) -> dict[str, Any]:
    """Description and value snapshots for the survivor's history entry."""

    if operation.field_selection is not None:
        return {
            "description": f"Provider merged with another record (ID: {operation.source_id})",
            "old_value": {"merged_provider": operation.source.model_dump(mode="json")},
            "new_value": {"merged_fields": operation.field_selection},
        }
    matched = operation.source_email if operation.match_type == "email" else operation.source_tax_id
    return {
        "description": f"Quick merge: merged duplicate provider ({operation.match_type}: {matched})",
        "old_value": {
            "merged_provider_id": operation.source_id,
            "merged_provider_name": operation.source_name,
        },
        "new_value": {"match_type": operation.match_type},
    }


def list_merge_intents(store: RegistryStore, *, statuses: Iterable[str] = ("pending", "failed")) -> list[MergeIntent]:
    """Merges that started but never completed."""

    return store.list_merge_intents(statuses=statuses)


def resume_merge_intent(store: RegistryStore, intent_id: int, *, actor_id: int | None) -> MergeResult:
    """Re-run an interrupted merge from its persisted intent."""

    try:
        _require_actor(store, actor_id)
        intent = store.get_merge_intent(intent_id)
        if intent is None:
            raise RecordNotFoundError(f"Merge intent {intent_id} not found")
        target_id = intent.target_provider_id
        source_id = intent.source_provider_id

        if intent.status != "completed":
            if store.get_provider(source_id) is None:
                store.update_merge_intent(intent.id, status="completed", error=None)
            else:
                if store.get_provider(target_id) is None:
                    raise RecordNotFoundError(f"Provider {target_id} not found")
                store.update_merge_intent(intent.id, status="pending", error=None)
                fields = ProviderMergeFields.model_validate(intent.canonical_fields_json)
                try:
                    _apply_merge(
                        store,
                        intent_id=intent.id,
                        target_id=target_id,
                        source_id=source_id,
                        fields=fields.model_dump(),
                        audit=intent.audit_json,
                        actor_id=actor_id,
                        audited=intent.stage == "audited",
                    )
                except MergeError as exc:
                    _mark_intent_failed(store, intent.id, exc)
                    raise
    except MergeError as exc:
        logger.warning("dedup.merge_resume_failed intent_id=%s code=%s error=%s", intent_id, exc.code, exc)
        return MergeResult(success=False, error=str(exc), error_code=exc.code)

    return MergeResult(success=True, survivor_id=target_id, removed_id=source_id)


def _run_group_plan(
    store: RegistryStore,
    plan: GroupMergePlan,
    *,
    actor_id: int | None,
    relation_executor: Executor,
) -> list[bool]:
    state = plan.survivor
    pending = list(plan.operations)
    outcomes: list[bool] = []
    while pending:
        operation = pending.pop(0)
        try:
            execute_merge_operation(store, operation, actor_id=actor_id, relation_executor=relation_executor)
        except Exception:
            logger.exception(
                "dedup.quick_merge_operation_failed target_id=%s source_id=%s match_type=%s",
                operation.target_id,
                operation.source_id,
                operation.match_type,
            )
            outcomes.append(False)
            # Later operations were folded on top of this one; plan them again without it.
            pending = rebase_operations(state, pending)
            continue
        state = apply_fields(state, operation.canonical_fields)
        outcomes.append(True)
    return outcomes


def _apply_merge(
    store: RegistryStore,
    *,
    intent_id: int,
    target_id: int,
    source_id: int,
    fields: dict[str, Any],
    audit: dict[str, Any],
    actor_id: int | None,
    audited: bool,
    relation_executor: Executor | None = None,
) -> None:
    started = perf_counter()
    store.update_provider(target_id, fields)
    moved = migrate_relationships(store, target_id=target_id, source_id=source_id, executor=relation_executor)
    card_outcome = reconcile_onboarding_cards(store, target_id=target_id, source_id=source_id)
    if not audited:
        store.append_history_entry(
            provider_id=target_id,
            event_type=MERGE_EVENT_TYPE,
            description=audit["description"],
            old_value=audit["old_value"],
            new_value=audit["new_value"],
            created_by=actor_id,
        )
        store.update_merge_intent(intent_id, stage="audited")
    # Deletion stays last: it only runs once every relation and the audit entry are in place.
    store.delete_provider(source_id)
    store.update_merge_intent(intent_id, status="completed", error=None)
    logger.info(
        "dedup.merge_completed target_id=%s source_id=%s rows_moved=%d card=%s total_ms=%.2f",
        target_id,
        source_id,
        sum(moved.values()),
        card_outcome,
        (perf_counter() - started) * 1000.0,
    )


def _mark_intent_failed(store: RegistryStore, intent_id: int, error: MergeError) -> None:
    try:
        store.update_merge_intent(intent_id, status="failed", error=str(error))
    except StoreWriteError:
        logger.exception("dedup.merge_intent_update_failed intent_id=%s", intent_id)


def _require_actor(store: RegistryStore, actor_id: int | None) -> None:
    # Checked before the intent row: audit entries reference users.id.
    if actor_id is None:
        raise NotAuthenticatedError()
    if not store.user_exists(actor_id):
        raise NotAuthenticatedError(f"Unknown acting user {actor_id}")
