"""Re-point a removed provider's dependent records onto the survivor."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, wait
from typing import Literal

from app.models.alert import Alert
from app.models.application_history import ApplicationHistory
from app.models.base import Base
from app.models.history_log import HistoryLogEntry
from app.models.note import Note
from app.models.priority_progress_log import PriorityProgressLog
from app.models.provider_document import ProviderDocument
from app.models.provider_price import ProviderPrice
from app.models.provider_price_snapshot import ProviderPriceSnapshot
from app.models.provider_service import ProviderService
from app.services.registry import RegistryStore

logger = logging.getLogger(__name__)

# One-to-many tables keyed by provider_id. Onboarding cards are singular and handled separately.
PROVIDER_CHILD_MODELS: tuple[type[Base], ...] = (
    Note,
    HistoryLogEntry,
    ApplicationHistory,
    Alert,
    ProviderDocument,
    ProviderPrice,
    ProviderPriceSnapshot,
    ProviderService,
    PriorityProgressLog,
)

CardOutcome = Literal["none", "reassigned", "folded"]


def migrate_relationships(
    store: RegistryStore,
    *,
    target_id: int,
    source_id: int,
    executor: Executor | None = None,
) -> dict[str, int]:
    """Move every provider-keyed child row from source to target.

    Updates are independent of each other; with an executor they are issued in
    parallel. All submitted updates finish before the first failure is raised.
    Re-running is a no-op once nothing points at the source anymore.
    """

    moved: dict[str, int] = {}
    if executor is None:
        for model in PROVIDER_CHILD_MODELS:
            moved[model.__tablename__] = store.repoint_provider_rows(
                model, from_provider_id=source_id, to_provider_id=target_id
            )
        return moved

    futures = {
        executor.submit(
            store.repoint_provider_rows,
            model,
            from_provider_id=source_id,
            to_provider_id=target_id,
        ): model
        for model in PROVIDER_CHILD_MODELS
    }
    wait(futures)
    first_error: BaseException | None = None
    for future, model in futures.items():
        error = future.exception()
        if error is not None:
            first_error = first_error or error
            continue
        moved[model.__tablename__] = future.result()
    if first_error is not None:
        raise first_error
    return moved


def reconcile_onboarding_cards(store: RegistryStore, *, target_id: int, source_id: int) -> CardOutcome:
    """Leave the survivor with exactly one onboarding card when either side had one.

    Reads then writes card state, so it runs sequentially after the parallel
    relation updates and before the audit entry.
    """

    source_card = store.get_onboarding_card(source_id)
    if source_card is None:
        return "none"

    target_card = store.get_onboarding_card(target_id)
    if target_card is None:
        store.reassign_onboarding_card(source_card.id, provider_id=target_id)
        return "reassigned"

    moved = store.move_onboarding_tasks(from_card_id=source_card.id, to_card_id=target_card.id)
    store.delete_onboarding_card(source_card.id)
    logger.info(
        "dedup.onboarding_card_folded target_card_id=%s source_card_id=%s tasks_moved=%d",
        target_card.id,
        source_card.id,
        moved,
    )
    return "folded"
