"""Registry store boundary used by the duplicate detection and merge engine.

Every method runs in its own short session and commits on its own: the
merge engine sequences these calls, the store never spans a transaction
across them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.deduplication.errors import RecordNotFoundError, RegistryReadError, StoreWriteError
from app.models.base import Base
from app.models.history_log import HistoryLogEntry
from app.models.merge_intent import MergeIntent
from app.models.note import Note
from app.models.onboarding_card import OnboardingCard
from app.models.onboarding_task import OnboardingTask
from app.models.provider import Provider
from app.models.provider_price import ProviderPrice
from app.models.user import User
from app.schemas.duplicates import RelatedDataSummary
from app.schemas.provider import ProviderRead

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OnboardingCardRef:
    """The (at most one) onboarding card owned by a provider."""

    id: int
    provider_id: int


class RegistryStore:
    """Per-table read/filter/insert/update/delete operations over the registry."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    # Reads

    def list_providers(self, *, limit: int) -> list[ProviderRead]:
        """Complete registry ordered by creation time, bounded by an explicit limit."""

        stmt = select(Provider).order_by(Provider.created_at.asc(), Provider.id.asc()).limit(limit)
        try:
            with self._session_factory() as db:
                providers = [ProviderRead.model_validate(row) for row in db.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise RegistryReadError("Failed to read the provider registry") from exc
        if len(providers) >= limit:
            logger.warning("dedup.registry_scan_limit_reached limit=%d", limit)
        return providers

    def get_provider(self, provider_id: int) -> ProviderRead | None:
        try:
            with self._session_factory() as db:
                provider = db.get(Provider, provider_id)
                return ProviderRead.model_validate(provider) if provider is not None else None
        except SQLAlchemyError as exc:
            raise RegistryReadError(f"Failed to read provider {provider_id}") from exc

    def summarize_related(self, provider: ProviderRead) -> RelatedDataSummary:
        """Counts of records that follow this provider through a merge."""

        try:
            with self._session_factory() as db:
                owner_name = None
                if provider.relationship_owner_id is not None:
                    owner_name = db.scalar(select(User.name).where(User.id == provider.relationship_owner_id))
                return RelatedDataSummary(
                    notes_count=_count_for_provider(db, Note, provider.id),
                    history_count=_count_for_provider(db, HistoryLogEntry, provider.id),
                    prices_count=_count_for_provider(db, ProviderPrice, provider.id),
                    has_onboarding_card=db.scalar(
                        select(OnboardingCard.id).where(OnboardingCard.provider_id == provider.id)
                    )
                    is not None,
                    relationship_owner_name=owner_name,
                )
        except SQLAlchemyError as exc:
            raise RegistryReadError(f"Failed to summarize related data for provider {provider.id}") from exc

    def get_onboarding_card(self, provider_id: int) -> OnboardingCardRef | None:
        stmt = select(OnboardingCard.id, OnboardingCard.provider_id).where(
            OnboardingCard.provider_id == provider_id
        )
        try:
            with self._session_factory() as db:
                row = db.execute(stmt).first()
        except SQLAlchemyError as exc:
            raise RegistryReadError(f"Failed to read onboarding card for provider {provider_id}") from exc
        if row is None:
            return None
        return OnboardingCardRef(id=row.id, provider_id=row.provider_id)

    def user_exists(self, user_id: int) -> bool:
        try:
            with self._session_factory() as db:
                return db.scalar(select(User.id).where(User.id == user_id)) is not None
        except SQLAlchemyError as exc:
            raise RegistryReadError(f"Failed to read user {user_id}") from exc

    def get_merge_intent(self, intent_id: int) -> MergeIntent | None:
        try:
            with self._session_factory() as db:
                return db.get(MergeIntent, intent_id)
        except SQLAlchemyError as exc:
            raise RegistryReadError(f"Failed to read merge intent {intent_id}") from exc

    def list_merge_intents(self, *, statuses: Iterable[str]) -> list[MergeIntent]:
        stmt = (
            select(MergeIntent)
            .where(MergeIntent.status.in_(list(statuses)))
            .order_by(MergeIntent.id.asc())
        )
        try:
            with self._session_factory() as db:
                return list(db.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise RegistryReadError("Failed to list merge intents") from exc

    # Writes

    def update_provider(self, provider_id: int, values: Mapping[str, Any]) -> None:
        stmt = update(Provider).where(Provider.id == provider_id).values(**values)
        if self._write(stmt, action=f"update provider {provider_id}") == 0:
            raise RecordNotFoundError(f"Provider {provider_id} not found")

    def repoint_provider_rows(self, model: type[Base], *, from_provider_id: int, to_provider_id: int) -> int:
        """Move every row of a provider-keyed child table from one provider to another."""

        table = model.__table__
        stmt = (
            update(table)
            .where(table.c.provider_id == from_provider_id)
            .values(provider_id=to_provider_id)
        )
        return self._write(
            stmt,
            action=f"re-point {table.name} from provider {from_provider_id} to {to_provider_id}",
        )

    def move_onboarding_tasks(self, *, from_card_id: int, to_card_id: int) -> int:
        stmt = update(OnboardingTask).where(OnboardingTask.card_id == from_card_id).values(card_id=to_card_id)
        return self._write(stmt, action=f"move onboarding tasks from card {from_card_id} to {to_card_id}")

    def reassign_onboarding_card(self, card_id: int, *, provider_id: int) -> None:
        stmt = update(OnboardingCard).where(OnboardingCard.id == card_id).values(provider_id=provider_id)
        self._write(stmt, action=f"reassign onboarding card {card_id} to provider {provider_id}")

    def delete_onboarding_card(self, card_id: int) -> None:
        self._write(delete(OnboardingCard).where(OnboardingCard.id == card_id), action=f"delete onboarding card {card_id}")

    def append_history_entry(
        self,
        *,
        provider_id: int,
        event_type: str,
        description: str,
        old_value: dict[str, Any] | None,
        new_value: dict[str, Any] | None,
        created_by: int | None,
    ) -> None:
        stmt = insert(HistoryLogEntry).values(
            provider_id=provider_id,
            event_type=event_type,
            description=description,
            old_value=old_value,
            new_value=new_value,
            created_by=created_by,
        )
        self._write(stmt, action=f"append history entry for provider {provider_id}")

    def delete_provider(self, provider_id: int) -> None:
        stmt = delete(Provider).where(Provider.id == provider_id)
        if self._write(stmt, action=f"delete provider {provider_id}") == 0:
            raise RecordNotFoundError(f"Provider {provider_id} not found")

    def create_merge_intent(
        self,
        *,
        target_provider_id: int,
        source_provider_id: int,
        match_type: str,
        canonical_fields: dict[str, Any],
        audit: dict[str, Any],
        created_by: int | None,
    ) -> int:
        intent = MergeIntent(
            target_provider_id=target_provider_id,
            source_provider_id=source_provider_id,
            match_type=match_type,
            status="pending",
            stage="migrating",
            canonical_fields_json=canonical_fields,
            audit_json=audit,
            created_by=created_by,
        )
        try:
            with self._session_factory() as db:
                db.add(intent)
                db.flush()
                intent_id = intent.id
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreWriteError(
                f"create merge intent for provider {source_provider_id} into {target_provider_id} failed"
            ) from exc
        return intent_id

    def update_merge_intent(self, intent_id: int, **values: Any) -> None:
        if values.get("status") == "completed":
            values.setdefault("completed_at", datetime.now(timezone.utc))
        stmt = update(MergeIntent).where(MergeIntent.id == intent_id).values(**values)
        self._write(stmt, action=f"update merge intent {intent_id}")

    def _write(self, statement, *, action: str) -> int:
        try:
            with self._session_factory() as db:
                result = db.execute(statement)
                rowcount = result.rowcount
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"{action} failed") from exc
        return rowcount


def _count_for_provider(db: Session, model: type[Base], provider_id: int) -> int:
    table = model.__table__
    return int(db.scalar(select(func.count()).select_from(table).where(table.c.provider_id == provider_id)) or 0)
