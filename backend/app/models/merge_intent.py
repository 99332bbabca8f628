"""Persisted merge intent marker."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin, TimestampMixin

MERGE_INTENT_STATUSES: tuple[str, ...] = ("pending", "failed", "completed")
MERGE_INTENT_STAGES: tuple[str, ...] = ("migrating", "audited")


class MergeIntent(Base, IdMixin, TimestampMixin):
    """Records a merge before its first write so interrupted merges stay detectable.

    Provider ids are plain integers: the source row is deleted when the intent completes.
    """

    __tablename__ = "merge_intents"

    target_provider_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    source_provider_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    match_type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="pending", index=True, nullable=False)
    stage: Mapped[str] = mapped_column(String(32), default="migrating", nullable=False)
    canonical_fields_json: Mapped[dict[str, object]] = mapped_column(JSON, default=dict, nullable=False)
    audit_json: Mapped[dict[str, object]] = mapped_column(JSON, default=dict, nullable=False)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
