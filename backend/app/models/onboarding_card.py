"""Onboarding workflow card model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin, TimestampMixin


class OnboardingCard(Base, IdMixin, TimestampMixin):
    """Active kanban card; at most one per provider."""

    __tablename__ = "onboarding_cards"
    __table_args__ = (UniqueConstraint("provider_id", name="uq_onboarding_cards_provider_id"),)

    provider_id: Mapped[int] = mapped_column(
        ForeignKey("providers.id", ondelete="CASCADE"),
        nullable=False,
    )
    onboarding_type: Mapped[str] = mapped_column(String(32), default="normal", nullable=False)
    current_stage: Mapped[str] = mapped_column(String(64), nullable=False)
    owner_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
