"""Onboarding task model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin, TimestampMixin


class OnboardingTask(Base, IdMixin, TimestampMixin):
    """Checklist task belonging to an onboarding card."""

    __tablename__ = "onboarding_tasks"

    card_id: Mapped[int] = mapped_column(
        ForeignKey("onboarding_cards.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    task_key: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="todo", nullable=False)
    owner_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    deadline_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
