"""Provider ORM model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin, TimestampMixin

ENTITY_TYPE_VALUES: tuple[str, ...] = ("individual", "sole_trader", "company")
PROVIDER_STATUS_VALUES: tuple[str, ...] = ("new", "onboarding", "active", "suspended", "abandoned")


class Provider(Base, IdMixin, TimestampMixin):
    """Service provider registry record."""

    __tablename__ = "providers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(32), default="individual", nullable=False)
    tax_id: Mapped[str | None] = mapped_column(String(32), index=True, nullable=True)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    website: Mapped[str | None] = mapped_column(String(512), nullable=True)
    services: Mapped[list[str] | None] = mapped_column(JSON, default=list, nullable=True)
    districts: Mapped[list[str] | None] = mapped_column(JSON, default=list, nullable=True)
    team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    has_admin_team: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    has_own_transport: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    working_hours: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="new", index=True, nullable=False)
    application_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    first_application_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    onboarding_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    suspended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    relationship_owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
