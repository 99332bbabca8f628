"""Provider price entry model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin, TimestampMixin


class ProviderPrice(Base, IdMixin, TimestampMixin):
    """Negotiated price for one catalog service."""

    __tablename__ = "provider_prices"

    provider_id: Mapped[int] = mapped_column(
        ForeignKey("providers.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    service_key: Mapped[str] = mapped_column(String(128), nullable=False)
    variant_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price_without_vat: Mapped[float] = mapped_column(Float, nullable=False)
    valid_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    valid_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
