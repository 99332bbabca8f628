"""Provider price snapshot model."""

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class ProviderPriceSnapshot(Base, IdMixin, CreatedAtMixin):
    """Frozen copy of a provider's price table."""

    __tablename__ = "provider_price_snapshots"

    provider_id: Mapped[int] = mapped_column(
        ForeignKey("providers.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    snapshot_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    snapshot_data: Mapped[dict[str, object]] = mapped_column(JSON, default=dict, nullable=False)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
