"""SQLAlchemy metadata registry import for Alembic."""

from app.models import (
    Alert,
    ApplicationHistory,
    HistoryLogEntry,
    MergeIntent,
    Note,
    OnboardingCard,
    OnboardingTask,
    PriorityProgressLog,
    Provider,
    ProviderDocument,
    ProviderPrice,
    ProviderPriceSnapshot,
    ProviderService,
    User,
)
from app.models.base import Base

__all__ = [
    "Base",
    "User",
    "Provider",
    "Note",
    "HistoryLogEntry",
    "ApplicationHistory",
    "Alert",
    "ProviderDocument",
    "ProviderPrice",
    "ProviderPriceSnapshot",
    "ProviderService",
    "PriorityProgressLog",
    "OnboardingCard",
    "OnboardingTask",
    "MergeIntent",
]
