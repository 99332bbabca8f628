"""ORM models package exports."""

from app.models.alert import Alert
from app.models.application_history import ApplicationHistory
from app.models.history_log import HistoryLogEntry
from app.models.merge_intent import MergeIntent
from app.models.note import Note
from app.models.onboarding_card import OnboardingCard
from app.models.onboarding_task import OnboardingTask
from app.models.priority_progress_log import PriorityProgressLog
from app.models.provider import Provider
from app.models.provider_document import ProviderDocument
from app.models.provider_price import ProviderPrice
from app.models.provider_price_snapshot import ProviderPriceSnapshot
from app.models.provider_service import ProviderService
from app.models.user import User

__all__ = [
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
