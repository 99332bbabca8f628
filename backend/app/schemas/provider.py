"""Provider response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProviderRead(BaseModel):
    """Serialized provider record, also used as the in-memory snapshot during merges."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    entity_type: str
    tax_id: str | None = None
    email: str
    phone: str | None = None
    website: str | None = None
    services: list[str] | None = None
    districts: list[str] | None = None
    team_size: int | None = None
    has_admin_team: bool | None = None
    has_own_transport: bool | None = None
    working_hours: str | None = None
    status: str
    application_count: int = 0
    first_application_at: datetime | None = None
    onboarding_started_at: datetime | None = None
    activated_at: datetime | None = None
    suspended_at: datetime | None = None
    relationship_owner_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProviderMergeFields(BaseModel):
    """Canonical field set written to the surviving provider."""

    name: str
    email: str
    phone: str | None = None
    tax_id: str | None = None
    entity_type: str
    website: str | None = None
    team_size: int | None = None
    has_admin_team: bool | None = None
    has_own_transport: bool | None = None
    working_hours: str | None = None
    status: str
    relationship_owner_id: int | None = None
    services: list[str] | None = None
    districts: list[str] | None = None
    application_count: int
    first_application_at: datetime | None = None
