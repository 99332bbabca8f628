"""Duplicate scan and merge schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.schemas.provider import ProviderRead

T = TypeVar("T")

Side = Literal["A", "B"]
ArraySide = Literal["A", "B", "merge"]


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope shared by the duplicate review routes."""

    data: T


class DuplicateGroupRead(BaseModel):
    """One group of mutually-duplicate providers."""

    model_config = ConfigDict(from_attributes=True)

    match_type: Literal["email", "tax_id", "name"]
    match_value: str
    similarity: int | None = None
    providers: list[ProviderRead]


class DuplicateScanRead(BaseModel):
    """Full scan output for human review."""

    model_config = ConfigDict(from_attributes=True)

    groups: list[DuplicateGroupRead]
    total_duplicates: int
    scanned_count: int


class MergeFieldSelection(BaseModel):
    """Per-field choice of which provider supplies the surviving value."""

    name: Side = "A"
    email: Side = "A"
    phone: Side = "A"
    tax_id: Side = "A"
    entity_type: Side = "A"
    website: Side = "A"
    services: ArraySide = "A"
    districts: ArraySide = "A"
    team_size: Side = "A"
    has_admin_team: Side = "A"
    has_own_transport: Side = "A"
    working_hours: Side = "A"
    status: Side = "A"
    relationship_owner_id: Side = "A"


class MergeRequest(BaseModel):
    """Interactive merge payload: provider A survives, provider B is removed."""

    provider_a_id: int = Field(ge=1)
    provider_b_id: int = Field(ge=1)
    field_selection: MergeFieldSelection = Field(default_factory=MergeFieldSelection)

    @model_validator(mode="after")
    def validate_distinct_providers(self) -> "MergeRequest":
        if self.provider_a_id == self.provider_b_id:
            raise ValueError("A provider cannot be merged with itself.")
        return self


class MergeResult(BaseModel):
    """Outcome of one interactive merge."""

    success: bool
    survivor_id: int | None = None
    removed_id: int | None = None
    error: str | None = None
    error_code: str | None = None


class QuickMergeResult(BaseModel):
    """Outcome of the automatic exact-duplicate merge pass."""

    success: bool
    merged_count: int = 0
    failed_count: int = 0
    error: str | None = None
    error_code: str | None = None


class RelatedDataSummary(BaseModel):
    """Counts of dependent records that would move during a merge."""

    notes_count: int = 0
    history_count: int = 0
    prices_count: int = 0
    has_onboarding_card: bool = False
    relationship_owner_name: str | None = None


class MergeCandidate(BaseModel):
    """One side of a merge comparison."""

    provider: ProviderRead
    related: RelatedDataSummary


class MergeComparison(BaseModel):
    """Side-by-side view of two providers before an interactive merge."""

    provider_a: MergeCandidate
    provider_b: MergeCandidate


class MergeIntentRead(BaseModel):
    """Serialized merge intent marker."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    target_provider_id: int
    source_provider_id: int
    match_type: str
    status: str
    stage: str
    error: str | None
    created_by: int | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime
