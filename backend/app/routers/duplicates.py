"""Duplicate review and provider merge routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from app.db.dependencies import get_actor_id, get_registry_store
from app.deduplication.errors import MergeError, RecordNotFoundError, RegistryReadError
from app.schemas.duplicates import (
    ApiResponse,
    DuplicateScanRead,
    MergeComparison,
    MergeIntentRead,
    MergeRequest,
    MergeResult,
    QuickMergeResult,
)
from app.services.duplicates import (
    get_providers_for_merge,
    list_merge_intents,
    merge_providers,
    quick_merge_exact_duplicates,
    resume_merge_intent,
    scan_for_duplicates,
)
from app.services.registry import RegistryStore

router = APIRouter(prefix="/providers")

_STATUS_BY_ERROR_CODE = {
    "not_authenticated": 401,
    "not_found": 404,
    "policy_violation": 409,
    "registry_read_failed": 503,
    "store_write_failed": 502,
}


def _raise_for_error_code(error_code: str | None, detail: str | None) -> None:
    status_code = _STATUS_BY_ERROR_CODE.get(error_code or "", 500)
    raise HTTPException(status_code=status_code, detail=detail or "Merge failed")


@router.get("/duplicates", response_model=ApiResponse[DuplicateScanRead])
def get_duplicates(store: RegistryStore = Depends(get_registry_store)) -> ApiResponse[DuplicateScanRead]:
    """Scan the registry for duplicate providers."""

    try:
        result = scan_for_duplicates(store)
    except RegistryReadError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return ApiResponse(data=DuplicateScanRead.model_validate(result, from_attributes=True))


@router.get("/merge-preview", response_model=ApiResponse[MergeComparison])
def get_merge_preview(
    provider_a_id: int = Query(..., ge=1),
    provider_b_id: int = Query(..., ge=1),
    store: RegistryStore = Depends(get_registry_store),
) -> ApiResponse[MergeComparison]:
    """Both providers side by side with the related data that would move."""

    try:
        comparison = get_providers_for_merge(store, provider_a_id, provider_b_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except MergeError as exc:
        _raise_for_error_code(exc.code, str(exc))
    return ApiResponse(data=comparison)


@router.post("/merge", response_model=ApiResponse[MergeResult])
def post_merge(
    payload: MergeRequest,
    store: RegistryStore = Depends(get_registry_store),
    actor_id: int | None = Depends(get_actor_id),
) -> ApiResponse[MergeResult]:
    """Merge provider B into provider A with the selected fields."""

    result = merge_providers(
        store,
        payload.provider_a_id,
        payload.provider_b_id,
        payload.field_selection,
        actor_id=actor_id,
    )
    if not result.success:
        _raise_for_error_code(result.error_code, result.error)
    return ApiResponse(data=result)


@router.post("/duplicates/quick-merge", response_model=ApiResponse[QuickMergeResult])
def post_quick_merge(
    store: RegistryStore = Depends(get_registry_store),
    actor_id: int | None = Depends(get_actor_id),
) -> ApiResponse[QuickMergeResult]:
    """Merge every exact email/tax-id duplicate group automatically."""

    result = quick_merge_exact_duplicates(store, actor_id=actor_id)
    if not result.success:
        _raise_for_error_code(result.error_code, result.error)
    return ApiResponse(data=result)


@router.get("/merge-intents", response_model=ApiResponse[list[MergeIntentRead]])
def get_merge_intents(
    status: list[str] = Query(default=["pending", "failed"]),
    store: RegistryStore = Depends(get_registry_store),
) -> ApiResponse[list[MergeIntentRead]]:
    """Merges that were started but not completed."""

    try:
        intents = list_merge_intents(store, statuses=status)
    except RegistryReadError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return ApiResponse(data=[MergeIntentRead.model_validate(intent) for intent in intents])


@router.post("/merge-intents/{intent_id}/resume", response_model=ApiResponse[MergeResult])
def post_resume_merge_intent(
    intent_id: int = Path(..., ge=1),
    store: RegistryStore = Depends(get_registry_store),
    actor_id: int | None = Depends(get_actor_id),
) -> ApiResponse[MergeResult]:
    """Resume an interrupted merge."""

    result = resume_merge_intent(store, intent_id, actor_id=actor_id)
    if not result.success:
        _raise_for_error_code(result.error_code, result.error)
    return ApiResponse(data=result)
