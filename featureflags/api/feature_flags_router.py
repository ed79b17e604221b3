"""
Feature Flags API Router.

Provides REST API for managing feature flags:
- List flags stored in a scope
- Get the resolved status of a flag
- Enable, disable and remove flags
- Evaluate several flags at once
- Copy a scope

Every request works on a freshly bound service, so the resolution cache
lives exactly as long as the request. Handlers are plain functions because
the stores block; FastAPI runs them in its threadpool.

Usage:
    from featureflags.api.feature_flags_router import router as feature_flags_router
    app.include_router(feature_flags_router, tags=["feature-flags"])
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from featureflags.core.exceptions import FeatureValidationError, StorageError
from featureflags.feature_mgmt.service import FeatureService, get_feature_service
from featureflags.storage.base import GLOBAL_SCOPE, FeatureRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/flags")


# Pydantic models for API
class FlagRecordResponse(BaseModel):
    """A record stored in one scope."""

    name: str
    scope: str
    enabled: bool
    value: Any = None
    created_at: Optional[str] = None
    modified_at: Optional[str] = None


class FlagStatusResponse(BaseModel):
    """Resolved status of a flag for a scope, after fallback and definitions."""

    name: str
    scope: str
    enabled: bool
    value: Any = None


class FlagEnableRequest(BaseModel):
    """Request model for enabling a flag."""

    value: Any = None


class FlagEvaluationRequest(BaseModel):
    """Request model for evaluating flags."""

    scope: str = GLOBAL_SCOPE
    names: List[str] = Field(default_factory=list)


class FlagEvaluationResponse(BaseModel):
    """Response model for flag evaluation."""

    scope: str
    results: Dict[str, bool]
    any: bool
    all: bool


class ScopeCopyRequest(BaseModel):
    """Request model for copying a scope."""

    from_scope: str
    to_scope: str
    overwrite: bool = False


class ScopeCopyResponse(BaseModel):
    from_scope: str
    to_scope: str
    copied: int


def get_service() -> FeatureService:
    """Base service; override in tests via app.dependency_overrides."""
    return get_feature_service()


def _to_response(record: FeatureRecord) -> FlagRecordResponse:
    return FlagRecordResponse(**record.to_dict())


def _raise_http(exc: Exception, action: str) -> None:
    if isinstance(exc, FeatureValidationError):
        raise HTTPException(status_code=422, detail=exc.message) from exc
    logger.error(f"Feature store unavailable during {action}: {exc}")
    raise HTTPException(
        status_code=503,
        detail="Feature flag storage unavailable",
    ) from exc


@router.get("", response_model=List[FlagRecordResponse])
def list_flags(
    scope: str = Query(GLOBAL_SCOPE),
    service: FeatureService = Depends(get_service),
):
    """
    List all feature flags stored in a scope.

    Returns:
        Records ordered by name, without fallback
    """
    try:
        records = service.bind_scope(scope).list_all()
    except StorageError as e:
        _raise_http(e, "list")

    return [_to_response(r) for r in records]


@router.post("/evaluate", response_model=FlagEvaluationResponse)
def evaluate_flags(
    request: FlagEvaluationRequest,
    service: FeatureService = Depends(get_service),
):
    """
    Evaluate several feature flags for one scope.

    Returns:
        Per-flag results plus the any/all aggregates
    """
    scoped = service.bind_scope(request.scope)
    try:
        results = {name: scoped.is_enabled(name) for name in request.names}
    except StorageError as e:
        _raise_http(e, "evaluate")

    return FlagEvaluationResponse(
        scope=request.scope,
        results=results,
        any=any(results.values()),
        all=all(results.values()),
    )


@router.post("/copy", response_model=ScopeCopyResponse)
def copy_scope(
    request: ScopeCopyRequest,
    service: FeatureService = Depends(get_service),
):
    """Copy every flag from one scope to another."""
    try:
        copied = service.bind_scope(request.from_scope).copy_to(
            request.to_scope, overwrite=request.overwrite
        )
    except (StorageError, FeatureValidationError) as e:
        _raise_http(e, "copy")

    return ScopeCopyResponse(
        from_scope=request.from_scope,
        to_scope=request.to_scope,
        copied=copied,
    )


@router.get("/{name}", response_model=FlagStatusResponse)
def get_flag(
    name: str,
    scope: str = Query(GLOBAL_SCOPE),
    service: FeatureService = Depends(get_service),
):
    """
    Get the resolved status of a feature flag.

    Args:
        name: The flag name
        scope: Scope to resolve for (falls back to global)
    """
    scoped = service.bind_scope(scope)
    try:
        enabled = scoped.is_enabled(name)
        value = scoped.get_value(name)
    except StorageError as e:
        _raise_http(e, "get")

    return FlagStatusResponse(name=name, scope=scope, enabled=enabled, value=value)


@router.post("/{name}/enable", response_model=FlagRecordResponse)
def enable_flag(
    name: str,
    scope: str = Query(GLOBAL_SCOPE),
    request: Optional[FlagEnableRequest] = Body(None),
    service: FeatureService = Depends(get_service),
):
    """Enable a feature flag, optionally storing a value alongside it."""
    value = request.value if request is not None else None
    try:
        record = service.bind_scope(scope).enable(name, value)
    except (StorageError, FeatureValidationError) as e:
        _raise_http(e, "enable")

    logger.info(f"Flag '{name}' enabled for scope '{scope}' via API")
    return _to_response(record)


@router.post("/{name}/disable", response_model=FlagRecordResponse)
def disable_flag(
    name: str,
    scope: str = Query(GLOBAL_SCOPE),
    service: FeatureService = Depends(get_service),
):
    """Disable a feature flag."""
    try:
        record = service.bind_scope(scope).disable(name)
    except (StorageError, FeatureValidationError) as e:
        _raise_http(e, "disable")

    logger.info(f"Flag '{name}' disabled for scope '{scope}' via API")
    return _to_response(record)


@router.delete("/{name}")
def remove_flag(
    name: str,
    scope: str = Query(GLOBAL_SCOPE),
    service: FeatureService = Depends(get_service),
):
    """Remove the flag record for a scope; the scope falls back to global again."""
    try:
        removed = service.bind_scope(scope).remove(name)
    except StorageError as e:
        _raise_http(e, "remove")

    if not removed:
        raise HTTPException(
            status_code=404,
            detail=f"Flag '{name}' not found in scope '{scope}'",
        )

    return {"message": f"Flag '{name}' removed from scope '{scope}'", "removed": True}
