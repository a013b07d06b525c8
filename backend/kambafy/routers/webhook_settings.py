"""Webhook setting API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from kambafy.core.auth import get_current_owner
from kambafy.core.database import get_db
from kambafy.models.webhook_setting import WebhookSetting
from kambafy.repositories.webhook_log_repository import WebhookLogRepository
from kambafy.repositories.webhook_setting_repository import WebhookSettingRepository
from kambafy.schemas.webhook import (
    WebhookDeliveryStats,
    WebhookSettingCreate,
    WebhookSettingResponse,
    WebhookSettingUpdate,
)
from kambafy.services.webhook_events import WEBHOOK_EVENT_TYPES

router = APIRouter()


@router.post(
    "/",
    response_model=WebhookSettingResponse,
    status_code=201,
    summary="Create webhook setting",
    responses={
        400: {"description": "Missing or invalid X-User-Id header"},
        422: {"description": "Validation error"},
    },
)
async def create_webhook_setting(
    data: WebhookSettingCreate,
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> WebhookSetting:
    """Register a new webhook for the seller."""
    repo = WebhookSettingRepository(db)
    return repo.create(data, owner_id)


@router.get(
    "/",
    response_model=list[WebhookSettingResponse],
    summary="List webhook settings",
    responses={400: {"description": "Missing or invalid X-User-Id header"}},
)
async def list_webhook_settings(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> list[WebhookSetting]:
    """List the seller's webhook settings."""
    repo = WebhookSettingRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(owner_id))
    return repo.get_all(owner_id, skip=skip, limit=limit)


@router.get(
    "/event_types",
    response_model=list[str],
    summary="List supported event types",
)
async def list_event_types() -> list[str]:
    return list(WEBHOOK_EVENT_TYPES)


@router.get(
    "/delivery_stats",
    response_model=list[WebhookDeliveryStats],
    summary="Get delivery stats per webhook",
    responses={400: {"description": "Missing or invalid X-User-Id header"}},
)
async def get_delivery_stats(
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> list[WebhookDeliveryStats]:
    """Get delivery success/failure stats grouped by webhook."""
    repo = WebhookLogRepository(db)
    raw_stats = repo.delivery_stats_by_webhook(owner_id)
    return [
        WebhookDeliveryStats(
            webhook_id=s["webhook_id"],
            total=s["total"],
            succeeded=s["succeeded"],
            failed=s["failed"],
            success_rate=round(s["succeeded"] / s["total"] * 100, 1) if s["total"] > 0 else 0.0,
        )
        for s in raw_stats
    ]


@router.get(
    "/{setting_id}",
    response_model=WebhookSettingResponse,
    summary="Get webhook setting",
    responses={404: {"description": "Webhook setting not found"}},
)
async def get_webhook_setting(
    setting_id: UUID,
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> WebhookSetting:
    repo = WebhookSettingRepository(db)
    setting = repo.get_by_id(setting_id, user_id=owner_id)
    if not setting:
        raise HTTPException(status_code=404, detail="Webhook setting not found")
    return setting


@router.put(
    "/{setting_id}",
    response_model=WebhookSettingResponse,
    summary="Update webhook setting",
    responses={
        404: {"description": "Webhook setting not found"},
        422: {"description": "Validation error"},
    },
)
async def update_webhook_setting(
    setting_id: UUID,
    data: WebhookSettingUpdate,
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> WebhookSetting:
    repo = WebhookSettingRepository(db)
    setting = repo.update(setting_id, data, owner_id)
    if not setting:
        raise HTTPException(status_code=404, detail="Webhook setting not found")
    return setting


@router.delete(
    "/{setting_id}",
    status_code=204,
    summary="Delete webhook setting",
    responses={404: {"description": "Webhook setting not found"}},
)
async def delete_webhook_setting(
    setting_id: UUID,
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> None:
    """Delete a webhook setting. Its delivery log is kept."""
    repo = WebhookSettingRepository(db)
    if not repo.delete(setting_id, owner_id):
        raise HTTPException(status_code=404, detail="Webhook setting not found")
