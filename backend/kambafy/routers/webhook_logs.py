"""Webhook delivery log API endpoints (read-only)."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from kambafy.core.auth import get_current_owner
from kambafy.core.database import get_db
from kambafy.models.webhook_log import WebhookLog
from kambafy.repositories.webhook_log_repository import WebhookLogRepository
from kambafy.schemas.webhook import WebhookLogResponse

router = APIRouter()


@router.get(
    "/",
    response_model=list[WebhookLogResponse],
    summary="List webhook deliveries",
    responses={400: {"description": "Missing or invalid X-User-Id header"}},
)
async def list_webhook_logs(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    webhook_id: str | None = Query(default=None),
    event_type: str | None = Query(default=None),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> list[WebhookLog]:
    """List the seller's delivery attempts, newest first by default."""
    repo = WebhookLogRepository(db)
    response.headers["X-Total-Count"] = str(
        repo.count(owner_id, webhook_id=webhook_id, event_type=event_type)
    )
    return repo.get_all(
        owner_id,
        skip=skip,
        limit=limit,
        webhook_id=webhook_id,
        event_type=event_type,
        order_by=order_by,
    )


@router.get(
    "/{log_id}",
    response_model=WebhookLogResponse,
    summary="Get webhook delivery",
    responses={404: {"description": "Webhook log not found"}},
)
async def get_webhook_log(
    log_id: UUID,
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> WebhookLog:
    repo = WebhookLogRepository(db)
    log = repo.get_by_id(log_id)
    if not log or log.user_id != owner_id:
        raise HTTPException(status_code=404, detail="Webhook log not found")
    return log
