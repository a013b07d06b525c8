"""Webhook dispatch and test-event API endpoints."""

import logging
from dataclasses import asdict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from kambafy.core.auth import get_current_owner
from kambafy.core.database import get_db
from kambafy.core.exceptions import (
    ProductNotFoundError,
    RegistryUnavailableError,
    WebhookNotConfiguredError,
)
from kambafy.schemas.webhook import (
    DeliveryResultResponse,
    TriggerWebhooksRequest,
    TriggerWebhooksResponse,
    WebhookTestEventRequest,
    WebhookTestEventResponse,
)
from kambafy.services.webhook_dispatcher import DispatchScope, WebhookDispatcher
from kambafy.services.webhook_registry import SqlDeliveryLog, SqlRegistrationReader
from kambafy.services.webhook_test_event_service import WebhookTestEventService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/trigger",
    response_model=TriggerWebhooksResponse,
    summary="Dispatch an event to registered webhooks",
    responses={
        422: {"description": "Validation error"},
        500: {"description": "Webhook registrations could not be read"},
    },
)
async def trigger_webhooks(
    data: TriggerWebhooksRequest,
    db: Session = Depends(get_db),
) -> TriggerWebhooksResponse | JSONResponse:
    """Deliver an event to every active webhook in scope and report the outcome."""
    logger.info("Triggering webhooks for event %s", data.event)
    dispatcher = WebhookDispatcher(SqlRegistrationReader(db), SqlDeliveryLog(db))
    scope = DispatchScope(owner_id=data.user_id, resource_id=data.product_id)
    try:
        result = await dispatcher.dispatch(data.event, data.event_payload(), scope)
    except RegistryUnavailableError as exc:
        logger.error("Error triggering webhooks for %s: %s", data.event, exc)
        return JSONResponse(
            status_code=500,
            content={"error": str(exc), "details": "Failed to process webhooks"},
        )

    return TriggerWebhooksResponse(
        message="Webhooks processed" if result.triggered else "No active webhooks found",
        event=result.event,
        triggered=result.triggered,
        successful=result.successful,
        failed=result.failed,
        skipped=result.skipped,
        results=[DeliveryResultResponse(**asdict(r)) for r in result.results],
    )


@router.post(
    "/test_event",
    response_model=WebhookTestEventResponse,
    summary="Send a sample event to a product webhook",
    responses={
        400: {"description": "No webhook configured for the product"},
        404: {"description": "Product not found"},
        422: {"description": "Validation error"},
    },
)
async def send_test_event(
    data: WebhookTestEventRequest,
    db: Session = Depends(get_db),
    owner_id: UUID = Depends(get_current_owner),
) -> WebhookTestEventResponse:
    """Build a sample payload for an event type and deliver it once."""
    service = WebhookTestEventService(db)
    try:
        result = await service.send(
            owner_id,
            data.event_type,
            data.product_id,
            url=data.webhook_url,
            secret=data.webhook_secret,
        )
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Product not found") from exc
    except WebhookNotConfiguredError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return WebhookTestEventResponse(**asdict(result))
