"""Partner payment notification API endpoint."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from kambafy.core.database import get_db
from kambafy.core.exceptions import PaymentNotFoundError
from kambafy.schemas.partner_webhook import (
    PartnerWebhookAttemptLog,
    PartnerWebhookRequest,
    PartnerWebhookResponse,
    PartnerWebhookSkippedResponse,
)
from kambafy.services.partner_webhook_service import PartnerWebhookService

router = APIRouter()


@router.post(
    "/process",
    response_model=PartnerWebhookResponse | PartnerWebhookSkippedResponse,
    summary="Notify a payment's partner",
    responses={
        404: {"description": "Payment not found"},
        422: {"description": "Validation error"},
        500: {"description": "Notification failed after all attempts"},
    },
)
async def process_partner_webhook(
    data: PartnerWebhookRequest,
    db: Session = Depends(get_db),
) -> PartnerWebhookSkippedResponse | JSONResponse:
    """Send a signed notification for a payment, retrying with backoff."""
    service = PartnerWebhookService(db)
    try:
        result = await service.notify(data.payment_id, data.event)
    except PaymentNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Payment not found") from exc

    if result.skipped:
        return PartnerWebhookSkippedResponse(message="No webhook URL configured")

    body = PartnerWebhookResponse(
        success=result.success,
        event=result.event,
        attempts=result.attempts,
        error=result.error,
        logs=[
            PartnerWebhookAttemptLog(
                attempt=log["attempt"],
                timestamp=log["timestamp"],
                status=log["status"],
                error=log.get("error"),
                response_time=log["responseTime"],
            )
            for log in result.logs
        ],
    )
    return JSONResponse(
        status_code=200 if result.success else 500,
        content=body.model_dump(mode="json", by_alias=True),
    )
