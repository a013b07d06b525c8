import logging
from typing import Any
from uuid import UUID

from kambafy.core.database import SessionLocal
from kambafy.core.exceptions import PaymentNotFoundError
from kambafy.services.partner_webhook_service import PartnerWebhookService
from kambafy.services.webhook_dispatcher import DispatchScope, WebhookDispatcher
from kambafy.services.webhook_registry import SqlDeliveryLog, SqlRegistrationReader
from kambafy.tasks import redis_settings

logger = logging.getLogger(__name__)


async def trigger_webhooks_task(
    ctx: dict[str, Any],
    event: str,
    payload: dict[str, Any],
    owner_id: str | None = None,
    resource_id: str | None = None,
) -> dict[str, int]:
    """Background task: fan an event out to the registered webhooks.

    Returns the aggregate counts of the dispatch.
    """
    db = SessionLocal()
    try:
        dispatcher = WebhookDispatcher(SqlRegistrationReader(db), SqlDeliveryLog(db))
        scope = DispatchScope(
            owner_id=UUID(owner_id) if owner_id else None,
            resource_id=UUID(resource_id) if resource_id else None,
        )
        result = await dispatcher.dispatch(event, payload, scope)
        return {
            "triggered": result.triggered,
            "successful": result.successful,
            "failed": result.failed,
            "skipped": result.skipped,
        }
    finally:
        db.close()


async def process_partner_webhook_task(
    ctx: dict[str, Any], payment_id: str, event: str,
) -> bool:
    """Background task: notify a payment's partner. Returns delivery success."""
    db = SessionLocal()
    try:
        service = PartnerWebhookService(db)
        try:
            result = await service.notify(UUID(payment_id), event)
        except PaymentNotFoundError:
            logger.error("Payment %s not found for partner webhook", payment_id)
            return False
        return result.success
    finally:
        db.close()


class WorkerSettings:
    functions = [
        trigger_webhooks_task,
        process_partner_webhook_task,
    ]
    redis_settings = redis_settings
