"""Send a one-off sample event to a product's webhook."""

import json
import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from kambafy.core.config import settings
from kambafy.core.exceptions import ProductNotFoundError, WebhookNotConfiguredError
from kambafy.repositories.product_repository import ProductRepository
from kambafy.repositories.webhook_log_repository import WebhookLogRepository
from kambafy.repositories.webhook_setting_repository import WebhookSettingRepository
from kambafy.services.webhook_delivery import client_session, post_json
from kambafy.services.webhook_events import build_sample_event

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 500


@dataclass
class SampleDeliveryResult:
    success: bool
    status: int
    event_type: str
    payload_sent: dict[str, Any]
    response_preview: str


class WebhookTestEventService:
    """Builds a sample payload, delivers it once and logs the attempt."""

    def __init__(self, db: Session, http_client: httpx.AsyncClient | None = None):
        self.db = db
        self.http_client = http_client
        self.product_repo = ProductRepository(db)
        self.setting_repo = WebhookSettingRepository(db)
        self.log_repo = WebhookLogRepository(db)

    async def send(
        self,
        owner_id: UUID,
        event_type: str,
        product_id: UUID,
        url: str | None = None,
        secret: str | None = None,
    ) -> SampleDeliveryResult:
        product = self.product_repo.get_by_id(product_id)
        if not product:
            raise ProductNotFoundError(f"Product {product_id} not found")

        webhook_id: str | None = None
        timeout: float = settings.webhook_default_timeout_seconds
        if not url:
            setting = self.setting_repo.get_active_for_product(product_id)
            if not setting:
                raise WebhookNotConfiguredError(
                    "No active webhook configured for this product"
                )
            url = str(setting.url)
            secret = setting.secret  # type: ignore[assignment]
            webhook_id = str(setting.id)
            timeout = setting.timeout or timeout  # type: ignore[assignment]

        payload = build_sample_event(event_type, product)
        headers = {
            "Content-Type": "application/json",
            "User-Agent": settings.webhook_user_agent,
            "X-Webhook-Event": event_type,
            "X-Test-Mode": "true",
        }
        if secret:
            headers["X-Webhook-Secret"] = secret
            headers["Authorization"] = f"Bearer {secret}"

        logger.info("Sending test webhook %s to %s", event_type, url)
        content = json.dumps(payload, default=str).encode("utf-8")
        async with client_session(self.http_client) as client:
            outcome = await post_json(
                client,
                url,
                content,
                headers,
                timeout=timeout,
                excerpt_chars=settings.webhook_response_excerpt_chars,
            )

        body = outcome.body if outcome.status else (
            f"timeout after {timeout:g}s"
            if outcome.timed_out
            else outcome.error
        )
        self.log_repo.create(
            user_id=owner_id,
            webhook_id=webhook_id,
            event_type=event_type,
            payload=payload,
            response_status=outcome.status,
            response_body=body,
        )

        return SampleDeliveryResult(
            success=outcome.success,
            status=outcome.status,
            event_type=event_type,
            payload_sent=payload,
            response_preview=(body or "")[:PREVIEW_CHARS],
        )
