"""Signed payment notifications to integration partners."""

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from kambafy.core.config import settings
from kambafy.core.exceptions import PaymentNotFoundError
from kambafy.models.external_payment import ExternalPayment
from kambafy.repositories.external_payment_repository import ExternalPaymentRepository
from kambafy.services.webhook_delivery import (
    DeliveryOutcome,
    DeliveryPolicy,
    RetryWithBackoff,
    client_session,
    post_json,
)

logger = logging.getLogger(__name__)

ERROR_BODY_CHARS = 200


def generate_hmac_signature(payload_bytes: bytes, secret: str | None) -> str:
    """Generate HMAC-SHA256 signature for a webhook payload.

    Args:
        payload_bytes: The raw payload bytes to sign.
        secret: The partner's secret key. Without one the signature is empty.

    Returns:
        Hex-encoded HMAC-SHA256 signature.
    """
    if not secret:
        return ""
    return hmac.new(
        secret.encode("utf-8"),
        payload_bytes,
        hashlib.sha256,
    ).hexdigest()


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def build_partner_payload(payment: ExternalPayment, event: str, timestamp: str) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "event": event,
        "payment_id": str(payment.id),
        "order_id": payment.order_id,
        "amount": float(payment.amount) if payment.amount is not None else None,
        "currency": payment.currency,
        "status": payment.status,
        "customer_email": payment.customer_email,
        "customer_name": payment.customer_name,
        "customer_phone": payment.customer_phone,
        "payment_method": payment.payment_method,
        "completed_at": _iso(payment.completed_at),  # type: ignore[arg-type]
    }
    if payment.reference_entity:
        payload["reference"] = {
            "entity": payment.reference_entity,
            "reference_number": payment.reference_number,
        }
    payload["metadata"] = payment.payment_metadata
    payload["timestamp"] = timestamp
    return payload


@dataclass
class PartnerNotificationResult:
    success: bool
    event: str
    attempts: int = 0
    error: str | None = None
    logs: list[dict[str, Any]] = field(default_factory=list)
    skipped: bool = False


class PartnerWebhookService:
    """Notifies a payment's partner, retrying with exponential backoff."""

    def __init__(
        self,
        db: Session,
        http_client: httpx.AsyncClient | None = None,
        policy: DeliveryPolicy | None = None,
    ):
        self.db = db
        self.http_client = http_client
        self.policy = policy or RetryWithBackoff(
            max_attempts=settings.partner_webhook_max_attempts,
            base_delay=settings.partner_webhook_base_delay_seconds,
        )
        self.payment_repo = ExternalPaymentRepository(db)

    async def notify(self, payment_id: UUID, event: str) -> PartnerNotificationResult:
        """Deliver ``event`` for a payment and persist the notification state.

        Raises:
            PaymentNotFoundError: If the payment or its partner does not exist.
        """
        payment = self.payment_repo.get_by_id(payment_id)
        if not payment or not payment.partner:
            raise PaymentNotFoundError(f"Payment {payment_id} not found")

        partner = payment.partner
        if not partner.webhook_url:
            logger.info("Partner %s has no webhook URL configured", partner.id)
            return PartnerNotificationResult(success=False, event=event, skipped=True)

        logger.info("Processing partner webhook for payment %s, event %s", payment_id, event)

        timestamp = datetime.now(UTC).isoformat()
        payload = build_partner_payload(payment, event, timestamp)
        payload_bytes = json.dumps(payload, default=str).encode("utf-8")
        signature = generate_hmac_signature(payload_bytes, partner.webhook_secret)  # type: ignore[arg-type]
        url = str(partner.webhook_url)
        timeout = settings.partner_webhook_timeout_seconds

        def headers_for(attempt: int) -> dict[str, str]:
            return {
                "Content-Type": "application/json",
                "X-Kambafy-Signature": signature,
                "X-Kambafy-Event": event,
                "X-Kambafy-Timestamp": timestamp,
                "X-Kambafy-Delivery-Attempt": str(attempt),
                "X-Kambafy-Payment-Id": str(payment.id),
                "User-Agent": settings.webhook_user_agent,
            }

        finished_at: list[str] = []

        async with client_session(self.http_client) as client:

            async def attempt_fn(attempt: int) -> DeliveryOutcome:
                logger.info("Partner webhook attempt %d to %s", attempt, url)
                outcome = await post_json(
                    client,
                    url,
                    payload_bytes,
                    headers_for(attempt),
                    timeout=timeout,
                    attempt=attempt,
                )
                finished_at.append(datetime.now(UTC).isoformat())
                return outcome

            outcomes = await self.policy.run(attempt_fn)

        logs = [
            self._attempt_log(outcome, stamp, timeout)
            for outcome, stamp in zip(outcomes, finished_at, strict=True)
        ]
        success = bool(outcomes) and outcomes[-1].success
        last_error = None if success else next(
            (log["error"] for log in reversed(logs) if log.get("error")), None
        )
        total_attempts = int(payment.webhook_attempts or 0) + len(outcomes)

        metadata = dict(payment.payment_metadata or {})
        metadata["webhook_logs"] = list(metadata.get("webhook_logs") or []) + logs
        now = datetime.now(UTC)
        metadata["last_webhook_attempt"] = now.isoformat()
        metadata["last_webhook_event"] = event

        self.payment_repo.record_webhook_result(
            payment.id,  # type: ignore[arg-type]
            success=success,
            attempts=total_attempts,
            last_error=last_error,
            sent_at=now if success else None,
            metadata=metadata,
        )

        if success:
            logger.info("Partner webhook delivered for payment %s", payment_id)
        else:
            logger.warning(
                "Partner webhook failed for payment %s after %d attempts: %s",
                payment_id,
                len(outcomes),
                last_error,
            )

        return PartnerNotificationResult(
            success=success,
            event=event,
            attempts=total_attempts,
            error=last_error,
            logs=logs,
        )

    @staticmethod
    def _attempt_log(outcome: DeliveryOutcome, timestamp: str, timeout: float) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "attempt": outcome.attempt,
            "timestamp": timestamp,
            "status": outcome.status or None,
            "responseTime": outcome.elapsed_ms,
        }
        if outcome.timed_out:
            entry["error"] = f"Request timeout ({timeout:g}s)"
        elif outcome.status == 0:
            entry["error"] = outcome.error
        elif not outcome.success:
            entry["error"] = f"HTTP {outcome.status}: {(outcome.body or '')[:ERROR_BODY_CHARS]}"
        return entry
