"""ExternalPayment repository for partner notification state."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from kambafy.models.external_payment import ExternalPayment


class ExternalPaymentRepository:
    """Repository for ExternalPayment model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, payment_id: UUID) -> ExternalPayment | None:
        """Get a payment (with its partner eagerly loaded) by ID."""
        return self.db.query(ExternalPayment).filter(ExternalPayment.id == payment_id).first()

    def record_webhook_result(
        self,
        payment_id: UUID,
        *,
        success: bool,
        attempts: int,
        last_error: str | None,
        sent_at: datetime | None,
        metadata: dict[str, Any],
    ) -> ExternalPayment | None:
        """Persist the final outcome of a partner notification."""
        payment = self.get_by_id(payment_id)
        if not payment:
            return None

        payment.webhook_sent = success  # type: ignore[assignment]
        payment.webhook_sent_at = sent_at  # type: ignore[assignment]
        payment.webhook_attempts = attempts  # type: ignore[assignment]
        payment.webhook_last_error = last_error  # type: ignore[assignment]
        # Assign a new dict so the JSON column is flagged dirty.
        payment.payment_metadata = dict(metadata)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(payment)
        return payment
