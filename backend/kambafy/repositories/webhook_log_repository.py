"""WebhookLog repository: insert-only writes and read-only queries."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from kambafy.core.sorting import apply_order_by
from kambafy.models.webhook_log import WebhookLog


class WebhookLogRepository:
    """Repository for WebhookLog model."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        event_type: str,
        payload: dict[str, Any],
        response_status: int,
        response_body: str | None = None,
        user_id: UUID | None = None,
        webhook_id: str | None = None,
    ) -> WebhookLog:
        """Record a delivery attempt."""
        log = WebhookLog(
            user_id=user_id,
            webhook_id=webhook_id,
            event_type=event_type,
            payload=payload,
            response_status=response_status,
            response_body=response_body,
        )
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)
        return log

    def get_by_id(self, log_id: UUID) -> WebhookLog | None:
        """Get a log entry by ID."""
        return self.db.query(WebhookLog).filter(WebhookLog.id == log_id).first()

    def get_all(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 100,
        webhook_id: str | None = None,
        event_type: str | None = None,
        order_by: str | None = None,
    ) -> list[WebhookLog]:
        """Get a seller's log entries with optional filters."""
        query = self.db.query(WebhookLog).filter(WebhookLog.user_id == user_id)
        if webhook_id:
            query = query.filter(WebhookLog.webhook_id == webhook_id)
        if event_type:
            query = query.filter(WebhookLog.event_type == event_type)
        query = apply_order_by(query, WebhookLog, order_by)
        return query.offset(skip).limit(limit).all()

    def count(
        self,
        user_id: UUID,
        webhook_id: str | None = None,
        event_type: str | None = None,
    ) -> int:
        """Count a seller's log entries matching the same filters as ``get_all``."""
        query = self.db.query(func.count(WebhookLog.id)).filter(WebhookLog.user_id == user_id)
        if webhook_id:
            query = query.filter(WebhookLog.webhook_id == webhook_id)
        if event_type:
            query = query.filter(WebhookLog.event_type == event_type)
        return query.scalar() or 0

    def delivery_stats_by_webhook(self, user_id: UUID) -> list[dict[str, Any]]:
        """Get delivery stats (total, succeeded, failed) grouped by registration."""
        delivered = and_(WebhookLog.response_status >= 200, WebhookLog.response_status < 300)
        rows = (
            self.db.query(
                WebhookLog.webhook_id,
                func.count(WebhookLog.id).label("total"),
                func.sum(case((delivered, 1), else_=0)).label("succeeded"),
            )
            .filter(WebhookLog.user_id == user_id, WebhookLog.webhook_id.isnot(None))
            .group_by(WebhookLog.webhook_id)
            .all()
        )
        return [
            {
                "webhook_id": str(row.webhook_id),
                "total": row.total,
                "succeeded": int(row.succeeded or 0),
                "failed": row.total - int(row.succeeded or 0),
            }
            for row in rows
        ]
