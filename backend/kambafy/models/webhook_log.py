"""WebhookLog model: append-only record of each delivery attempt."""

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text, func

from kambafy.core.database import Base
from kambafy.models.shared import UUIDType, generate_uuid


class WebhookLog(Base):
    """Records one delivery attempt. Rows are never updated."""

    __tablename__ = "webhook_logs"
    __table_args__ = (
        Index("ix_webhook_logs_user_id", "user_id"),
        Index("ix_webhook_logs_webhook_id", "webhook_id"),
        Index("ix_webhook_logs_event_type", "event_type"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDType, nullable=True)
    # Plain string: synthetic product-config registrations have non-UUID ids.
    webhook_id = Column(String(100), nullable=True)
    event_type = Column(String(100), nullable=False)
    payload = Column(JSON, nullable=False)
    response_status = Column(Integer, nullable=False, default=0)
    response_body = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
