"""WebhookSetting model: a tenant's registration of an endpoint for a set of events."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, func

from kambafy.core.database import Base
from kambafy.models.shared import UUIDType, generate_uuid

DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 30


class WebhookSetting(Base):
    """Webhook registration owned by a seller, optionally scoped to one product."""

    __tablename__ = "webhook_settings"
    __table_args__ = (
        Index("ix_webhook_settings_user_id_active", "user_id", "active"),
        Index("ix_webhook_settings_product_id", "product_id"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDType, nullable=False)
    product_id = Column(UUIDType, nullable=True)
    url = Column(String(2048), nullable=False)
    events = Column(JSON, nullable=False, default=list)
    secret = Column(String(255), nullable=True)
    headers = Column(JSON, nullable=False, default=dict)
    timeout = Column(Integer, nullable=False, default=DEFAULT_WEBHOOK_TIMEOUT_SECONDS)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
