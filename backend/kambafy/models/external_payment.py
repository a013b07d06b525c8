"""Partner and ExternalPayment models for partner payment notifications."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from kambafy.core.database import Base
from kambafy.models.shared import UUIDType, generate_uuid


class Partner(Base):
    """Integration partner that receives signed payment notifications."""

    __tablename__ = "partners"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    company_name = Column(String(255), nullable=False)
    webhook_url = Column(String(2048), nullable=True)
    webhook_secret = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ExternalPayment(Base):
    """Payment processed on behalf of a partner, with its notification state."""

    __tablename__ = "external_payments"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    partner_id = Column(
        UUIDType, ForeignKey("partners.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    order_id = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="AOA")
    status = Column(String(20), nullable=False, default="pending")
    customer_email = Column(String(255), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    payment_method = Column(String(50), nullable=True)
    reference_entity = Column(String(50), nullable=True)
    reference_number = Column(String(50), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    # "metadata" is reserved on declarative models
    payment_metadata = Column("metadata", JSON, nullable=True)

    webhook_sent = Column(Boolean, nullable=False, default=False)
    webhook_sent_at = Column(DateTime(timezone=True), nullable=True)
    webhook_attempts = Column(Integer, nullable=False, default=0)
    webhook_last_error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    partner = relationship(Partner, lazy="joined")
