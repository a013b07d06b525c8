"""Product model (read-only collaborator for webhook scoping)."""

from sqlalchemy import JSON, Column, DateTime, Numeric, String, func

from kambafy.core.database import Base
from kambafy.models.shared import UUIDType, generate_uuid


class Product(Base):
    """A seller's product. Only the columns the webhook services read are mapped."""

    __tablename__ = "products"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDType, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    type = Column(String(50), nullable=True)
    access_duration_type = Column(String(50), nullable=True)
    subscription_config = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
