"""WebhookSetting repository for data access."""

from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from kambafy.models.webhook_setting import WebhookSetting
from kambafy.schemas.webhook import WebhookSettingCreate, WebhookSettingUpdate


class WebhookSettingRepository:
    """Repository for WebhookSetting model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, user_id: UUID, skip: int = 0, limit: int = 100) -> list[WebhookSetting]:
        """Get all webhook settings of a seller."""
        return (
            self.db.query(WebhookSetting)
            .filter(WebhookSetting.user_id == user_id)
            .order_by(WebhookSetting.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self, user_id: UUID) -> int:
        """Count the webhook settings of a seller."""
        return (
            self.db.query(func.count(WebhookSetting.id))
            .filter(WebhookSetting.user_id == user_id)
            .scalar()
            or 0
        )

    def get_by_id(self, setting_id: UUID, user_id: UUID | None = None) -> WebhookSetting | None:
        """Get a webhook setting by ID, optionally restricted to its owner."""
        query = self.db.query(WebhookSetting).filter(WebhookSetting.id == setting_id)
        if user_id is not None:
            query = query.filter(WebhookSetting.user_id == user_id)
        return query.first()

    def get_active_for_scope(
        self, user_id: UUID | None, product_id: UUID | None = None,
    ) -> list[WebhookSetting]:
        """Get active settings eligible for a dispatch scope.

        With a product, settings scoped to that product or global to the owner
        qualify; without one, only the owner's global settings do. When the
        owner is unknown only settings scoped to the product itself qualify.
        """
        query = self.db.query(WebhookSetting).filter(WebhookSetting.active.is_(True))
        if product_id is not None and user_id is not None:
            query = query.filter(
                WebhookSetting.user_id == user_id,
                or_(
                    WebhookSetting.product_id == product_id,
                    WebhookSetting.product_id.is_(None),
                ),
            )
        elif product_id is not None:
            query = query.filter(WebhookSetting.product_id == product_id)
        elif user_id is not None:
            query = query.filter(
                WebhookSetting.user_id == user_id,
                WebhookSetting.product_id.is_(None),
            )
        else:
            return []
        return query.order_by(WebhookSetting.created_at.asc()).all()

    def get_active_for_product(self, product_id: UUID) -> WebhookSetting | None:
        """Get the first active setting scoped to a product."""
        return (
            self.db.query(WebhookSetting)
            .filter(
                WebhookSetting.product_id == product_id,
                WebhookSetting.active.is_(True),
            )
            .order_by(WebhookSetting.created_at.asc())
            .first()
        )

    def create(self, data: WebhookSettingCreate, user_id: UUID) -> WebhookSetting:
        """Create a new webhook setting."""
        setting = WebhookSetting(
            user_id=user_id,
            product_id=data.product_id,
            url=data.url,
            events=list(data.events),
            secret=data.secret,
            headers=dict(data.headers),
            timeout=data.timeout,
            active=data.active,
        )
        self.db.add(setting)
        self.db.commit()
        self.db.refresh(setting)
        return setting

    def update(
        self, setting_id: UUID, data: WebhookSettingUpdate, user_id: UUID,
    ) -> WebhookSetting | None:
        """Update a webhook setting by ID."""
        setting = self.get_by_id(setting_id, user_id=user_id)
        if not setting:
            return None

        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(setting, key, value)

        self.db.commit()
        self.db.refresh(setting)
        return setting

    def delete(self, setting_id: UUID, user_id: UUID) -> bool:
        """Delete a webhook setting by ID."""
        setting = self.get_by_id(setting_id, user_id=user_id)
        if not setting:
            return False

        self.db.delete(setting)
        self.db.commit()
        return True
