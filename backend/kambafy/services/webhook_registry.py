"""Database-backed collaborators of the webhook dispatcher."""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kambafy.core.exceptions import RegistryUnavailableError
from kambafy.models.product import Product
from kambafy.models.webhook_setting import WebhookSetting
from kambafy.repositories.product_repository import ProductRepository
from kambafy.repositories.webhook_log_repository import WebhookLogRepository
from kambafy.repositories.webhook_setting_repository import WebhookSettingRepository
from kambafy.services.webhook_dispatcher import DeliveryAttempt, DispatchScope, Registration

logger = logging.getLogger(__name__)

SUBSCRIPTION_EVENT_PREFIX = "subscription."


def registration_from_setting(setting: WebhookSetting) -> Registration:
    return Registration(
        id=str(setting.id),
        url=str(setting.url),
        events=frozenset(setting.events or []),
        owner_id=setting.user_id,  # type: ignore[arg-type]
        resource_id=setting.product_id,  # type: ignore[arg-type]
        secret=setting.secret or None,  # type: ignore[arg-type]
        headers=dict(setting.headers or {}),
        timeout_seconds=setting.timeout or None,  # type: ignore[arg-type]
        active=bool(setting.active),
    )


def registration_from_product(product: Product) -> Registration | None:
    """Registration configured inline on a subscription product, if enabled."""
    config = product.subscription_config or {}
    if not config.get("webhook_enabled") or not config.get("webhook_url"):
        return None
    return Registration(
        id=f"subscription-webhook-{product.id}",
        url=str(config["webhook_url"]),
        events=frozenset(config.get("webhook_events") or []),
        owner_id=product.user_id,  # type: ignore[arg-type]
        resource_id=product.id,  # type: ignore[arg-type]
        secret=config.get("webhook_secret") or None,
    )


class SqlRegistrationReader:
    """Reads registrations from ``webhook_settings`` and product configs."""

    def __init__(self, db: Session):
        self.db = db
        self.setting_repo = WebhookSettingRepository(db)
        self.product_repo = ProductRepository(db)

    def resolve_owner(self, resource_id: UUID) -> UUID | None:
        try:
            product = self.product_repo.get_by_id(resource_id)
        except SQLAlchemyError as exc:
            raise RegistryUnavailableError("Failed to resolve product owner") from exc
        return product.user_id if product else None  # type: ignore[return-value]

    def find_active(self, scope: DispatchScope, event_name: str) -> list[Registration]:
        try:
            settings = self.setting_repo.get_active_for_scope(scope.owner_id, scope.resource_id)
            registrations = [registration_from_setting(s) for s in settings]
            if scope.resource_id is not None and event_name.startswith(
                SUBSCRIPTION_EVENT_PREFIX
            ):
                product = self.product_repo.get_by_id(scope.resource_id)
                inline = registration_from_product(product) if product else None
                # Only added when it listens; it never counts as skipped.
                if inline is not None and inline.listens_to(event_name):
                    logger.info("Adding subscription webhook from product %s", product.id)
                    registrations.append(inline)
        except SQLAlchemyError as exc:
            raise RegistryUnavailableError("Failed to fetch webhook settings") from exc
        return registrations


class SqlDeliveryLog:
    """Appends delivery attempts to ``webhook_logs``."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = WebhookLogRepository(db)

    def append(self, attempt: DeliveryAttempt) -> None:
        try:
            self.repo.create(
                user_id=attempt.owner_id,
                webhook_id=attempt.registration_id,
                event_type=attempt.event_name,
                payload=attempt.payload,
                response_status=attempt.response_status,
                response_body=attempt.response_body_excerpt,
            )
        except SQLAlchemyError:
            self.db.rollback()
            raise
