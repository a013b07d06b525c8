from kambafy.repositories.external_payment_repository import ExternalPaymentRepository
from kambafy.repositories.product_repository import ProductRepository
from kambafy.repositories.webhook_log_repository import WebhookLogRepository
from kambafy.repositories.webhook_setting_repository import WebhookSettingRepository

__all__ = [
    "ExternalPaymentRepository",
    "ProductRepository",
    "WebhookLogRepository",
    "WebhookSettingRepository",
]
