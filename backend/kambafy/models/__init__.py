from kambafy.models.external_payment import ExternalPayment, Partner
from kambafy.models.product import Product
from kambafy.models.webhook_log import WebhookLog
from kambafy.models.webhook_setting import DEFAULT_WEBHOOK_TIMEOUT_SECONDS, WebhookSetting

__all__ = [
    "DEFAULT_WEBHOOK_TIMEOUT_SECONDS",
    "ExternalPayment",
    "Partner",
    "Product",
    "WebhookLog",
    "WebhookSetting",
]
