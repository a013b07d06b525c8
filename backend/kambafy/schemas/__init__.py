from kambafy.schemas.partner_webhook import (
    PartnerWebhookAttemptLog,
    PartnerWebhookRequest,
    PartnerWebhookResponse,
    PartnerWebhookSkippedResponse,
)
from kambafy.schemas.webhook import (
    DeliveryResultResponse,
    TriggerWebhooksRequest,
    TriggerWebhooksResponse,
    WebhookDeliveryStats,
    WebhookLogResponse,
    WebhookSettingCreate,
    WebhookSettingResponse,
    WebhookSettingUpdate,
    WebhookTestEventRequest,
    WebhookTestEventResponse,
)

__all__ = [
    "DeliveryResultResponse",
    "PartnerWebhookAttemptLog",
    "PartnerWebhookRequest",
    "PartnerWebhookResponse",
    "PartnerWebhookSkippedResponse",
    "TriggerWebhooksRequest",
    "TriggerWebhooksResponse",
    "WebhookDeliveryStats",
    "WebhookLogResponse",
    "WebhookSettingCreate",
    "WebhookSettingResponse",
    "WebhookSettingUpdate",
    "WebhookTestEventRequest",
    "WebhookTestEventResponse",
]
