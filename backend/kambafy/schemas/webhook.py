"""Webhook setting, log and dispatch schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

_http_url = TypeAdapter(AnyHttpUrl)


def _validate_url(value: str) -> str:
    try:
        _http_url.validate_python(value)
    except ValidationError as exc:
        raise ValueError("must be an absolute http(s) URL") from exc
    return value


class WebhookSettingCreate(BaseModel):
    url: str = Field(max_length=2048)
    events: list[str] = Field(default_factory=list)
    secret: str | None = Field(default=None, max_length=255)
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: int = Field(default=30, ge=1, le=300)
    active: bool = True
    product_id: UUID | None = None

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return _validate_url(value)


class WebhookSettingUpdate(BaseModel):
    url: str | None = Field(default=None, max_length=2048)
    events: list[str] | None = None
    secret: str | None = Field(default=None, max_length=255)
    headers: dict[str, str] | None = None
    timeout: int | None = Field(default=None, ge=1, le=300)
    active: bool | None = None
    product_id: UUID | None = None

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str | None) -> str | None:
        return value if value is None else _validate_url(value)


class WebhookSettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    product_id: UUID | None = None
    url: str
    events: list[str]
    secret: str | None = None
    headers: dict[str, str]
    timeout: int
    active: bool
    created_at: datetime
    updated_at: datetime


class WebhookLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID | None = None
    webhook_id: str | None = None
    event_type: str
    payload: dict[str, Any]
    response_status: int
    response_body: str | None = None
    created_at: datetime


class WebhookDeliveryStats(BaseModel):
    webhook_id: str
    total: int
    succeeded: int
    failed: int
    success_rate: float


class TriggerWebhooksRequest(BaseModel):
    """Body of the dispatch entry point."""

    event: str = Field(min_length=1, max_length=100)
    data: dict[str, Any] = Field(default_factory=dict)
    user_id: UUID | None = None
    order_id: str | None = None
    product_id: UUID | None = None

    def event_payload(self) -> dict[str, Any]:
        payload = dict(self.data)
        if self.order_id is not None:
            payload["order_id"] = self.order_id
        if self.product_id is not None:
            payload["product_id"] = str(self.product_id)
        return payload


class DeliveryResultResponse(BaseModel):
    webhook_id: str
    success: bool = False
    skipped: bool = False
    status: int | None = None
    error: str | None = None
    url: str | None = None


class TriggerWebhooksResponse(BaseModel):
    message: str
    event: str
    triggered: int
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    results: list[DeliveryResultResponse] = Field(default_factory=list)


class WebhookTestEventRequest(BaseModel):
    event_type: str = Field(min_length=1, max_length=100)
    product_id: UUID
    webhook_url: str | None = Field(default=None, max_length=2048)
    webhook_secret: str | None = Field(default=None, max_length=255)

    @field_validator("webhook_url")
    @classmethod
    def check_url(cls, value: str | None) -> str | None:
        return value if value is None else _validate_url(value)


class WebhookTestEventResponse(BaseModel):
    success: bool
    status: int
    event_type: str
    payload_sent: dict[str, Any]
    response_preview: str
