"""Partner payment notification schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PartnerWebhookRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_id: UUID = Field(alias="paymentId")
    event: str = Field(min_length=1, max_length=100)


class PartnerWebhookAttemptLog(BaseModel):
    attempt: int
    timestamp: str
    status: int | None = None
    error: str | None = None
    response_time: int = Field(serialization_alias="responseTime")


class PartnerWebhookResponse(BaseModel):
    success: bool
    event: str
    attempts: int
    error: str | None = None
    logs: list[PartnerWebhookAttemptLog] = Field(default_factory=list)


class PartnerWebhookSkippedResponse(BaseModel):
    message: str
    skipped: bool = True
