"""Webhook dispatcher: fan a domain event out to every registered endpoint.

For one fired event the dispatcher resolves the registrations in scope,
skips the ones not listening to the event, delivers to the rest
concurrently (one attempt each, bounded by the registration's timeout),
writes one log row per delivery and returns an aggregate summary.

Per-delivery failures are data in the result; only failing to read the
registrations raises.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID

import httpx

from kambafy.core.config import settings
from kambafy.services.webhook_delivery import (
    BestEffortOnce,
    DeliveryOutcome,
    client_session,
    post_json,
)

logger = logging.getLogger(__name__)

CONTENT_TYPE_JSON = "application/json"


@dataclass(frozen=True)
class DispatchScope:
    """The (owner, resource) pair narrowing which registrations are eligible."""

    owner_id: UUID | None = None
    resource_id: UUID | None = None


@dataclass(frozen=True)
class Registration:
    """A destination URL subscribed to a set of event names."""

    id: str
    url: str
    events: frozenset[str]
    owner_id: UUID | None = None
    resource_id: UUID | None = None
    secret: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout_seconds: float | None = None
    active: bool = True

    def listens_to(self, event_name: str) -> bool:
        return event_name in self.events

    def in_scope(self, scope: DispatchScope) -> bool:
        """Owner/resource part of the eligibility rule."""
        if scope.owner_id is not None and self.owner_id != scope.owner_id:
            return False
        if scope.resource_id is None:
            return scope.owner_id is not None and self.resource_id is None
        if scope.owner_id is None:
            return self.resource_id == scope.resource_id
        return self.resource_id is None or self.resource_id == scope.resource_id

    def is_target_of(self, event_name: str, scope: DispatchScope) -> bool:
        return self.active and self.listens_to(event_name) and self.in_scope(scope)


@dataclass(frozen=True)
class DeliveryAttempt:
    """One delivery log entry."""

    registration_id: str
    owner_id: UUID | None
    event_name: str
    payload: dict[str, Any]
    response_status: int
    response_body_excerpt: str | None
    occurred_at: datetime


@dataclass
class DeliveryResult:
    webhook_id: str
    url: str | None = None
    success: bool = False
    skipped: bool = False
    status: int | None = None
    error: str | None = None


@dataclass
class DispatchResult:
    """Aggregate outcome of one dispatch.

    ``triggered`` counts the active registrations in scope before the
    event-name filter, so registrations that do not listen to the event are
    included and reported as ``skipped``.
    """

    event: str
    triggered: int = 0
    results: list[DeliveryResult] = field(default_factory=list)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success and not r.skipped)


class RegistrationReader(Protocol):
    def resolve_owner(self, resource_id: UUID) -> UUID | None:
        """Return the owner of a resource, or None if unknown."""
        ...

    def find_active(self, scope: DispatchScope, event_name: str) -> list[Registration]:
        """Return active registrations for the scope's owner/resource."""
        ...


class DeliveryLogSink(Protocol):
    def append(self, attempt: DeliveryAttempt) -> None:
        ...


def build_envelope(
    event_name: str,
    payload: Any,
    webhook_id: str,
    timestamp: str,
    version: str = "1.0",
) -> dict[str, Any]:
    envelope: dict[str, Any] = {"event": event_name, "timestamp": timestamp}
    if isinstance(payload, Mapping):
        # Receivers built against the first integration read these at top level.
        email = payload.get("email") or payload.get("customer_email")
        name = payload.get("name") or payload.get("customer_name")
        if email is not None:
            envelope["email"] = email
        if name is not None:
            envelope["name"] = name
    envelope.update({"data": payload, "webhook_id": webhook_id, "version": version})
    return envelope


def build_headers(registration: Registration, user_agent: str) -> httpx.Headers:
    """Delivery headers: custom headers may not replace the JSON content type.

    The secret is sent as a shared token in two forms for receiver
    compatibility; no HMAC is computed on this path.
    """
    headers = httpx.Headers({"Content-Type": CONTENT_TYPE_JSON, "User-Agent": user_agent})
    for name, value in registration.headers.items():
        if name.lower() == "content-type":
            continue
        headers[name] = str(value)
    if registration.secret:
        headers["X-Webhook-Secret"] = registration.secret
        headers["Authorization"] = f"Bearer {registration.secret}"
    return headers


class WebhookDispatcher:
    """Concurrent best-effort fan-out of one event to its registrations."""

    policy = BestEffortOnce()

    def __init__(
        self,
        registry: RegistrationReader,
        log_sink: DeliveryLogSink,
        http_client: httpx.AsyncClient | None = None,
        *,
        user_agent: str | None = None,
        default_timeout: float | None = None,
        excerpt_chars: int | None = None,
    ):
        self.registry = registry
        self.log_sink = log_sink
        self.http_client = http_client
        self.user_agent = user_agent or settings.webhook_user_agent
        self.default_timeout = default_timeout or settings.webhook_default_timeout_seconds
        self.excerpt_chars = excerpt_chars or settings.webhook_response_excerpt_chars

    def resolve_candidates(self, event_name: str, scope: DispatchScope) -> list[Registration]:
        """Active registrations in scope, before the event-name filter."""
        owner_id = scope.owner_id
        if owner_id is None and scope.resource_id is not None:
            owner_id = self.registry.resolve_owner(scope.resource_id)
        resolved = DispatchScope(owner_id=owner_id, resource_id=scope.resource_id)
        if resolved.owner_id is None and resolved.resource_id is None:
            return []
        return [
            registration
            for registration in self.registry.find_active(resolved, event_name)
            if registration.active and registration.in_scope(resolved)
        ]

    async def dispatch(
        self, event_name: str, payload: Any, scope: DispatchScope,
    ) -> DispatchResult:
        if not event_name:
            raise ValueError("event_name is required")

        candidates = self.resolve_candidates(event_name, scope)
        if not candidates:
            logger.info("No active webhooks for event %s", event_name)
            return DispatchResult(event=event_name)

        results: list[DeliveryResult] = []
        listening: list[Registration] = []
        for registration in candidates:
            if registration.listens_to(event_name):
                listening.append(registration)
            else:
                results.append(
                    DeliveryResult(webhook_id=registration.id, url=registration.url, skipped=True)
                )

        timestamp = datetime.now(UTC).isoformat()
        if listening:
            async with client_session(self.http_client) as client:
                settled = await asyncio.gather(
                    *(
                        self._deliver(client, registration, event_name, payload, timestamp)
                        for registration in listening
                    ),
                    return_exceptions=True,
                )
            for registration, outcome in zip(listening, settled, strict=True):
                if isinstance(outcome, BaseException):
                    logger.error(
                        "Webhook %s raised during delivery: %r", registration.id, outcome
                    )
                    outcome = DeliveryResult(
                        webhook_id=registration.id, url=registration.url, error=str(outcome)
                    )
                results.append(outcome)

        result = DispatchResult(event=event_name, triggered=len(candidates), results=results)
        logger.info(
            "Webhook results for %s: %d successful, %d failed, %d skipped",
            event_name,
            result.successful,
            result.failed,
            result.skipped,
        )
        return result

    async def _deliver(
        self,
        client: httpx.AsyncClient,
        registration: Registration,
        event_name: str,
        payload: Any,
        timestamp: str,
    ) -> DeliveryResult:
        envelope = build_envelope(
            event_name, payload, registration.id, timestamp, settings.webhook_envelope_version
        )
        content = json.dumps(envelope, default=str).encode("utf-8")
        headers = build_headers(registration, self.user_agent)
        timeout = registration.timeout_seconds or self.default_timeout

        async def attempt(number: int) -> DeliveryOutcome:
            return await post_json(
                client,
                registration.url,
                content,
                headers,
                timeout=timeout,
                attempt=number,
                excerpt_chars=self.excerpt_chars,
            )

        (outcome,) = await self.policy.run(attempt)

        if outcome.timed_out:
            error: str | None = f"timeout after {timeout:g}s"
        elif outcome.status == 0:
            error = outcome.error
        elif not outcome.success:
            error = f"HTTP {outcome.status}"
        else:
            error = None

        self._record(
            DeliveryAttempt(
                registration_id=registration.id,
                owner_id=registration.owner_id,
                event_name=event_name,
                payload=envelope,
                response_status=outcome.status,
                response_body_excerpt=outcome.body if outcome.status else error,
                occurred_at=datetime.now(UTC),
            )
        )

        if outcome.success:
            logger.info("Webhook %s delivered: %d", registration.id, outcome.status)
        else:
            logger.warning("Webhook %s failed: %s", registration.id, error)

        return DeliveryResult(
            webhook_id=registration.id,
            url=registration.url,
            success=outcome.success,
            status=outcome.status or None,
            error=error,
        )

    def _record(self, attempt: DeliveryAttempt) -> None:
        try:
            self.log_sink.append(attempt)
        except Exception:
            logger.exception(
                "Failed to record delivery of webhook %s", attempt.registration_id
            )
