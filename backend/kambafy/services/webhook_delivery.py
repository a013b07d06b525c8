"""HTTP transport and delivery policies shared by the webhook senders.

Tenant fan-out uses ``BestEffortOnce`` (at most one attempt per dispatch);
partner payment notifications use ``RetryWithBackoff``.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

AttemptFn = Callable[[int], Awaitable["DeliveryOutcome"]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of a single HTTP POST attempt.

    ``status`` is 0 when no response was received (timeout or transport error).
    """

    attempt: int
    status: int = 0
    body: str | None = None
    error: str | None = None
    timed_out: bool = False
    elapsed_ms: int = 0

    @property
    def success(self) -> bool:
        return 200 <= self.status < 300


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    content: bytes,
    headers: Mapping[str, str] | httpx.Headers,
    *,
    timeout: float,
    attempt: int = 1,
    excerpt_chars: int = 1000,
) -> DeliveryOutcome:
    """POST a JSON body, bounded by ``timeout`` seconds end to end.

    The same ``timeout`` is passed to httpx so the client default does not
    cut the request short.

    Never raises for network problems: timeouts and transport errors are
    returned as outcomes with ``status=0``.
    """
    started = time.monotonic()

    def elapsed() -> int:
        return int((time.monotonic() - started) * 1000)

    try:
        response = await asyncio.wait_for(
            client.post(url, content=content, headers=headers, timeout=timeout),
            timeout=timeout,
        )
    except (TimeoutError, httpx.TimeoutException):
        return DeliveryOutcome(
            attempt=attempt, timed_out=True, error="timeout", elapsed_ms=elapsed()
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return DeliveryOutcome(
            attempt=attempt,
            error=str(exc) or exc.__class__.__name__,
            elapsed_ms=elapsed(),
        )

    return DeliveryOutcome(
        attempt=attempt,
        status=response.status_code,
        body=response.text[:excerpt_chars],
        elapsed_ms=elapsed(),
    )


@asynccontextmanager
async def client_session(
    http_client: httpx.AsyncClient | None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one closed on exit."""
    if http_client is not None:
        yield http_client
        return
    async with httpx.AsyncClient() as client:
        yield client


class DeliveryPolicy(ABC):
    """Decides how many times a delivery is attempted."""

    @abstractmethod
    async def run(self, attempt_fn: AttemptFn) -> list[DeliveryOutcome]:
        """Run ``attempt_fn`` (called with a 1-based attempt number)."""
        pass  # pragma: no cover


class BestEffortOnce(DeliveryPolicy):
    """A single attempt; failures are reported, never retried."""

    async def run(self, attempt_fn: AttemptFn) -> list[DeliveryOutcome]:
        return [await attempt_fn(1)]


class RetryWithBackoff(DeliveryPolicy):
    """Retry until a 2xx or ``max_attempts`` is reached.

    The wait after attempt ``n`` is ``base_delay * 2 ** (n - 1)`` seconds.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        sleep: SleepFn | None = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep or asyncio.sleep

    def delay_after(self, attempt: int) -> float:
        return self.base_delay * 2 ** (attempt - 1)

    async def run(self, attempt_fn: AttemptFn) -> list[DeliveryOutcome]:
        outcomes: list[DeliveryOutcome] = []
        for attempt in range(1, self.max_attempts + 1):
            outcome = await attempt_fn(attempt)
            outcomes.append(outcome)
            if outcome.success:
                break
            if attempt < self.max_attempts:
                delay = self.delay_after(attempt)
                logger.info("Waiting %.1fs before delivery attempt %d", delay, attempt + 1)
                await self._sleep(delay)
        return outcomes
