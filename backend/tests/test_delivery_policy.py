"""Tests for delivery policies and the shared POST helper."""

import asyncio

import httpx
import pytest

from kambafy.services.webhook_delivery import (
    BestEffortOnce,
    DeliveryOutcome,
    RetryWithBackoff,
    post_json,
)


class FakeSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def scripted(*statuses):
    """Attempt function returning the given statuses in order."""
    calls: list[int] = []

    async def attempt(number: int) -> DeliveryOutcome:
        calls.append(number)
        return DeliveryOutcome(attempt=number, status=statuses[number - 1])

    return attempt, calls


class TestDeliveryOutcome:
    @pytest.mark.parametrize(
        ("status", "expected"),
        [(200, True), (204, True), (299, True), (0, False), (301, False), (500, False)],
    )
    def test_success_is_2xx(self, status, expected):
        assert DeliveryOutcome(attempt=1, status=status).success is expected


class TestBestEffortOnce:
    @pytest.mark.asyncio
    async def test_single_attempt_even_on_failure(self):
        attempt, calls = scripted(500, 200)

        outcomes = await BestEffortOnce().run(attempt)

        assert calls == [1]
        assert len(outcomes) == 1
        assert outcomes[0].status == 500


class TestRetryWithBackoff:
    @pytest.mark.asyncio
    async def test_stops_on_first_success(self):
        sleep = FakeSleep()
        attempt, calls = scripted(200)

        outcomes = await RetryWithBackoff(sleep=sleep).run(attempt)

        assert calls == [1]
        assert outcomes[-1].success
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_exponential_backoff_between_attempts(self):
        sleep = FakeSleep()
        attempt, calls = scripted(500, 502, 503)

        outcomes = await RetryWithBackoff(max_attempts=3, base_delay=2.0, sleep=sleep).run(attempt)

        assert calls == [1, 2, 3]
        assert [o.status for o in outcomes] == [500, 502, 503]
        # no wait after the last attempt
        assert sleep.delays == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_succeeds_on_retry(self):
        sleep = FakeSleep()
        attempt, calls = scripted(500, 200, 200)

        outcomes = await RetryWithBackoff(sleep=sleep).run(attempt)

        assert calls == [1, 2]
        assert outcomes[-1].success
        assert sleep.delays == [2.0]

    def test_delay_after(self):
        policy = RetryWithBackoff(base_delay=1.5)
        assert [policy.delay_after(n) for n in (1, 2, 3)] == [1.5, 3.0, 6.0]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryWithBackoff(max_attempts=0)


class TestPostJson:
    @pytest.mark.asyncio
    async def test_returns_status_and_truncated_body(self):
        def handler(request):
            return httpx.Response(201, text="abcdef")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await post_json(
                client, "https://example.com/h", b"{}", {}, timeout=1, excerpt_chars=3
            )

        assert outcome.status == 201
        assert outcome.body == "abc"
        assert outcome.success

    @pytest.mark.asyncio
    async def test_timeout_is_reported_not_raised(self):
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await post_json(client, "https://example.com/h", b"{}", {}, timeout=0.05)

        assert outcome.timed_out
        assert outcome.status == 0
        assert not outcome.success

    @pytest.mark.asyncio
    async def test_httpx_timeout_is_reported_as_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await post_json(client, "https://example.com/h", b"{}", {}, timeout=1)

        assert outcome.timed_out

    @pytest.mark.asyncio
    async def test_transport_error_message(self):
        def handler(request):
            raise httpx.ConnectError("name resolution failed")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await post_json(
                client, "https://example.com/h", b"{}", {}, timeout=1, attempt=2
            )

        assert outcome.status == 0
        assert outcome.error == "name resolution failed"
        assert outcome.attempt == 2
        assert not outcome.timed_out

