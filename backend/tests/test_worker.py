"""Tests for worker background tasks."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from kambafy.core import database as db_module
from kambafy.core.exceptions import PaymentNotFoundError
from kambafy.models.webhook_log import WebhookLog
from kambafy.repositories.webhook_setting_repository import WebhookSettingRepository
from kambafy.schemas.webhook import WebhookSettingCreate
from kambafy.services.partner_webhook_service import PartnerNotificationResult
from kambafy.services.webhook_dispatcher import DispatchResult, DispatchScope
from kambafy.worker import (
    WorkerSettings,
    process_partner_webhook_task,
    trigger_webhooks_task,
)
from tests.conftest import DEFAULT_USER_ID


class TestTriggerWebhooksTask:
    """Tests for the trigger_webhooks_task worker function."""

    @pytest.mark.asyncio
    async def test_dispatches_with_parsed_scope(self):
        resource_id = uuid4()
        mock_dispatcher = MagicMock()
        mock_dispatcher.dispatch = AsyncMock(
            return_value=DispatchResult(event="order.paid", triggered=0)
        )

        with (
            patch("kambafy.worker.SessionLocal", db_module.SessionLocal),
            patch("kambafy.worker.WebhookDispatcher", return_value=mock_dispatcher),
        ):
            result = await trigger_webhooks_task(
                {}, "order.paid", {"a": 1}, str(DEFAULT_USER_ID), str(resource_id)
            )

        assert result == {"triggered": 0, "successful": 0, "failed": 0, "skipped": 0}
        mock_dispatcher.dispatch.assert_awaited_once_with(
            "order.paid", {"a": 1}, DispatchScope(DEFAULT_USER_ID, resource_id)
        )

    @pytest.mark.asyncio
    async def test_delivers_end_to_end(self):
        """A registered webhook is delivered and logged through the real collaborators."""
        db = db_module.SessionLocal()
        try:
            WebhookSettingRepository(db).create(
                WebhookSettingCreate(url="https://example.com/hook", events=["order.paid"]),
                DEFAULT_USER_ID,
            )
        finally:
            db.close()

        response = MagicMock(status_code=202, text="accepted")
        mock_client = MagicMock()
        mock_client.post = AsyncMock(return_value=response)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)

        with (
            patch("kambafy.worker.SessionLocal", db_module.SessionLocal),
            patch("kambafy.services.webhook_dispatcher.httpx.AsyncClient", return_value=mock_client),
        ):
            result = await trigger_webhooks_task({}, "order.paid", {}, str(DEFAULT_USER_ID))

        assert result["successful"] == 1
        db = db_module.SessionLocal()
        try:
            assert db.query(WebhookLog).one().response_status == 202
        finally:
            db.close()

    @pytest.mark.asyncio
    async def test_closes_session(self):
        mock_db = MagicMock()
        mock_dispatcher = MagicMock()
        mock_dispatcher.dispatch = AsyncMock(return_value=DispatchResult(event="x"))

        with (
            patch("kambafy.worker.SessionLocal", return_value=mock_db),
            patch("kambafy.worker.WebhookDispatcher", return_value=mock_dispatcher),
        ):
            await trigger_webhooks_task({}, "x", {})

        mock_db.close.assert_called_once()


class TestProcessPartnerWebhookTask:
    """Tests for the process_partner_webhook_task worker function."""

    @pytest.mark.asyncio
    async def test_returns_success(self):
        payment_id = uuid4()
        mock_service = MagicMock()
        mock_service.notify = AsyncMock(
            return_value=PartnerNotificationResult(success=True, event="payment.completed")
        )

        with (
            patch("kambafy.worker.SessionLocal", db_module.SessionLocal),
            patch("kambafy.worker.PartnerWebhookService", return_value=mock_service),
        ):
            result = await process_partner_webhook_task({}, str(payment_id), "payment.completed")

        assert result is True
        mock_service.notify.assert_awaited_once_with(payment_id, "payment.completed")

    @pytest.mark.asyncio
    async def test_missing_payment_returns_false(self):
        mock_service = MagicMock()
        mock_service.notify = AsyncMock(side_effect=PaymentNotFoundError("missing"))
        mock_db = MagicMock()

        with (
            patch("kambafy.worker.SessionLocal", return_value=mock_db),
            patch("kambafy.worker.PartnerWebhookService", return_value=mock_service),
        ):
            result = await process_partner_webhook_task({}, str(uuid4()), "payment.completed")

        assert result is False
        mock_db.close.assert_called_once()


class TestWorkerSettings:
    def test_functions_registered(self):
        assert trigger_webhooks_task in WorkerSettings.functions
        assert process_partner_webhook_task in WorkerSettings.functions

    def test_redis_settings(self):
        assert WorkerSettings.redis_settings is not None
