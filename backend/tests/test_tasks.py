"""Tests for background task enqueue helpers."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from kambafy.tasks import (
    enqueue_partner_webhook,
    enqueue_task,
    enqueue_trigger_webhooks,
    get_redis_pool,
)


class TestTasks:
    @pytest.mark.asyncio
    async def test_get_redis_pool(self):
        """Test get_redis_pool creates a pool."""
        mock_pool = MagicMock()

        with patch("kambafy.tasks.create_pool", new_callable=AsyncMock) as mock_create:
            mock_create.return_value = mock_pool

            result = await get_redis_pool()

            assert result == mock_pool
            mock_create.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_task(self):
        """Test enqueue_task enqueues a job and closes the pool."""
        mock_job = MagicMock()
        mock_job.job_id = "job-123"

        mock_pool = MagicMock()
        mock_pool.enqueue_job = AsyncMock(return_value=mock_job)
        mock_pool.close = AsyncMock()

        with patch("kambafy.tasks.get_redis_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = mock_pool

            result = await enqueue_task("my_task", "arg1", kwarg1="value1")

            assert result == mock_job
            mock_pool.enqueue_job.assert_called_once_with("my_task", "arg1", kwarg1="value1")
            mock_pool.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_task_closes_pool_on_error(self):
        """Test enqueue_task closes pool even when job enqueue fails."""
        mock_pool = MagicMock()
        mock_pool.enqueue_job = AsyncMock(side_effect=Exception("Redis error"))
        mock_pool.close = AsyncMock()

        with patch("kambafy.tasks.get_redis_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = mock_pool

            with pytest.raises(Exception, match="Redis error"):
                await enqueue_task("failing_task")

            mock_pool.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_trigger_webhooks(self):
        owner_id, resource_id = uuid4(), uuid4()

        with patch("kambafy.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            await enqueue_trigger_webhooks("order.paid", {"a": 1}, owner_id, resource_id)

        mock_enqueue.assert_called_once_with(
            "trigger_webhooks_task", "order.paid", {"a": 1}, str(owner_id), str(resource_id)
        )

    @pytest.mark.asyncio
    async def test_enqueue_trigger_webhooks_without_scope_ids(self):
        with patch("kambafy.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            await enqueue_trigger_webhooks("user.registered", {})

        mock_enqueue.assert_called_once_with(
            "trigger_webhooks_task", "user.registered", {}, None, None
        )

    @pytest.mark.asyncio
    async def test_enqueue_partner_webhook(self):
        payment_id = uuid4()

        with patch("kambafy.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            await enqueue_partner_webhook(payment_id, "payment.completed")

        mock_enqueue.assert_called_once_with(
            "process_partner_webhook_task", str(payment_id), "payment.completed"
        )
