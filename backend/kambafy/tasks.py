from typing import Any
from uuid import UUID

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from arq.jobs import Job

from kambafy.core.config import settings

# Redis connection settings
redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)


async def get_redis_pool() -> ArqRedis:
    """Get or create Redis pool for arq"""
    return await create_pool(redis_settings)


async def enqueue_task(task_name: str, *args: Any, **kwargs: Any) -> Job:
    """
    Enqueue a task to the arq worker.

    Args:
        task_name: Name of the task function
        *args: Positional arguments for the task
        **kwargs: Keyword arguments for the task

    Returns:
        Job object from arq
    """
    pool = await get_redis_pool()
    try:
        job = await pool.enqueue_job(task_name, *args, **kwargs)
        return job  # type: ignore[return-value]
    finally:
        await pool.close()


async def enqueue_trigger_webhooks(
    event: str,
    payload: dict[str, Any],
    owner_id: UUID | None = None,
    resource_id: UUID | None = None,
) -> Job:
    """Enqueue a webhook fan-out so the caller does not wait on deliveries."""
    return await enqueue_task(
        "trigger_webhooks_task",
        event,
        payload,
        str(owner_id) if owner_id else None,
        str(resource_id) if resource_id else None,
    )


async def enqueue_partner_webhook(payment_id: UUID, event: str) -> Job:
    """Enqueue a partner payment notification."""
    return await enqueue_task("process_partner_webhook_task", str(payment_id), event)
