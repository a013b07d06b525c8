"""Webhook event catalog and sample payloads for test deliveries."""

import calendar as cal
import time
from datetime import UTC, datetime, timedelta
from typing import Any

from kambafy.core.config import settings
from kambafy.models.product import Product

# Supported webhook event types
WEBHOOK_EVENT_TYPES = [
    "order.created",
    "order.completed",
    "order.cancelled",
    "order.paid",
    "order.refunded",
    "payment.success",
    "payment.failed",
    "product.purchased",
    "user.registered",
    "subscription.paid",
    "subscription.payment_failed",
    "subscription.renewed",
    "subscription.cancelled",
]

SAMPLE_CUSTOMER = {
    "email": "teste@exemplo.com",
    "name": "Cliente Teste",
    "phone": "+244923456789",
}
SAMPLE_CURRENCY = "AOA"
SAMPLE_PAYMENT_METHOD = "appypay"
GRACE_PERIOD_DAYS = 7


def _price(product: Product) -> float:
    return float(product.price or 0)


def _add_months(dt: datetime, months: int) -> datetime:
    """Add months to a datetime, clamping to last day of month."""
    month = dt.month - 1 + months
    year = dt.year + month // 12
    month = month % 12 + 1
    day = min(dt.day, cal.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def _next_payment_date(now: datetime, config: dict[str, Any]) -> datetime:
    count = int(config.get("interval_count") or 1)
    if config.get("interval") == "yearly":
        return _add_months(now, 12 * count)
    if config.get("interval") == "monthly":
        return _add_months(now, count)
    return _add_months(now, 1)


def build_sample_event(
    event_type: str, product: Product, now: datetime | None = None,
) -> dict[str, Any]:
    """Build a realistic test payload for ``event_type`` about ``product``."""
    now = now or datetime.now(UTC)
    stamp = int(time.time() * 1000)
    config: dict[str, Any] = product.subscription_config or {}

    data: dict[str, Any] = {
        "event": event_type,
        "timestamp": now.isoformat(),
        "test_mode": True,
        "customer": dict(SAMPLE_CUSTOMER),
        "product": {
            "id": str(product.id),
            "name": product.name,
            "price": _price(product),
            "type": product.type,
        },
    }

    if event_type == "subscription.paid":
        next_payment = _next_payment_date(now, config)
        data["subscription"] = {
            "status": "active",
            "current_period_start": now.isoformat(),
            "current_period_end": next_payment.isoformat(),
            "next_payment_date": next_payment.isoformat(),
            "interval": config.get("interval") or "monthly",
            "interval_count": config.get("interval_count") or 1,
        }
        data["payment"] = {
            "order_id": f"TEST-{stamp}",
            "amount": _price(product),
            "currency": SAMPLE_CURRENCY,
            "method": SAMPLE_PAYMENT_METHOD,
            "paid_at": now.isoformat(),
        }
        data["access"] = {"should_grant": True, "reason": "Subscription payment confirmed"}
    elif event_type == "subscription.payment_failed":
        data["subscription"] = {
            "status": "past_due",
            "expired_at": now.isoformat(),
            "suspended_at": now.isoformat(),
            "grace_period_end": (now + timedelta(days=GRACE_PERIOD_DAYS)).isoformat(),
            "interval": config.get("interval") or "monthly",
        }
        data["access"] = {
            "should_revoke": True,
            "reason": "Payment not received after due date",
            "grace_period_days": GRACE_PERIOD_DAYS,
        }
        data["reactivation"] = {
            "url": f"{settings.public_site_url}/reactivate/{product.id}",
            "discount_available": True,
            "discount_percentage": 10,
        }
    elif event_type in ("order.created", "order.completed"):
        completed = event_type == "order.completed"
        order: dict[str, Any] = {
            "id": f"TEST-{stamp}",
            "status": "completed" if completed else "pending",
            "amount": _price(product),
            "currency": SAMPLE_CURRENCY,
            "payment_method": SAMPLE_PAYMENT_METHOD,
        }
        order["completed_at" if completed else "created_at"] = now.isoformat()
        data["order"] = order
        if completed:
            lifetime = product.access_duration_type == "lifetime"
            data["access"] = {
                "should_grant": True,
                "expires_at": None if lifetime else (now + timedelta(days=30)).isoformat(),
            }
    elif event_type in ("payment.success", "payment.failed"):
        failed = event_type == "payment.failed"
        payment: dict[str, Any] = {
            "id": f"PAY-TEST-{stamp}",
            "order_id": f"TEST-{stamp}",
            "amount": _price(product),
            "currency": SAMPLE_CURRENCY,
            "method": SAMPLE_PAYMENT_METHOD,
            "status": "failed" if failed else "completed",
        }
        if failed:
            payment["failed_at"] = now.isoformat()
            payment["error"] = "Insufficient balance"
        else:
            payment["paid_at"] = now.isoformat()
        data["payment"] = payment
    else:
        data["message"] = "Generic test event"

    return data
