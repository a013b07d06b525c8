"""Tests for the apply_order_by sorting utility and sorted log listing."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from kambafy.core.database import get_db
from kambafy.core.sorting import apply_order_by
from kambafy.main import app
from kambafy.models.webhook_log import WebhookLog
from kambafy.repositories.webhook_log_repository import WebhookLogRepository
from tests.conftest import DEFAULT_USER_ID


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def db_session():
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def logs(db_session):
    repo = WebhookLogRepository(db_session)
    for event_type, status in [("order.paid", 200), ("order.cancelled", 500), ("user.registered", 0)]:
        repo.create(event_type, {}, status, user_id=DEFAULT_USER_ID)


def statuses(query):
    return [log.response_status for log in query.all()]


class TestApplyOrderBy:
    """Tests for the core sorting utility function."""

    def test_sort_by_valid_field_asc(self, db_session: Session, logs):
        query = apply_order_by(db_session.query(WebhookLog), WebhookLog, "response_status:asc")
        assert statuses(query) == [0, 200, 500]

    def test_sort_by_valid_field_desc(self, db_session: Session, logs):
        query = apply_order_by(db_session.query(WebhookLog), WebhookLog, "response_status:desc")
        assert statuses(query) == [500, 200, 0]

    def test_no_direction_defaults_to_asc(self, db_session: Session, logs):
        query = apply_order_by(db_session.query(WebhookLog), WebhookLog, "event_type")
        assert [log.event_type for log in query.all()] == [
            "order.cancelled",
            "order.paid",
            "user.registered",
        ]

    def test_invalid_direction_falls_back_to_default(self, db_session: Session, logs):
        query = apply_order_by(
            db_session.query(WebhookLog), WebhookLog, "response_status:sideways"
        )
        assert statuses(query) == [500, 200, 0]

    def test_invalid_field_falls_back_to_default(self, db_session: Session, logs):
        """Unknown column falls back to created_at desc."""
        query = apply_order_by(db_session.query(WebhookLog), WebhookLog, "nonexistent:asc")
        assert len(query.all()) == 3

    def test_custom_default_field(self, db_session: Session, logs):
        query = apply_order_by(
            db_session.query(WebhookLog),
            WebhookLog,
            None,
            default_field="response_status",
            default_direction="asc",
        )
        assert statuses(query) == [0, 200, 500]


class TestSortedLogListing:
    def test_order_by_query_param(self, client: TestClient, logs, owner_headers):
        response = client.get(
            "/v1/webhook_logs/?order_by=response_status:asc", headers=owner_headers
        )
        assert [log["response_status"] for log in response.json()] == [0, 200, 500]
