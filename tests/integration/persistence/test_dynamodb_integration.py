"""Integration tests: a reminder pass over the seeded LocalStack tables."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from shaho.persistence.dynamodb_backend import (
    DynamoDBApplicationStore,
    DynamoDBEmployeeStore,
    DynamoDBNotificationStore,
    DynamoDBOrganizationStore,
    DynamoDBUserDirectory,
)
from shaho.reminders.orchestrator import ReminderOrchestrator
from tests.integration.conftest import LOCALSTACK_URL, REGION, skip_no_localstack


@skip_no_localstack
class TestReminderPassIntegration:
    @pytest.fixture
    def orchestrator(self, seeded_tables):
        kwargs = {"table_suffix": seeded_tables, "region": REGION, "endpoint_url": LOCALSTACK_URL}
        return ReminderOrchestrator(
            applications=DynamoDBApplicationStore(**kwargs),
            employees=DynamoDBEmployeeStore(**kwargs),
            organizations=DynamoDBOrganizationStore(**kwargs),
            notifications=DynamoDBNotificationStore(**kwargs),
            directory=DynamoDBUserDirectory(**kwargs),
        )

    def test_seeded_application_is_stored_with_item_deadline(self, orchestrator, seeded_tables):
        now = datetime(2024, 4, 1, 11, tzinfo=ZoneInfo("Asia/Tokyo"))
        orchestrator.run("org-demo", now=now)
        store = DynamoDBApplicationStore(table_suffix=seeded_tables, region=REGION,
                                         endpoint_url=LOCALSTACK_URL)
        application = store.get("app-001")
        assert application.data["insuredPersons"][0]["deadline"] == "2024-04-08"

    def test_rerun_creates_nothing_new(self, orchestrator):
        now = datetime(2024, 4, 1, 11, tzinfo=ZoneInfo("Asia/Tokyo"))
        orchestrator.run("org-demo", now=now)
        assert orchestrator.run("org-demo", now=now).notifications_created == 0
