import os
import pytest
import boto3

# Settings are read once per process, so the backend must be chosen before
# anything imports the app.
os.environ["EVENT_STORE_BACKEND"] = "memory"
os.environ["REQUIRE_DELETE_CONFIRMATION"] = "false"

from app.context import RequestContext
from app.database.store import InMemoryEventStore
from app.schemas.event import EventPayload
from app.services.event_service import EventService

TEST_TABLE_NAME = "EventStore_Test"

# 2024-06-01T00:00:00Z in nanoseconds
NOW = 1_717_200_000 * 1_000_000_000

OWNER = "owner-principal"
ALICE = "alice-principal"
BOB = "bob-principal"


@pytest.fixture
def make_ctx():
    """Build a RequestContext for a caller at a fixed host time"""

    def _make_ctx(caller, now=NOW):
        return RequestContext(caller=caller, now=now)

    return _make_ctx


@pytest.fixture
def event_store():
    return InMemoryEventStore()


@pytest.fixture
def event_service(event_store):
    return EventService(event_store)


@pytest.fixture
def valid_payload():
    """Valid event payload for testing"""
    return EventPayload(
        eventTitle="Meetup",
        eventDescription="D",
        eventCardImgUrl="img.png",
        eventDate="2025-01-01",
        eventLocation="Loc",
    )


@pytest.fixture
def dynamodb_resource():
    """DynamoDB resource that never leaves the process; pair with a Stubber"""
    return boto3.resource(
        "dynamodb",
        region_name="us-east-1",
        aws_access_key_id="fake",
        aws_secret_access_key="fake",
    )
