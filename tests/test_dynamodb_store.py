import pytest
from botocore.stub import Stubber
from app.config import Settings
from app.database.dynamodb import (
    DynamoDBEventStore,
    build_event_store,
    create_table_if_not_exists,
)
from app.database.store import InMemoryEventStore
from app.errors import StorageError
from app.schemas.event import EventOut
from tests.conftest import ALICE, NOW, OWNER, TEST_TABLE_NAME


def event_item(event_id, **overrides):
    """A stored event in the DynamoDB wire format"""
    item = {
        "PK": {"S": f"EVENT#{event_id}"},
        "SK": {"S": "DETAIL"},
        "id": {"S": event_id},
        "owner": {"S": OWNER},
        "eventTitle": {"S": "Meetup"},
        "eventDescription": {"S": "D"},
        "eventCardImgUrl": {"S": "img.png"},
        "eventDate": {"S": "2025-01-01"},
        "eventLocation": {"S": "Loc"},
        "attendees": {"L": [{"S": ALICE}]},
        "reviews": {"L": []},
        "createdAt": {"N": str(NOW)},
    }
    item.update(overrides)
    return item


@pytest.fixture
def stubber(dynamodb_resource):
    with Stubber(dynamodb_resource.meta.client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def store(dynamodb_resource):
    return DynamoDBEventStore(dynamodb_resource, TEST_TABLE_NAME)


def test_get_event(store, stubber):
    stubber.add_response(
        "get_item", {"Item": event_item("e1", maxNumber={"N": "50"})}
    )

    event = store.get("e1")

    assert isinstance(event, EventOut)
    assert event.id == "e1"
    assert event.attendees == [ALICE]
    assert event.createdAt == NOW
    assert isinstance(event.createdAt, int)
    assert event.maxNumber == 50
    assert event.updatedAt is None


def test_get_missing_event(store, stubber):
    stubber.add_response("get_item", {})

    assert store.get("missing") is None


def test_insert_event(store, stubber):
    stubber.add_response("put_item", {})

    store.insert(
        EventOut(
            id="e1",
            owner=OWNER,
            eventTitle="Meetup",
            eventDescription="D",
            eventCardImgUrl="img.png",
            eventDate="2025-01-01",
            eventLocation="Loc",
            createdAt=NOW,
        )
    )


def test_remove_returns_old_event(store, stubber):
    stubber.add_response("delete_item", {"Attributes": event_item("e1")})

    removed = store.remove("e1")

    assert removed.id == "e1"


def test_values_follows_pages_and_sorts_by_id(store, stubber):
    stubber.add_response(
        "scan",
        {
            "Items": [event_item("b")],
            "Count": 1,
            "ScannedCount": 1,
            "LastEvaluatedKey": {"PK": {"S": "EVENT#b"}, "SK": {"S": "DETAIL"}},
        },
    )
    stubber.add_response(
        "scan",
        {"Items": [event_item("c"), event_item("a")], "Count": 2, "ScannedCount": 2},
    )

    events = store.values()

    assert [event.id for event in events] == ["a", "b", "c"]


def test_client_error_becomes_storage_error(store, stubber):
    stubber.add_client_error(
        "get_item",
        service_error_code="ProvisionedThroughputExceededException",
        http_status_code=400,
    )

    with pytest.raises(StorageError):
        store.get("e1")


def test_create_table_when_missing(dynamodb_resource, stubber):
    stubber.add_client_error(
        "describe_table",
        service_error_code="ResourceNotFoundException",
        http_status_code=400,
    )
    stubber.add_response(
        "create_table",
        {"TableDescription": {"TableName": TEST_TABLE_NAME, "TableStatus": "CREATING"}},
    )
    stubber.add_response(
        "describe_table",
        {"Table": {"TableName": TEST_TABLE_NAME, "TableStatus": "ACTIVE"}},
    )

    table = create_table_if_not_exists(dynamodb_resource, TEST_TABLE_NAME)

    assert table.name == TEST_TABLE_NAME


def test_create_table_skips_existing(dynamodb_resource, stubber):
    stubber.add_response(
        "describe_table",
        {"Table": {"TableName": TEST_TABLE_NAME, "TableStatus": "ACTIVE"}},
    )

    table = create_table_if_not_exists(dynamodb_resource, TEST_TABLE_NAME)

    assert table.name == TEST_TABLE_NAME


def test_build_event_store_backends():
    assert isinstance(
        build_event_store(Settings(EVENT_STORE_BACKEND="memory")), InMemoryEventStore
    )
    assert isinstance(
        build_event_store(Settings(EVENT_STORE_BACKEND="dynamodb")),
        DynamoDBEventStore,
    )
    with pytest.raises(ValueError):
        build_event_store(Settings(EVENT_STORE_BACKEND="sqlite"))


def test_init_script_creates_or_drops_table(monkeypatch):
    from scripts import init_dynamodb

    calls = []
    monkeypatch.setattr(
        init_dynamodb,
        "create_table_if_not_exists",
        lambda dynamodb, name: calls.append(("create", name)),
    )
    monkeypatch.setattr(
        init_dynamodb, "delete_table", lambda dynamodb, name: calls.append(("drop", name))
    )

    init_dynamodb.main(["--table", "Events_Script"])
    init_dynamodb.main(["--drop", "--table", "Events_Script"])

    assert calls == [("create", "Events_Script"), ("drop", "Events_Script")]


def test_scan_error_becomes_storage_error(store, stubber):
    stubber.add_client_error(
        "scan",
        service_error_code="InternalServerError",
        http_status_code=500,
    )

    with pytest.raises(StorageError) as exc_info:
        store.values()

    assert "Failed to fetch events" in str(exc_info.value)
