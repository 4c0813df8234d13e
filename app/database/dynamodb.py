import logging
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from app.config import Settings
from app.database.store import EventStore, InMemoryEventStore
from app.errors import StorageError
from app.schemas.event import EventOut

logger = logging.getLogger(__name__)

DETAIL_SK = "DETAIL"
INTEGER_FIELDS = ("maxNumber", "createdAt", "updatedAt")


def get_db_connection(settings: Settings):
    return boto3.resource(
        "dynamodb",
        endpoint_url=settings.DYNAMODB_ENDPOINT_URL or None,
        region_name=settings.AWS_DEFAULT_REGION,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
    )


def create_table_if_not_exists(dynamodb, table_name="EventStore"):
    """Create the events table if it doesn't exist"""
    try:
        dynamodb.meta.client.describe_table(TableName=table_name)
        logger.info("Table %s already exists", table_name)
        return dynamodb.Table(table_name)
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise

    table = dynamodb.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )

    logger.info("Creating table %s...", table_name)
    table.wait_until_exists()
    logger.info("Table %s created successfully", table_name)
    return table


def delete_table(dynamodb, table_name="EventStore"):
    """Delete the events table"""
    try:
        table = dynamodb.Table(table_name)
        table.delete()
        table.wait_until_not_exists()
        logger.info("Table %s deleted successfully", table_name)
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise
        logger.info("Table %s does not exist", table_name)


def _event_key(event_id: str) -> Dict[str, str]:
    return {"PK": f"EVENT#{event_id}", "SK": DETAIL_SK}


def _item_to_event(item: Dict[str, Any]) -> EventOut:
    data = {k: v for k, v in item.items() if k not in ("PK", "SK")}
    # Numbers come back from DynamoDB as Decimal
    for field in INTEGER_FIELDS:
        if data.get(field) is not None:
            data[field] = int(data[field])
    return EventOut(**data)


class DynamoDBEventStore(EventStore):
    def __init__(self, dynamodb_resource, table_name="EventStore"):
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table = dynamodb_resource.Table(table_name)

    def initialize(self) -> None:
        create_table_if_not_exists(self.dynamodb, self.table_name)

    def get(self, event_id: str) -> Optional[EventOut]:
        try:
            response = self.table.get_item(Key=_event_key(event_id))
        except ClientError as e:
            logger.error("Failed to fetch event %s: %s", event_id, e)
            raise StorageError(f"Failed to fetch event: {e}")

        item = response.get("Item")
        return _item_to_event(item) if item else None

    def insert(self, event: EventOut) -> None:
        item = {**_event_key(event.id), **event.model_dump(exclude_none=True)}
        try:
            self.table.put_item(Item=item)
        except ClientError as e:
            logger.error("Failed to store event %s: %s", event.id, e)
            raise StorageError(f"Failed to store event: {e}")

    def remove(self, event_id: str) -> Optional[EventOut]:
        try:
            response = self.table.delete_item(
                Key=_event_key(event_id), ReturnValues="ALL_OLD"
            )
        except ClientError as e:
            logger.error("Failed to delete event %s: %s", event_id, e)
            raise StorageError(f"Failed to delete event: {e}")

        item = response.get("Attributes")
        return _item_to_event(item) if item else None

    def values(self) -> List[EventOut]:
        items = []
        last_evaluated_key = None

        try:
            while True:
                scan_params = {"FilterExpression": Attr("SK").eq(DETAIL_SK)}

                if last_evaluated_key:
                    scan_params["ExclusiveStartKey"] = last_evaluated_key

                response = self.table.scan(**scan_params)
                items.extend(response.get("Items", []))

                last_evaluated_key = response.get("LastEvaluatedKey")
                if not last_evaluated_key:
                    break
        except ClientError as e:
            logger.error("Failed to fetch events: %s", e)
            raise StorageError(f"Failed to fetch events: {e}")

        events = [_item_to_event(item) for item in items]
        return sorted(events, key=lambda event: event.id)


def build_event_store(settings: Settings) -> EventStore:
    """Pick the store backend named by EVENT_STORE_BACKEND"""
    backend = settings.EVENT_STORE_BACKEND.lower()
    if backend == "memory":
        return InMemoryEventStore()
    if backend == "dynamodb":
        return DynamoDBEventStore(
            get_db_connection(settings), settings.EVENTS_TABLE_NAME
        )
    raise ValueError(f"Unknown event store backend: {settings.EVENT_STORE_BACKEND}")
