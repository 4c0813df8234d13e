class EventStoreError(Exception):
    """Base class for failures returned by the event store service"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EventStoreError):
    status_code = 422


class NotFound(EventStoreError):
    status_code = 404

    def __init__(self, event_id: str):
        super().__init__(f"an event with id={event_id} not found")
        self.event_id = event_id


class Unauthorized(EventStoreError):
    status_code = 403


class CapacityExceeded(EventStoreError):
    status_code = 409


class StorageError(EventStoreError):
    status_code = 500
