from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from app.schemas.event import EventOut


class EventStore(ABC):
    """Durable map of event id to event, iterated in ascending id order"""

    def initialize(self) -> None:
        """Prepare the backing storage; called once at process start"""

    @abstractmethod
    def get(self, event_id: str) -> Optional[EventOut]:
        ...

    @abstractmethod
    def insert(self, event: EventOut) -> None:
        """Insert or replace the whole record stored under event.id"""

    @abstractmethod
    def remove(self, event_id: str) -> Optional[EventOut]:
        ...

    @abstractmethod
    def values(self) -> List[EventOut]:
        ...


class InMemoryEventStore(EventStore):
    """Process-local store; records are copied in and out so callers never
    share state with the stored value."""

    def __init__(self):
        self._events: Dict[str, EventOut] = {}

    def get(self, event_id: str) -> Optional[EventOut]:
        event = self._events.get(event_id)
        return event.model_copy(deep=True) if event else None

    def insert(self, event: EventOut) -> None:
        self._events[event.id] = event.model_copy(deep=True)

    def remove(self, event_id: str) -> Optional[EventOut]:
        return self._events.pop(event_id, None)

    def values(self) -> List[EventOut]:
        return [
            self._events[event_id].model_copy(deep=True)
            for event_id in sorted(self._events)
        ]
