import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from app.config import Settings
from app.context import RequestContext
from app.database.store import EventStore
from app.errors import CapacityExceeded, NotFound, Unauthorized, ValidationError
from app.schemas.event import EventOut, EventPayload, ReviewAck

logger = logging.getLogger(__name__)

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

REQUIRED_FIELDS = (
    "eventTitle",
    "eventDescription",
    "eventCardImgUrl",
    "eventDate",
    "eventLocation",
)


def parse_event_date(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC"""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"eventDate '{value}' is not a valid ISO-8601 date")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _ns_to_datetime(timestamp: int) -> datetime:
    return EPOCH + timedelta(microseconds=timestamp // 1000)


@dataclass(frozen=True)
class EventServiceOptions:
    paginate: bool = True
    enforce_capacity: bool = True
    require_delete_confirmation: bool = False
    delete_confirmation_token: str = "DELETE"

    @classmethod
    def from_settings(cls, settings: Settings) -> "EventServiceOptions":
        return cls(
            paginate=settings.ENABLE_PAGINATION,
            enforce_capacity=settings.ENABLE_CAPACITY_LIMIT,
            require_delete_confirmation=settings.REQUIRE_DELETE_CONFIRMATION,
            delete_confirmation_token=settings.DELETE_CONFIRMATION_TOKEN,
        )


class EventService:
    def __init__(
        self, store: EventStore, options: Optional[EventServiceOptions] = None
    ):
        self.store = store
        self.options = options or EventServiceOptions()

    def list_events(
        self,
        ctx: RequestContext,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> List[EventOut]:
        """
        Return all events in id order. With pagination enabled and both
        page and page_size given, only the (page-1)*page_size window is
        returned; windows past the end yield a short or empty list.
        """
        events = self.store.values()

        if not self.options.paginate or page is None or page_size is None:
            return events

        if page < 1 or page_size < 1:
            raise ValidationError("page and pageSize must be at least 1")

        start = (page - 1) * page_size
        end = start + page_size
        return events[start:end]

    def get_event(self, ctx: RequestContext, event_id: str) -> EventOut:
        event = self.store.get(event_id)
        if event is None:
            raise NotFound(event_id)
        return event

    def create_event(self, ctx: RequestContext, payload: EventPayload) -> EventOut:
        """Validate the payload and store a new event owned by the caller"""
        self._validate_payload(payload)

        event = EventOut(
            id=str(uuid.uuid4()),
            owner=ctx.caller,
            attendees=[],
            reviews=[],
            createdAt=ctx.now,
            updatedAt=None,
            **payload.model_dump(),
        )
        self.store.insert(event)

        logger.info("Event %s created by %s", event.id, ctx.caller)
        return event

    def update_event(
        self, ctx: RequestContext, event_id: str, payload: EventPayload
    ) -> EventOut:
        """
        Merge payload fields into the caller's event and refresh updatedAt.
        maxNumber is only touched when the payload sets it; an explicit null
        lifts the limit.
        """
        self._validate_payload(payload)

        event = self.get_event(ctx, event_id)
        self._check_owner(ctx, event, "update")

        if payload.maxNumber is not None and payload.maxNumber < len(event.attendees):
            raise ValidationError(
                f"maxNumber {payload.maxNumber} is below the current "
                f"attendee count {len(event.attendees)}"
            )

        updated = event.model_copy(
            update={**payload.model_dump(exclude_unset=True), "updatedAt": ctx.now}
        )
        self.store.insert(updated)

        logger.info("Event %s updated by %s", event_id, ctx.caller)
        return updated

    def delete_event(
        self,
        ctx: RequestContext,
        event_id: str,
        confirmation: Optional[str] = None,
    ) -> EventOut:
        event = self.get_event(ctx, event_id)
        self._check_owner(ctx, event, "delete")

        if (
            self.options.require_delete_confirmation
            and confirmation != self.options.delete_confirmation_token
        ):
            logger.warning("Delete of event %s rejected: bad confirmation", event_id)
            raise ValidationError(
                f"Deleting an event requires confirmation "
                f"'{self.options.delete_confirmation_token}'"
            )

        self.store.remove(event_id)

        logger.info("Event %s deleted by %s", event_id, ctx.caller)
        return event

    def attend_event(self, ctx: RequestContext, event_id: str) -> EventOut:
        """RSVP the caller; attending twice leaves the event unchanged"""
        event = self.get_event(ctx, event_id)

        if ctx.caller in event.attendees:
            return event

        if (
            self.options.enforce_capacity
            and event.maxNumber is not None
            and len(event.attendees) >= event.maxNumber
        ):
            logger.warning("Event %s is full, %s turned away", event_id, ctx.caller)
            raise CapacityExceeded(
                f"event with id={event_id} has reached its limit of "
                f"{event.maxNumber} attendees"
            )

        updated = event.model_copy(update={"attendees": [*event.attendees, ctx.caller]})
        self.store.insert(updated)

        logger.info("%s is attending event %s", ctx.caller, event_id)
        return updated

    def add_review(self, ctx: RequestContext, event_id: str, text: str) -> ReviewAck:
        if not text:
            raise ValidationError("Review text must not be empty")

        event = self.get_event(ctx, event_id)

        if ctx.caller not in event.attendees:
            logger.warning(
                "Review on event %s rejected: %s is not an attendee",
                event_id,
                ctx.caller,
            )
            raise Unauthorized("Only attendees of this event can add a review")

        updated = event.model_copy(update={"reviews": [*event.reviews, text]})
        self.store.insert(updated)

        logger.info("%s reviewed event %s", ctx.caller, event_id)
        return ReviewAck(message="Review added successfully")

    def list_by_organizer(self, ctx: RequestContext, owner_id: str) -> List[EventOut]:
        return [event for event in self.store.values() if event.owner == owner_id]

    def list_attended_by_caller(self, ctx: RequestContext) -> List[EventOut]:
        return [
            event for event in self.store.values() if ctx.caller in event.attendees
        ]

    def list_by_time_status(
        self, ctx: RequestContext, is_upcoming: bool
    ) -> List[EventOut]:
        """
        is_upcoming=True selects events dated after the current host time,
        False selects events whose date has been reached or passed.
        """
        now = _ns_to_datetime(ctx.now)
        return [
            event
            for event in self.store.values()
            if (parse_event_date(event.eventDate) > now) == is_upcoming
        ]

    def _validate_payload(self, payload: EventPayload) -> None:
        missing = [field for field in REQUIRED_FIELDS if not getattr(payload, field)]
        if missing:
            raise ValidationError(
                f"Missing required fields in payload: {', '.join(missing)}"
            )
        parse_event_date(payload.eventDate)

    def _check_owner(self, ctx: RequestContext, event: EventOut, action: str) -> None:
        if event.owner != ctx.caller:
            logger.warning(
                "%s tried to %s event %s owned by %s",
                ctx.caller,
                action,
                event.id,
                event.owner,
            )
            raise Unauthorized("You are not the owner of this event")
