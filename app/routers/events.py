from fastapi import APIRouter, HTTPException, Depends, Query, Request
from typing import List, Optional
from app.config import get_settings
from app.context import RequestContext, get_request_context
from app.errors import EventStoreError
from app.schemas.event import EventPayload, EventOut, ReviewCreate, ReviewAck
from app.services.event_service import EventService, EventServiceOptions

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(request: Request):
    """Dependency to get EventService bound to the process-wide store"""
    options = EventServiceOptions.from_settings(get_settings())
    return EventService(request.app.state.event_store, options)


@router.get("/", response_model=List[EventOut])
async def list_events(
    page: Optional[int] = Query(None, ge=1, description="Page number, from 1"),
    pageSize: Optional[int] = Query(None, ge=1, description="Events per page"),
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    """List all events, optionally one page at a time"""
    try:
        return event_service.list_events(ctx, page, pageSize)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/organizer/{owner_id}", response_model=List[EventOut])
async def list_events_by_organizer(
    owner_id: str,
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.list_by_organizer(ctx, owner_id)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/attending", response_model=List[EventOut])
async def list_attended_events(
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    """List events the caller has RSVP'd to"""
    try:
        return event_service.list_attended_by_caller(ctx)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/status", response_model=List[EventOut])
async def list_events_by_time_status(
    upcoming: bool = Query(
        ..., description="true for events still ahead, false for past events"
    ),
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.list_by_time_status(ctx, upcoming)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{event_id}", response_model=EventOut)
async def get_event(
    event_id: str,
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.get_event(ctx, event_id)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/", response_model=EventOut, status_code=201)
async def create_event(
    payload: EventPayload,
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    """Create a new event owned by the caller"""
    try:
        return event_service.create_event(ctx, payload)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/{event_id}", response_model=EventOut)
async def update_event(
    event_id: str,
    payload: EventPayload,
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    """Update an event; only its owner may do so"""
    try:
        return event_service.update_event(ctx, event_id, payload)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{event_id}", response_model=EventOut)
async def delete_event(
    event_id: str,
    confirmation: Optional[str] = Query(
        None, description="Confirmation token, when deletes require one"
    ),
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    """Delete an event; only its owner may do so"""
    try:
        return event_service.delete_event(ctx, event_id, confirmation)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{event_id}/attend", response_model=EventOut)
async def attend_event(
    event_id: str,
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    """RSVP the caller to an event"""
    try:
        return event_service.attend_event(ctx, event_id)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{event_id}/reviews", response_model=ReviewAck)
async def add_review(
    event_id: str,
    review: ReviewCreate,
    ctx: RequestContext = Depends(get_request_context),
    event_service: EventService = Depends(get_event_service),
):
    """Add a review to an event the caller attends"""
    try:
        return event_service.add_review(ctx, event_id, review.text)
    except EventStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
