from pydantic import BaseModel, Field
from typing import List, Optional


class EventPayload(BaseModel):
    eventTitle: str
    eventDescription: str
    eventCardImgUrl: str
    eventDate: str
    eventLocation: str
    maxNumber: Optional[int] = Field(None, ge=1)


class EventOut(EventPayload):
    id: str
    owner: str
    attendees: List[str] = []
    reviews: List[str] = []
    createdAt: int
    updatedAt: Optional[int] = None


class ReviewCreate(BaseModel):
    text: str


class ReviewAck(BaseModel):
    message: str
