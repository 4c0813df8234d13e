from .event import EventPayload, EventOut, ReviewCreate, ReviewAck

__all__ = [
    "EventPayload",
    "EventOut",
    "ReviewCreate",
    "ReviewAck",
]
