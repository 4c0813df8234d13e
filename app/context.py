import time
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from app.config import Settings, get_settings


@dataclass(frozen=True)
class RequestContext:
    """Identity and host time for a single invocation"""

    caller: str
    now: int  # nanoseconds since the epoch

    @classmethod
    def for_caller(cls, caller: str) -> "RequestContext":
        return cls(caller=caller, now=time.time_ns())


def get_request_context(
    request: Request, settings: Settings = Depends(get_settings)
) -> RequestContext:
    """Dependency building the RequestContext from the caller header"""
    caller = request.headers.get(settings.CALLER_HEADER)
    if not caller:
        raise HTTPException(
            status_code=401,
            detail=f"Missing caller identity in {settings.CALLER_HEADER} header",
        )
    return RequestContext.for_caller(caller)
