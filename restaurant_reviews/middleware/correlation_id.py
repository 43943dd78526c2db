"""
Correlation ID middleware
Every request, and every log line written while serving it, carries one id
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Incoming ids are echoed into logs and response headers
_ACCEPTED_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


def get_correlation_id() -> Optional[str]:
    """Correlation ID of the current request or job, if any"""
    return correlation_id_ctx.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind an id outside a request, e.g. for a scheduled reconciliation run"""
    correlation_id_ctx.set(correlation_id)


def resolve_correlation_id(incoming: Optional[str]) -> str:
    """Keep a well-formed incoming id, otherwise mint a UUID4"""
    if incoming and _ACCEPTED_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Binds the request's correlation id to the context for the duration of the
    request and echoes it in the response header.
    """

    def __init__(self, app, header_name: str = "X-Correlation-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        correlation_id = resolve_correlation_id(request.headers.get(self.header_name))
        request.state.correlation_id = correlation_id

        token = correlation_id_ctx.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_ctx.reset(token)

        response.headers[self.header_name] = correlation_id
        return response
