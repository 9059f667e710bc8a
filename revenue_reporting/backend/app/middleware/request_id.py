# backend/app/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

_SAFE_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


def get_request_id() -> str | None:
    return request_id_ctx.get()


def accepted_request_id(raw: Optional[str]) -> Optional[str]:
    """Caller-supplied id if it is short and header/log safe, else None."""
    if raw is None:
        return None
    rid = raw.strip()
    return rid if _SAFE_ID.match(rid) else None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each report request with an id, echoed as X-Request-ID.

    An incoming X-Request-ID is reused when it passes accepted_request_id;
    otherwise a UUID4 is minted. The id lives on request.state for the
    request log line and in a ContextVar for engine log lines.
    """

    header_out = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = accepted_request_id(request.headers.get(self.header_out)) or str(uuid.uuid4())

        request.state.request_id = rid
        token = request_id_ctx.set(rid)
        try:
            resp = await call_next(request)
            resp.headers[self.header_out] = rid
            return resp
        finally:
            request_id_ctx.reset(token)
