# backend/app/middleware/structured_logging.py
from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("revenue.request")


def request_log_payload(request: Request, status_code: int, latency_ms: int) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "event": "http_request",
        "request_id": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "latency_ms": latency_ms,
    }
    # set by the revenue routes once the period request is normalized
    period: Optional[str] = getattr(request.state, "report_period", None)
    if period is not None:
        payload["period"] = period
    return payload


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    One JSON log line per request: request_id, method, path, status_code,
    latency_ms, plus the applied report period on revenue routes.

    The raw query string is left out; the normalized period replaces it.
    Runs inside RequestIDMiddleware, which sets request.state.request_id.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        t0 = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            latency_ms = int((time.perf_counter() - t0) * 1000)
            log.info(json.dumps(request_log_payload(request, status_code, latency_ms), default=str))
