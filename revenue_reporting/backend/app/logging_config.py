# backend/app/logging_config.py
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from .middleware.request_id import get_request_id

# structured extras copied onto the line when a caller passes them via `extra=`
REPORT_EXTRAS = ("period", "lease_id", "payment_id")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record: ts (record time, UTC), level, logger, message,
    request_id when inside a request, any REPORT_EXTRAS, and exc_info.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = get_request_id()
        if rid:
            payload["request_id"] = rid

        for k in REPORT_EXTRAS:
            v = getattr(record, k, None)
            if v is not None:
                payload[k] = v

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(stream: TextIO | None = None) -> None:
    """
    Route the root logger through JsonFormatter on `stream` (stdout by default;
    the CLI passes stderr so the report owns stdout). LOG_LEVEL sets the level.
    """
    level = (os.getenv("LOG_LEVEL") or "INFO").upper()

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(level)
    # per-lease skip lines are debug; keep them quiet unless asked
    logging.getLogger("revenue.accrual").setLevel((os.getenv("ACCRUAL_LOG_LEVEL") or level).upper())
