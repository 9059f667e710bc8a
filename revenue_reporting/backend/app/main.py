# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .logging_config import configure_logging

from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.health import router as health_router
from .routers.revenue import router as revenue_router

API_PREFIX = "/api"


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging()
    yield


app = FastAPI(
    title="Revenue Reporting",
    version=getattr(settings, "report_version", "dev"),
    lifespan=lifespan,
)

# last added runs first: request id must be set before the request log line
app.add_middleware(StructuredLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix=API_PREFIX)
app.include_router(revenue_router, prefix=API_PREFIX)


def run() -> None:
    """`revenue-serve` entry point. log_config=None leaves the JSON root handler in charge."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
