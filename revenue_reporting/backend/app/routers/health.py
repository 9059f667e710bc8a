# backend/app/routers/health.py
from __future__ import annotations

from fastapi import APIRouter

from ..config import settings

router = APIRouter(tags=["health"])


@router.get("/health", response_model=dict)
def health():
    return {"ok": True, "env": settings.app_env, "version": settings.report_version}
