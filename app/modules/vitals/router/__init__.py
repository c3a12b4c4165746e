"""Compose vitals HTTP routers."""

from fastapi import APIRouter

from .http import (
    classify_readings,
    compare_trend,
    compare_trend_windows,
    list_profiles,
    router as http_router,
)

router = APIRouter()
router.include_router(http_router)

__all__ = [
    "router",
    "classify_readings",
    "compare_trend",
    "compare_trend_windows",
    "list_profiles",
]
