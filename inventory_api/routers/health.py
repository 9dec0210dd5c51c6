import time
from datetime import datetime, timezone

from fastapi import APIRouter

from inventory_api.config import get_settings

router = APIRouter(tags=["Health"])

_STARTED = time.monotonic()


@router.get("/health")
def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "time": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": round(time.monotonic() - _STARTED, 3),
    }


@router.get("/")
def root():
    settings = get_settings()
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
    }
