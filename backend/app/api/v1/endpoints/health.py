"""
Health check: verifies the key-value store answers.
"""
from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.logger import logger
from app.api.v1.deps import get_services
from app.services.container import Services

router = APIRouter()


@router.get("/")
async def health(services: Services = Depends(get_services)):
    store_ok = await services.repository.store_available()
    if not store_ok:
        logger.warning("Health check: store unavailable")
    return {
        "status": "ok" if store_ok else "degraded",
        "app": settings.APP_NAME,
        "store": "ok" if store_ok else "error",
        "cases_loaded": services.repository.is_loaded,
        "reminders": services.reminders is not None and services.reminders.scheduler.running,
    }
