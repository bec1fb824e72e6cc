"""Health check endpoints."""

from fastapi import APIRouter, Depends

from blockmail.api.deps import get_app_settings
from blockmail.core.config import Settings

router = APIRouter()


@router.get("/health", tags=["system"])
def healthcheck(app_settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    """Simple readiness probe."""

    return {"status": "ok", "app": app_settings.app_name, "environment": app_settings.environment}
