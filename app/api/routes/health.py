from datetime import datetime, timezone

from fastapi import APIRouter

from app.api.dependencies import SettingsDep
from app.models.health.responses import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(app_settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=app_settings.app_version,
        upstage_configured=bool(app_settings.upstage_api_key),
        timestamp=datetime.now(timezone.utc),
    )
