"""
Health check endpoint

GET /health - server status
"""

from fastapi import APIRouter, Depends

from core.config.loader import Settings
from web.dependencies import get_app_settings
from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """Server status

    Returns:
        HealthResponse: status, scheme name, starting month and version
    """
    return HealthResponse(
        status="ok",
        scheme=settings.scheme.name,
        starting_month=settings.months.starting,
        version=API_VERSION,
    )
