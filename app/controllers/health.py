"""Liveness probe, independent of the transcription pipeline."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.controllers.dependencies import SettingsDep
from app.utils import utc_timestamp
from app.views import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])

SERVICE_NAME = "health-check-api"
HEALTH_PATHS = frozenset({"/api/health", "/api/asr/health"})
_REJECTED_METHODS = ["POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _health_payload(health_status: str, version: str) -> dict[str, str]:
    return HealthResponse(
        status=health_status,
        timestamp=utc_timestamp(),
        service=SERVICE_NAME,
        version=version,
    ).model_dump()


def method_not_allowed_response(version: str) -> JSONResponse:
    """405 carrying the same body shape as a healthy response."""

    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content=_health_payload("ERROR", version),
    )


@router.get("/health", response_model=HealthResponse)
@router.get("/asr/health", response_model=HealthResponse, include_in_schema=False)
async def health_check(app_settings: SettingsDep) -> dict[str, str]:
    """Report that the service is up, with its version."""

    return _health_payload("OK", app_settings.app_version)


@router.api_route("/health", methods=_REJECTED_METHODS, include_in_schema=False)
@router.api_route("/asr/health", methods=_REJECTED_METHODS, include_in_schema=False)
async def health_method_not_allowed(app_settings: SettingsDep) -> JSONResponse:
    return method_not_allowed_response(app_settings.app_version)
