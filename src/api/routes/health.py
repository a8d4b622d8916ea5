"""Liveness endpoint."""

from fastapi import APIRouter, Request

from api.schemas import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness check. Reports the configured store backend and vision mode without running a scan.",
)
async def health_check(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(
        store=settings.store_backend,
        vision="service" if settings.vision_api_url else "baseline",
    )
