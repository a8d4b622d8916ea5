"""Scan API endpoint."""

from fastapi import APIRouter, Depends, status

from api.deps import get_orchestrator
from api.schemas import ErrorEnvelope, ScanCreateRequest, ScanEnvelope
from scanning.orchestrator import ScanOrchestrator

router = APIRouter(prefix="/scan", tags=["Scans"])


@router.post(
    "",
    response_model=ScanEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Scan a page",
    description="Fetch and analyze a page, store the report and return it.",
    responses={
        400: {"model": ErrorEnvelope, "description": "Invalid URL"},
        422: {"model": ErrorEnvelope, "description": "No analyzer produced a score"},
        502: {"model": ErrorEnvelope, "description": "Page could not be fetched"},
        504: {"model": ErrorEnvelope, "description": "Fetch or scan timed out"},
    },
)
async def create_scan(
    request: ScanCreateRequest,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
) -> ScanEnvelope:
    """
    Run a scan synchronously.

    Errors are raised as pipeline exceptions and rendered by the handlers
    in api.errors.
    """
    report = await orchestrator.run_scan(request.url)
    return ScanEnvelope(data=report)
