"""Scan history endpoints."""

from fastapi import APIRouter, Depends

from api.deps import get_store
from api.schemas import DeleteEnvelope, ErrorEnvelope, ScanEnvelope, ScanListEnvelope
from db.store import ScanStore

router = APIRouter(prefix="/results", tags=["Results"])

NOT_FOUND = {404: {"model": ErrorEnvelope, "description": "No report with this id"}}


@router.get(
    "",
    response_model=ScanListEnvelope,
    summary="List scan history",
    description="All stored reports, newest first.",
)
async def list_results(store: ScanStore = Depends(get_store)) -> ScanListEnvelope:
    return ScanListEnvelope(data=await store.list())


@router.get(
    "/{scan_id}",
    response_model=ScanEnvelope,
    summary="Get a scan report",
    responses=NOT_FOUND,
)
async def get_result(scan_id: str, store: ScanStore = Depends(get_store)) -> ScanEnvelope:
    return ScanEnvelope(data=await store.get(scan_id))


@router.delete(
    "/{scan_id}",
    response_model=DeleteEnvelope,
    summary="Delete a scan report",
    description="Permanently delete a report. The id is never reused.",
    responses=NOT_FOUND,
)
async def delete_result(scan_id: str, store: ScanStore = Depends(get_store)) -> DeleteEnvelope:
    await store.delete(scan_id)
    return DeleteEnvelope()
