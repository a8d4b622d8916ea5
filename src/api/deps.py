"""FastAPI dependencies for the scan pipeline components."""

from fastapi import Request

from db.store import ScanStore
from scanning.orchestrator import ScanOrchestrator


def get_orchestrator(request: Request) -> ScanOrchestrator:
    """The orchestrator built at startup (see main.lifespan)."""
    return request.app.state.orchestrator


def get_store(request: Request) -> ScanStore:
    return request.app.state.store
