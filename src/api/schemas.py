"""Pydantic schemas for API request/response validation."""

from pydantic import BaseModel, Field

from scanning.report import ScanReport


# =============================================================================
# Request Schemas (what clients send to us)
# =============================================================================


class ScanCreateRequest(BaseModel):
    """Request body for running a new scan."""

    url: str = Field(
        ...,
        description="Absolute http(s) URL of the page to scan",
        examples=["https://example.com"],
    )


# =============================================================================
# Response Envelopes (what we send back to clients)
# =============================================================================


class ScanEnvelope(BaseModel):
    """A single scan report."""

    success: bool = True
    data: ScanReport


class ScanListEnvelope(BaseModel):
    """Scan history, newest first."""

    success: bool = True
    data: list[ScanReport]


class DeleteEnvelope(BaseModel):
    success: bool = True


class ErrorEnvelope(BaseModel):
    """Shape of every error response."""

    success: bool = False
    error: str
    errorType: str
    retryable: bool = False


# =============================================================================
# Health Check
# =============================================================================


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = "ok"
    service: str = "visiai"
    version: str = "0.1.0"
    store: str
    vision: str = Field(..., description="\"service\" when a vision endpoint is configured, else \"baseline\"")
