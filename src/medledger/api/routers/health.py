"""Health check endpoint."""

from fastapi import APIRouter, Depends

from ... import __version__
from ...store import PatientStore, get_store
from ..models.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(store: PatientStore = Depends(get_store)) -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="ok",
        version=__version__,
        patient_count=len(store),
    )
