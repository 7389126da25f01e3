"""API routers."""

from .health import router as health_router
from .operations import router as operations_router
from .patients import router as patients_router

__all__ = [
    "health_router",
    "operations_router",
    "patients_router",
]
