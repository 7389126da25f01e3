"""API data models."""

from .responses import (
    HealthResponse,
    OperationInfo,
    OperationListResponse,
    PatientListResponse,
)

__all__ = [
    "HealthResponse",
    "OperationInfo",
    "OperationListResponse",
    "PatientListResponse",
]
