"""API response schemas.

Patient and medical record bodies use the domain models directly; these
wrap lists and service metadata.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ...models import Patient
from ...operations import CallKind


class PatientListResponse(BaseModel):
    """Response for listing or searching patients."""

    patients: list[Patient]
    total: int


class OperationInfo(BaseModel):
    """One exported operation of the patient service."""

    name: str = Field(..., description="Exported operation name, e.g. addPatient")
    kind: CallKind = Field(..., description="query (read-only) or update (mutating)")
    description: str


class OperationListResponse(BaseModel):
    operations: list[OperationInfo]
    total: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    patient_count: int
