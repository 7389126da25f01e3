"""Patient and medical record endpoints.

Each endpoint calls one service operation and turns an ``Err`` into an
``HTTPException`` whose detail is the service's error message.
"""

from __future__ import annotations

from typing import NoReturn, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query

from ...models import MedicalRecord, Patient, PatientPayload
from ...result import Err, ErrorKind, Result, match_result
from ...service import PatientService, get_patient_service
from ..models.responses import PatientListResponse

T = TypeVar("T")

router = APIRouter(prefix="/patients", tags=["patients"])

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


def _raise(error: Err) -> NoReturn:
    raise HTTPException(status_code=_STATUS_BY_KIND[error.kind], detail=error.message)


def _unwrap(result: Result[T]) -> T:
    return match_result(result, ok=lambda value: value, err=_raise)


def _patient_list(result: Result[list[Patient]]) -> PatientListResponse:
    patients = _unwrap(result)
    return PatientListResponse(patients=patients, total=len(patients))


@router.post("", response_model=Patient, status_code=201)
def add_patient(
    payload: PatientPayload,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    """Create a patient with a generated id."""
    return _unwrap(service.add_patient(payload))


@router.get("", response_model=PatientListResponse)
def list_patients(
    service: PatientService = Depends(get_patient_service),
) -> PatientListResponse:
    return _patient_list(service.get_patients())


@router.get("/search", response_model=PatientListResponse)
def search_patients(
    query: str = Query("", description="Case-insensitive substring of the patient name"),
    service: PatientService = Depends(get_patient_service),
) -> PatientListResponse:
    """Search patients by name."""
    return _patient_list(service.search_patients(query))


@router.get("/{patient_id}", response_model=Patient)
def get_patient(
    patient_id: str,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    return _unwrap(service.get_patient(patient_id))


@router.put("/{patient_id}", response_model=Patient)
def update_patient(
    patient_id: str,
    payload: PatientPayload,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    """Replace name, age, gender and medical records of a patient."""
    return _unwrap(service.update_patient(patient_id, payload))


@router.delete("/{patient_id}", response_model=Patient)
def delete_patient(
    patient_id: str,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    """Delete a patient and return the removed record."""
    return _unwrap(service.delete_patient(patient_id))


@router.post("/{patient_id}/admit", response_model=Patient)
def admit_patient(
    patient_id: str,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    return _unwrap(service.admit_patient(patient_id))


@router.post("/{patient_id}/discharge", response_model=Patient)
def discharge_patient(
    patient_id: str,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    return _unwrap(service.discharge_patient(patient_id))


# =============================================================================
# Medical records
# =============================================================================


@router.get("/{patient_id}/records", response_model=list[MedicalRecord])
def get_medical_records(
    patient_id: str,
    service: PatientService = Depends(get_patient_service),
) -> list[MedicalRecord]:
    return _unwrap(service.get_medical_records(patient_id))


@router.post("/{patient_id}/records", response_model=Patient, status_code=201)
def add_medical_record(
    patient_id: str,
    record: MedicalRecord,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    """Append a medical record to the patient's chart."""
    return _unwrap(service.add_medical_record(patient_id, record))


@router.put("/{patient_id}/records/{record_id}", response_model=Patient)
def update_medical_record(
    patient_id: str,
    record_id: str,
    record: MedicalRecord,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    return _unwrap(service.update_medical_record(patient_id, record_id, record))


@router.delete("/{patient_id}/records/{record_id}", response_model=Patient)
def delete_medical_record(
    patient_id: str,
    record_id: str,
    service: PatientService = Depends(get_patient_service),
) -> Patient:
    return _unwrap(service.delete_medical_record(patient_id, record_id))
