"""Tests for the patient service operations.

Run with: uv run pytest test_service.py
"""

from __future__ import annotations

import logging

import pytest

from medledger.clock import FixedClock
from medledger.ids import IdGenerator, SeededRandomSource, is_valid_uuid
from medledger.models import MedicalRecord, PatientPayload
from medledger.operations import OPERATIONS, CallKind
from medledger.result import Err, ErrorKind, Ok
from medledger.service import PatientService
from medledger.store import PatientStore


@pytest.fixture
def service() -> PatientService:
    return PatientService(
        PatientStore(),
        id_generator=IdGenerator(SeededRandomSource(42)),
        clock=FixedClock(start=1_000, step=10),
    )


def payload(name: str = "Ann", age: int = 30, gender: str = "F", records=()) -> PatientPayload:
    return PatientPayload(name=name, age=age, gender=gender, medical_records=records)


def record(record_id: str, patient_id: str = "", diagnosis: str = "flu") -> MedicalRecord:
    return MedicalRecord(
        id=record_id,
        patient_id=patient_id,
        diagnosis=diagnosis,
        treatment="rest",
        date=123,
    )


# =============================================================================
# Patients
# =============================================================================


def test_add_patient_assigns_id_and_defaults(service):
    result = service.add_patient(payload())

    assert isinstance(result, Ok)
    patient = result.value
    assert is_valid_uuid(patient.id)
    assert patient.name == "Ann"
    assert patient.age == 30
    assert patient.gender == "F"
    assert patient.is_admitted is False
    assert patient.admitted_at is None
    assert patient.discharged_at is None
    assert patient.medical_records == ()


@pytest.mark.parametrize(
    "bad",
    [payload(name=""), payload(age=0), payload(gender=""), PatientPayload()],
)
def test_add_patient_requires_fields(service, bad):
    result = service.add_patient(bad)

    assert result == Err("Missing required fields in the patient object", ErrorKind.VALIDATION)
    assert service.store.is_empty()


def test_added_ids_are_unique(service):
    ids = {service.add_patient(payload(name=f"P{i}")).value.id for i in range(50)}
    assert len(ids) == 50
    assert len(service.store) == 50


def test_get_patient_round_trip(service):
    created = service.add_patient(payload()).value
    assert service.get_patient(created.id) == Ok(created)


def test_get_patient_errors(service):
    assert service.get_patient("") == Err("Invalid ID for getting a patient.", ErrorKind.VALIDATION)
    assert service.get_patient("missing") == Err(
        "Patient with id=missing not found", ErrorKind.NOT_FOUND
    )


def test_get_patients_is_idempotent(service):
    service.add_patient(payload(name="Ann"))
    service.add_patient(payload(name="Bob"))

    first = service.get_patients()
    second = service.get_patients()
    assert first == second
    assert len(first.value) == 2


def test_update_patient_merges_payload(service):
    created = service.add_patient(payload(records=(record("r1"),))).value
    service.admit_patient(created.id)

    result = service.update_patient(created.id, payload(name="Anna", age=31, gender="F"))

    updated = result.value
    assert updated.id == created.id
    assert updated.name == "Anna"
    assert updated.age == 31
    assert updated.is_admitted is True
    assert updated.admitted_at is not None
    # medical records are replaced wholesale by the payload's
    assert updated.medical_records == ()
    assert service.get_patient(created.id).value == updated


def test_update_patient_without_records_keeps_them(service):
    created = service.add_patient(payload(records=(record("r1"),))).value
    service.add_medical_record(created.id, record("r2", created.id))

    updated = service.update_patient(
        created.id, PatientPayload(name="Anna", age=31, gender="F")
    ).value

    assert updated.name == "Anna"
    assert [r.id for r in updated.medical_records] == ["r1", "r2"]
    assert [r.id for r in service.get_medical_records(created.id).value] == ["r1", "r2"]


def test_add_patient_without_records_starts_empty(service):
    created = service.add_patient(PatientPayload(name="Ann", age=30, gender="F")).value
    assert created.medical_records == ()


def test_update_patient_errors(service):
    assert service.update_patient("", payload()).message == "Invalid ID for updating a patient."
    assert service.update_patient("x", payload(name="")).kind == ErrorKind.VALIDATION
    assert service.update_patient("x", payload()) == Err(
        "Patient with id=x does not exist", ErrorKind.NOT_FOUND
    )


def test_admission_state_machine(service):
    created = service.add_patient(payload(name="Ann", age=30, gender="F")).value
    assert created.is_admitted is False

    admitted = service.admit_patient(created.id).value
    assert admitted.is_admitted is True
    assert admitted.admitted_at == 1_000

    again = service.admit_patient(created.id)
    assert again == Err(f"Patient with id={created.id} is already admitted", ErrorKind.CONFLICT)

    discharged = service.discharge_patient(created.id).value
    assert discharged.is_admitted is False
    assert discharged.discharged_at == 1_010
    assert discharged.admitted_at == 1_000

    assert service.discharge_patient(created.id) == Err(
        f"Patient with id={created.id} is not currently admitted", ErrorKind.CONFLICT
    )


def test_admit_and_discharge_unknown_patient(service):
    assert service.admit_patient("ghost").kind == ErrorKind.NOT_FOUND
    assert service.discharge_patient("ghost").kind == ErrorKind.NOT_FOUND
    assert service.admit_patient("").kind == ErrorKind.VALIDATION
    assert service.discharge_patient("").kind == ErrorKind.VALIDATION


def test_admit_does_not_mutate_previous_value(service):
    created = service.add_patient(payload()).value
    service.admit_patient(created.id)
    assert created.is_admitted is False


def test_delete_patient(service):
    created = service.add_patient(payload()).value

    assert service.delete_patient(created.id) == Ok(created)
    assert service.get_patient(created.id).kind == ErrorKind.NOT_FOUND
    assert service.delete_patient(created.id) == Err(
        f"Patient with ID {created.id} does not exist", ErrorKind.NOT_FOUND
    )


def test_delete_patient_requires_uuid_shape(service):
    store = service.store
    created = service.add_patient(payload()).value
    before = store.values()

    assert service.delete_patient("not-a-uuid") == Err("Invalid patient ID", ErrorKind.VALIDATION)
    assert service.delete_patient("") == Err("Invalid patient ID", ErrorKind.VALIDATION)
    assert store.values() == before
    # other operations accept any non-empty id
    assert service.get_patient("not-a-uuid").kind == ErrorKind.NOT_FOUND
    assert service.delete_patient(created.id.upper()).kind == ErrorKind.NOT_FOUND


def test_search_patients(service):
    assert service.search_patients("ann") == Ok([])

    ann = service.add_patient(payload(name="Ann Smith")).value
    joanna = service.add_patient(payload(name="JOANNA")).value
    service.add_patient(payload(name="Bob"))

    found = service.search_patients("ANN").value
    assert sorted(p.id for p in found) == sorted([ann.id, joanna.id])
    assert len(service.search_patients("").value) == 3
    assert service.search_patients("zzz") == Ok([])


# =============================================================================
# Medical records
# =============================================================================


def test_add_medical_record_appends(service):
    patient = service.add_patient(payload(records=(record("r1"),))).value

    result = service.add_medical_record(patient.id, record("r2", patient.id))

    records = service.get_medical_records(patient.id).value
    assert [r.id for r in records] == ["r1", "r2"]
    assert records[-1] == record("r2", patient.id)
    assert result.value.medical_records == tuple(records)


def test_add_medical_record_errors(service):
    assert service.add_medical_record("", record("r1")).kind == ErrorKind.VALIDATION
    assert service.add_medical_record("ghost", record("r1")) == Err(
        "Patient with id=ghost does not exist", ErrorKind.NOT_FOUND
    )


def test_patient_id_mismatch_is_logged_not_rejected(service, caplog):
    patient = service.add_patient(payload()).value

    with caplog.at_level(logging.WARNING, logger="medledger.service"):
        result = service.add_medical_record(patient.id, record("r1", "someone-else"))

    assert isinstance(result, Ok)
    assert "someone-else" in caplog.text


def test_update_medical_record_preserves_position(service):
    records = (record("r1"), record("r2"), record("r3"))
    patient = service.add_patient(payload(records=records)).value

    replacement = record("r2", diagnosis="pneumonia")
    updated = service.update_medical_record(patient.id, "r2", replacement).value

    assert len(updated.medical_records) == 3
    assert [r.id for r in updated.medical_records] == ["r1", "r2", "r3"]
    assert updated.medical_records[1].diagnosis == "pneumonia"


def test_update_medical_record_resolves_first_match(service):
    records = (record("dup", diagnosis="a"), record("dup", diagnosis="b"))
    patient = service.add_patient(payload(records=records)).value

    updated = service.update_medical_record(patient.id, "dup", record("dup", diagnosis="c")).value

    assert [r.diagnosis for r in updated.medical_records] == ["c", "b"]


def test_update_medical_record_errors(service):
    patient = service.add_patient(payload()).value

    assert service.update_medical_record("", "r1", record("r1")).message == (
        "Invalid patient or medical record ID for updating a medical record."
    )
    assert service.update_medical_record(patient.id, "", record("r1")).kind == ErrorKind.VALIDATION
    assert service.update_medical_record("ghost", "r1", record("r1")).kind == ErrorKind.NOT_FOUND
    assert service.update_medical_record(patient.id, "r9", record("r9")) == Err(
        f"Medical record with id=r9 not found for patient with id={patient.id}",
        ErrorKind.NOT_FOUND,
    )


def test_delete_medical_record(service):
    records = (record("r1"), record("r2"), record("r2"))
    patient = service.add_patient(payload(records=records)).value

    updated = service.delete_medical_record(patient.id, "r2").value
    assert [r.id for r in updated.medical_records] == ["r1", "r2"]

    service.delete_medical_record(patient.id, "r2")
    assert [r.id for r in service.get_medical_records(patient.id).value] == ["r1"]

    assert service.delete_medical_record(patient.id, "r2").kind == ErrorKind.NOT_FOUND
    assert service.delete_medical_record("", "r1").message == (
        "Invalid patient or medical record ID for deleting a medical record."
    )


def test_get_medical_records_errors(service):
    assert service.get_medical_records("") == Err(
        "Invalid ID for getting medical records.", ErrorKind.VALIDATION
    )
    assert service.get_medical_records("ghost") == Err(
        "Patient with id=ghost not found", ErrorKind.NOT_FOUND
    )


# =============================================================================
# Internal errors and the operation registry
# =============================================================================


def test_store_failure_is_returned_as_internal_error():
    service = PatientService(PatientStore(max_value_size=10))

    result = service.add_patient(payload())

    assert result.kind == ErrorKind.INTERNAL
    assert result.message.startswith("Error adding patient: ")
    assert service.store.is_empty()


def test_operations_are_declared_with_call_kinds():
    queries = {"getPatients", "getPatient", "searchPatients", "getMedicalRecords"}
    updates = {
        "addPatient",
        "updatePatient",
        "admitPatient",
        "dischargePatient",
        "deletePatient",
        "addMedicalRecord",
        "updateMedicalRecord",
        "deleteMedicalRecord",
    }

    assert set(OPERATIONS.names) == queries | updates
    for name in queries:
        assert OPERATIONS.get(name).kind == CallKind.QUERY
    for name in updates:
        assert OPERATIONS.get(name).kind == CallKind.UPDATE


def test_registry_dispatches_by_name(service):
    created = OPERATIONS.call(service, "addPatient", payload()).value
    assert OPERATIONS.call(service, "getPatient", created.id) == Ok(created)

    with pytest.raises(KeyError):
        OPERATIONS.call(service, "dropAllPatients")
