"""Patient service: the exported operations over the record store.

Every operation returns an ``Ok``/``Err`` result and never raises. Input is
validated before the store is touched; anything that fails afterwards is
logged and returned as an internal error. Updates are copy-on-write: the
current patient is read, a new value is built with ``model_copy`` and the
whole patient is written back under the same key.
"""

from __future__ import annotations

import logging

from .clock import Clock, SystemClock
from .ids import IdGenerator, is_valid_uuid
from .models import MedicalRecord, Patient, PatientPayload
from .operations import OPERATIONS
from .result import Err, ErrorKind, Ok, Result
from .store import PatientStore, get_store

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Missing required fields in the patient object"


def _validation(message: str) -> Err:
    return Err(message, ErrorKind.VALIDATION)


def _not_found(message: str) -> Err:
    return Err(message, ErrorKind.NOT_FOUND)


def _conflict(message: str) -> Err:
    return Err(message, ErrorKind.CONFLICT)


def _internal(message: str, error: Exception) -> Err:
    return Err(f"{message}: {error}", ErrorKind.INTERNAL)


def _find_record(records: tuple[MedicalRecord, ...], record_id: str) -> int:
    """Index of the first record with *record_id*, or -1."""
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    return -1


class PatientService:
    """Patient CRUD, admission state and nested medical-record operations."""

    def __init__(
        self,
        store: PatientStore,
        id_generator: IdGenerator | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.id_generator = id_generator or IdGenerator()
        self.clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    @OPERATIONS.update("addPatient", "Add a new patient with a generated id")
    def add_patient(self, payload: PatientPayload) -> Result[Patient]:
        if not payload.is_complete():
            return _validation(MISSING_FIELDS)

        try:
            patient = Patient(
                id=self.id_generator.new_id(),
                name=payload.name,
                age=payload.age,
                gender=payload.gender,
                is_admitted=False,
                admitted_at=None,
                discharged_at=None,
                medical_records=payload.medical_records or (),
            )
            self.store.insert(patient.id, patient)
            logger.info("Added patient %s", patient.id)
            return Ok(patient)
        except Exception as e:
            logger.exception("Error adding patient")
            return _internal("Error adding patient", e)

    @OPERATIONS.query("getPatients", "List all patients in key order")
    def get_patients(self) -> Result[list[Patient]]:
        try:
            return Ok(self.store.values())
        except Exception as e:
            logger.exception("Error getting patients")
            return _internal("Error getting patients", e)

    @OPERATIONS.query("getPatient", "Get a patient by id")
    def get_patient(self, patient_id: str) -> Result[Patient]:
        if not patient_id:
            return _validation("Invalid ID for getting a patient.")

        try:
            patient = self.store.get(patient_id)
            if patient is None:
                return _not_found(f"Patient with id={patient_id} not found")
            return Ok(patient)
        except Exception as e:
            logger.exception("Error retrieving patient %s", patient_id)
            return _internal("Error retrieving patient by ID", e)

    @OPERATIONS.update("updatePatient", "Replace a patient's name, age, gender and medical records")
    def update_patient(self, patient_id: str, payload: PatientPayload) -> Result[Patient]:
        """Merge *payload* over the stored patient.

        Id, admission flag and timestamps are kept. The medical-record
        sequence is replaced wholesale when the payload supplies one and
        kept otherwise.
        """
        if not patient_id:
            return _validation("Invalid ID for updating a patient.")
        if not payload.is_complete():
            return _validation(MISSING_FIELDS)

        try:
            existing = self.store.get(patient_id)
            if existing is None:
                return _not_found(f"Patient with id={patient_id} does not exist")

            changes = {"name": payload.name, "age": payload.age, "gender": payload.gender}
            if payload.medical_records is not None:
                changes["medical_records"] = payload.medical_records
            updated = existing.model_copy(update=changes)
            self.store.insert(patient_id, updated)
            logger.info("Updated patient %s", patient_id)
            return Ok(updated)
        except Exception as e:
            logger.exception("Error updating patient %s", patient_id)
            return _internal("Error updating patient", e)

    @OPERATIONS.update("admitPatient", "Mark a patient as admitted")
    def admit_patient(self, patient_id: str) -> Result[Patient]:
        if not patient_id:
            return _validation("Invalid ID for admitting a patient.")

        try:
            patient = self.store.get(patient_id)
            if patient is None:
                return _not_found(f"Patient with id={patient_id} not found")
            if patient.is_admitted:
                return _conflict(f"Patient with id={patient_id} is already admitted")

            admitted = patient.model_copy(
                update={"is_admitted": True, "admitted_at": self.clock.now()}
            )
            self.store.insert(patient_id, admitted)
            logger.info("Admitted patient %s", patient_id)
            return Ok(admitted)
        except Exception as e:
            logger.exception("Error admitting patient %s", patient_id)
            return _internal("Error admitting patient", e)

    @OPERATIONS.update("dischargePatient", "Discharge an admitted patient")
    def discharge_patient(self, patient_id: str) -> Result[Patient]:
        if not patient_id:
            return _validation("Invalid ID for discharging a patient.")

        try:
            patient = self.store.get(patient_id)
            if patient is None:
                return _not_found(f"Patient with id={patient_id} not found")
            if not patient.is_admitted:
                return _conflict(f"Patient with id={patient_id} is not currently admitted")

            # admitted_at is kept as history
            discharged = patient.model_copy(
                update={"is_admitted": False, "discharged_at": self.clock.now()}
            )
            self.store.insert(patient_id, discharged)
            logger.info("Discharged patient %s", patient_id)
            return Ok(discharged)
        except Exception as e:
            logger.exception("Error discharging patient %s", patient_id)
            return _internal("Error discharging patient", e)

    @OPERATIONS.update("deletePatient", "Remove a patient by UUID")
    def delete_patient(self, patient_id: str) -> Result[Patient]:
        """Remove a patient. Unlike the other operations the id must be UUID shaped."""
        if not is_valid_uuid(patient_id):
            return _validation("Invalid patient ID")

        try:
            removed = self.store.remove(patient_id)
            if removed is None:
                return _not_found(f"Patient with ID {patient_id} does not exist")
            logger.info("Deleted patient %s", patient_id)
            return Ok(removed)
        except Exception as e:
            logger.exception("Error deleting patient %s", patient_id)
            return _internal("Error deleting patient", e)

    @OPERATIONS.query("searchPatients", "Case-insensitive substring search on patient names")
    def search_patients(self, query: str) -> Result[list[Patient]]:
        try:
            needle = query.lower()
            return Ok([p for p in self.store.values() if needle in p.name.lower()])
        except Exception as e:
            logger.exception("Error searching for patients")
            return _internal("Error searching for patients", e)

    # ------------------------------------------------------------------
    # Medical records
    # ------------------------------------------------------------------

    def _warn_on_owner_mismatch(self, patient_id: str, record: MedicalRecord) -> None:
        if record.patient_id != patient_id:
            logger.warning(
                "Medical record %s names patient %s but is stored under %s",
                record.id,
                record.patient_id,
                patient_id,
            )

    @OPERATIONS.update("addMedicalRecord", "Append a medical record to a patient")
    def add_medical_record(self, patient_id: str, record: MedicalRecord) -> Result[Patient]:
        if not patient_id:
            return _validation("Invalid patient ID for adding a medical record.")

        try:
            patient = self.store.get(patient_id)
            if patient is None:
                return _not_found(f"Patient with id={patient_id} does not exist")

            self._warn_on_owner_mismatch(patient_id, record)
            updated = patient.model_copy(
                update={"medical_records": (*patient.medical_records, record)}
            )
            self.store.insert(patient_id, updated)
            logger.info("Added medical record %s to patient %s", record.id, patient_id)
            return Ok(updated)
        except Exception as e:
            logger.exception("Error adding medical record to patient %s", patient_id)
            return _internal("Error adding medical record", e)

    @OPERATIONS.update("updateMedicalRecord", "Replace a patient's medical record in place")
    def update_medical_record(
        self,
        patient_id: str,
        record_id: str,
        record: MedicalRecord,
    ) -> Result[Patient]:
        """Replace the first record whose id is *record_id*, keeping its position."""
        if not patient_id or not record_id:
            return _validation(
                "Invalid patient or medical record ID for updating a medical record."
            )

        try:
            patient = self.store.get(patient_id)
            if patient is None:
                return _not_found(f"Patient with id={patient_id} does not exist")

            records = patient.medical_records
            index = _find_record(records, record_id)
            if index == -1:
                return _not_found(
                    f"Medical record with id={record_id} not found for patient with id={patient_id}"
                )

            self._warn_on_owner_mismatch(patient_id, record)
            updated = patient.model_copy(
                update={"medical_records": (*records[:index], record, *records[index + 1:])}
            )
            self.store.insert(patient_id, updated)
            logger.info("Updated medical record %s of patient %s", record_id, patient_id)
            return Ok(updated)
        except Exception as e:
            logger.exception("Error updating medical record %s", record_id)
            return _internal("Error updating medical record", e)

    @OPERATIONS.update("deleteMedicalRecord", "Remove a medical record from a patient")
    def delete_medical_record(self, patient_id: str, record_id: str) -> Result[Patient]:
        if not patient_id or not record_id:
            return _validation(
                "Invalid patient or medical record ID for deleting a medical record."
            )

        try:
            patient = self.store.get(patient_id)
            if patient is None:
                return _not_found(f"Patient with id={patient_id} does not exist")

            records = patient.medical_records
            index = _find_record(records, record_id)
            if index == -1:
                return _not_found(
                    f"Medical record with id={record_id} not found for patient with id={patient_id}"
                )

            updated = patient.model_copy(
                update={"medical_records": (*records[:index], *records[index + 1:])}
            )
            self.store.insert(patient_id, updated)
            logger.info("Deleted medical record %s of patient %s", record_id, patient_id)
            return Ok(updated)
        except Exception as e:
            logger.exception("Error deleting medical record %s", record_id)
            return _internal("Error deleting medical record", e)

    @OPERATIONS.query("getMedicalRecords", "List a patient's medical records")
    def get_medical_records(self, patient_id: str) -> Result[list[MedicalRecord]]:
        if not patient_id:
            return _validation("Invalid ID for getting medical records.")

        try:
            patient = self.store.get(patient_id)
            if patient is None:
                return _not_found(f"Patient with id={patient_id} not found")
            return Ok(list(patient.medical_records))
        except Exception as e:
            logger.exception("Error retrieving medical records of patient %s", patient_id)
            return _internal("Error retrieving medical records by ID", e)


# Global instance (singleton pattern for FastAPI dependency injection)
_service: PatientService | None = None


def init_patient_service(
    store: PatientStore,
    id_generator: IdGenerator | None = None,
    clock: Clock | None = None,
) -> PatientService:
    """Create and set the global service. Call once during startup."""
    global _service
    _service = PatientService(store, id_generator=id_generator, clock=clock)
    return _service


def get_patient_service() -> PatientService:
    """Get the global service instance (used by FastAPI Depends)."""
    global _service
    if _service is None:
        _service = PatientService(get_store())
    return _service
