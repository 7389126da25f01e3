"""Patient and medical record data models.

Models are frozen: every change produces a new value (``model_copy``) that is
written back to the store under the same key. Python attributes are
snake_case; the wire form is camelCase (``isAdmitted``, ``medicalRecords``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _RecordModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class MedicalRecord(_RecordModel):
    """A single clinical entry owned by exactly one patient."""

    id: str = Field(..., description="Caller-supplied record identifier")
    patient_id: str = Field(..., description="Id of the owning patient (advisory)")
    diagnosis: str = Field(..., description="Diagnosis text")
    treatment: str = Field(..., description="Treatment text")
    date: int = Field(..., description="Record timestamp in nanoseconds since the epoch")


class PatientPayload(_RecordModel):
    """Caller-supplied patient fields for add and update.

    Fields default to empty values so that incomplete payloads reach the
    service, which reports them with its own validation message. An absent
    ``medical_records`` leaves a patient's existing records untouched on
    update.
    """

    name: str = ""
    age: int = 0
    gender: str = ""
    medical_records: tuple[MedicalRecord, ...] | None = None

    def is_complete(self) -> bool:
        """Whether name, age and gender are all present and non-empty."""
        return bool(self.name) and bool(self.age) and bool(self.gender)


class Patient(_RecordModel):
    """A hospital patient as held in the record store."""

    id: str
    name: str
    age: int
    gender: str
    is_admitted: bool = False
    admitted_at: int | None = None
    discharged_at: int | None = None
    medical_records: tuple[MedicalRecord, ...] = ()

    @model_validator(mode="after")
    def _admitted_has_timestamp(self) -> Patient:
        if self.is_admitted and self.admitted_at is None:
            raise ValueError("an admitted patient must have admittedAt set")
        return self
