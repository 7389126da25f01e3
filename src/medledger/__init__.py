"""medledger - patient record service over an ordered key-value store."""

from .ids import IdGenerator, SecureRandomSource, SeededRandomSource, is_valid_uuid
from .models import MedicalRecord, Patient, PatientPayload
from .operations import OPERATIONS, CallKind
from .result import Err, ErrorKind, Ok, Result, match_result
from .service import PatientService
from .store import PatientStore, StoreBoundsError

__version__ = "0.1.0"

__all__ = [
    # Models
    "Patient",
    "PatientPayload",
    "MedicalRecord",
    # Results
    "Ok",
    "Err",
    "ErrorKind",
    "Result",
    "match_result",
    # Storage and service
    "PatientStore",
    "StoreBoundsError",
    "PatientService",
    "OPERATIONS",
    "CallKind",
    # Identifiers
    "IdGenerator",
    "SecureRandomSource",
    "SeededRandomSource",
    "is_valid_uuid",
]
