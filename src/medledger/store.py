"""Ordered key-value record store for patients.

Keys are patient ids, values are frozen ``Patient`` models. Iteration is in
key order. When ``data_dir`` is provided the store writes every mutation
through to ``{data_dir}/region-{memory_id}/{key}.json`` and loads the region
at start-up; otherwise it is purely in-memory (useful for tests).
"""

from __future__ import annotations

import bisect
import logging
import os
from pathlib import Path

from .models import Patient

logger = logging.getLogger(__name__)


class StoreBoundsError(ValueError):
    """Raised when a key or serialized value exceeds the configured size bound."""


class PatientStore:
    """Ordered map from patient id to ``Patient``."""

    def __init__(
        self,
        data_dir: Path | None = None,
        memory_id: int = 0,
        max_key_size: int | None = None,
        max_value_size: int | None = None,
    ):
        self._values: dict[str, Patient] = {}
        self._keys: list[str] = []
        self.memory_id = memory_id
        self.max_key_size = max_key_size
        self.max_value_size = max_value_size
        self._region_dir: Path | None = None

        if data_dir is not None:
            self._region_dir = Path(data_dir) / f"region-{memory_id}"
            self._region_dir.mkdir(parents=True, exist_ok=True)
            self._load_all()

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def _load_all(self) -> None:
        assert self._region_dir is not None
        count = 0
        for path in self._region_dir.glob("*.json"):
            try:
                patient = Patient.model_validate_json(path.read_text(encoding="utf-8"))
            except Exception:
                logger.warning("Failed to load patient file %s, skipping", path)
                continue
            if patient.id != path.stem:
                logger.warning(
                    "Patient file %s holds patient %s, skipping", path, patient.id
                )
                continue
            self._put(patient.id, patient)
            count += 1
        if count:
            logger.info("Loaded %d patient(s) from %s", count, self._region_dir)

    def _save(self, key: str, data: str) -> None:
        """Atomically persist *data* under *key* (write .tmp then rename)."""
        if self._region_dir is None:
            return
        target = self._region_dir / f"{key}.json"
        tmp = target.with_suffix(".tmp")
        tmp.write_text(data, encoding="utf-8")
        os.replace(tmp, target)

    def _delete_file(self, key: str) -> None:
        if self._region_dir is None:
            return
        (self._region_dir / f"{key}.json").unlink(missing_ok=True)

    def _check_bounds(self, key: str, data: str) -> None:
        if self.max_key_size is not None and len(key.encode("utf-8")) > self.max_key_size:
            raise StoreBoundsError(
                f"Key of {len(key.encode('utf-8'))} bytes exceeds bound of {self.max_key_size}"
            )
        if self.max_value_size is not None and len(data.encode("utf-8")) > self.max_value_size:
            raise StoreBoundsError(
                f"Value of {len(data.encode('utf-8'))} bytes exceeds bound of {self.max_value_size}"
            )

    def _put(self, key: str, value: Patient) -> Patient | None:
        previous = self._values.get(key)
        if previous is None:
            bisect.insort(self._keys, key)
        self._values[key] = value
        return previous

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def insert(self, key: str, value: Patient) -> Patient | None:
        """Insert or overwrite *value* at *key*. Returns the previous value, if any."""
        data = value.model_dump_json(by_alias=True)
        self._check_bounds(key, data)
        self._save(key, data)
        return self._put(key, value)

    def get(self, key: str) -> Patient | None:
        return self._values.get(key)

    def remove(self, key: str) -> Patient | None:
        """Delete *key*. Returns the removed value, or None if it was absent."""
        previous = self._values.pop(key, None)
        if previous is not None:
            self._keys.pop(bisect.bisect_left(self._keys, key))
            self._delete_file(key)
        return previous

    def contains_key(self, key: str) -> bool:
        return key in self._values

    def keys(self) -> list[str]:
        return list(self._keys)

    def values(self) -> list[Patient]:
        """All stored patients in key order."""
        return [self._values[key] for key in self._keys]

    def is_empty(self) -> bool:
        return not self._values

    def __len__(self) -> int:
        return len(self._values)


# Global instance (singleton pattern for FastAPI dependency injection)
_store: PatientStore | None = None


def init_store(
    data_dir: Path | None = None,
    memory_id: int = 0,
    max_key_size: int | None = None,
    max_value_size: int | None = None,
) -> PatientStore:
    """Create and set the global store. Call once during startup."""
    global _store
    _store = PatientStore(
        data_dir=data_dir,
        memory_id=memory_id,
        max_key_size=max_key_size,
        max_value_size=max_value_size,
    )
    return _store


def get_store() -> PatientStore:
    """Get the global store instance, creating an in-memory one if needed."""
    global _store
    if _store is None:
        _store = PatientStore()
    return _store
