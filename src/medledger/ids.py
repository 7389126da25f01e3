"""Patient identifier generation and validation."""

from __future__ import annotations

import logging
import random
import re
import secrets
import uuid
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_UUID_PATTERN = re.compile(r"[\da-f]{8}-([\da-f]{4}-){3}[\da-f]{12}", re.IGNORECASE)


@runtime_checkable
class RandomSource(Protocol):
    """Source of random bytes feeding the identifier generator."""

    def random_bytes(self, n: int) -> bytes:
        """Return *n* random bytes."""
        ...


class SecureRandomSource:
    """OS randomness with a pseudo-random fallback.

    If the OS facility is unavailable the source switches to a
    ``random.Random`` instance for the rest of its lifetime. Generation
    never raises.
    """

    def __init__(self):
        self._fallback: random.Random | None = None

    @property
    def using_fallback(self) -> bool:
        return self._fallback is not None

    def random_bytes(self, n: int) -> bytes:
        if self._fallback is None:
            try:
                return secrets.token_bytes(n)
            except (NotImplementedError, OSError) as e:
                logger.warning("OS randomness unavailable (%s), using pseudo-random fallback", e)
                self._fallback = random.Random()
        return bytes(self._fallback.getrandbits(8) for _ in range(n))


class SeededRandomSource:
    """Deterministic source for tests and reproducible runs."""

    def __init__(self, seed: int = 0):
        self._rng = random.Random(seed)

    def random_bytes(self, n: int) -> bytes:
        return bytes(self._rng.getrandbits(8) for _ in range(n))


class IdGenerator:
    """Produces version-4 UUID strings from a random source."""

    def __init__(self, source: RandomSource | None = None):
        self._source = source if source is not None else SecureRandomSource()

    def new_id(self) -> str:
        return str(uuid.UUID(bytes=self._source.random_bytes(16), version=4))


def is_valid_uuid(value: str) -> bool:
    """Check that *value* has the 8-4-4-4-12 hexadecimal UUID shape."""
    return bool(_UUID_PATTERN.fullmatch(value or ""))
