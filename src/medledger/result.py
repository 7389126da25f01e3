"""Tagged success/error result returned by every service operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")
R = TypeVar("R")


class ErrorKind(str, Enum):
    """Category of a failed operation."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a human-readable message."""

    message: str
    kind: ErrorKind = ErrorKind.INTERNAL

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise ValueError(f"called unwrap() on Err: {self.message}")


Result = Union[Ok[T], Err]


def match_result(
    result: Result[T],
    ok: Callable[[T], R],
    err: Callable[[Err], R],
) -> R:
    """Dispatch on the two result cases.

    Raises:
        TypeError: If *result* is neither ``Ok`` nor ``Err``.
    """
    if isinstance(result, Ok):
        return ok(result.value)
    if isinstance(result, Err):
        return err(result)
    raise TypeError(f"expected Ok or Err, got {type(result).__name__}")
