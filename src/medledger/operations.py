"""Registry of exported patient operations.

Each service method is declared with its exported name and its call kind:
``query`` for read-only calls, ``update`` for state-mutating calls. The
registry describes the exported interface and dispatches named calls.

Example:
    @OPERATIONS.update("addPatient", "Add a new patient")
    def add_patient(self, payload: PatientPayload) -> Result[Patient]:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class CallKind(str, Enum):
    """How the host treats a call: read-only or state-mutating."""

    QUERY = "query"
    UPDATE = "update"


@dataclass(frozen=True)
class OperationDefinition:
    """Definition of a single exported operation."""

    name: str
    kind: CallKind
    description: str
    attribute: str  # method name on the service class


class OperationRegistry:
    """Central registry for exported operations."""

    def __init__(self):
        self._operations: dict[str, OperationDefinition] = {}

    def register(self, name: str, kind: CallKind, description: str) -> Callable[[F], F]:
        """Decorator to declare a service method as an exported operation."""
        def decorator(func: F) -> F:
            self._operations[name] = OperationDefinition(
                name=name,
                kind=kind,
                description=description,
                attribute=func.__name__,
            )
            return func
        return decorator

    def query(self, name: str, description: str) -> Callable[[F], F]:
        return self.register(name, CallKind.QUERY, description)

    def update(self, name: str, description: str) -> Callable[[F], F]:
        return self.register(name, CallKind.UPDATE, description)

    def get(self, name: str) -> OperationDefinition | None:
        """Get operation definition by name."""
        return self._operations.get(name)

    @property
    def names(self) -> list[str]:
        """List of exported operation names, in declaration order."""
        return list(self._operations.keys())

    def list_operations(self) -> list[OperationDefinition]:
        return list(self._operations.values())

    def call(self, target: Any, name: str, *args: Any) -> Any:
        """Invoke the operation *name* on *target*.

        Raises:
            KeyError: If no operation with that name is registered.
        """
        operation = self._operations.get(name)
        if operation is None:
            raise KeyError(f"Unknown operation: {name}")
        logger.debug("Dispatching %s call %s", operation.kind.value, name)
        return getattr(target, operation.attribute)(*args)


# Global registry instance
OPERATIONS = OperationRegistry()
