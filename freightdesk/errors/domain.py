"""Typed domain exceptions for tool error mapping.

Every lifecycle operation fails with one of three kinds of error, so the
transport can branch on the kind instead of parsing message strings:

- ValidationError: malformed or out-of-range input, raised before any
  store access.
- NotFoundError: a referenced shipment, quote or email is absent.
- PersistenceError: the store failed; wraps the driver message with a
  prefix naming the failing operation.

Usage:
    # In service layer
    raise NotFoundError("Shipment", shipment_id)

    # At the transport boundary
    try:
        result = await dispatch(name, arguments, services)
    except DomainError as e:
        raise ToolError(json.dumps(format_error(e)))
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed taxonomy of operation failures."""

    validation = "validation"
    not_found = "not_found"
    persistence = "persistence"


class DomainError(Exception):
    """Base exception for all domain errors."""

    kind: ErrorKind
    code: str = "E-4001"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Input rejected before touching the store."""

    kind = ErrorKind.validation

    def __init__(
        self,
        message: str,
        field: str | None = None,
        code: str = "E-2001",
    ) -> None:
        super().__init__(message)
        self.field = field
        self.code = code


_NOT_FOUND_CODES = {
    "Shipment": "E-1001",
    "Quote": "E-1002",
    "Email": "E-1003",
}


class NotFoundError(DomainError):
    """Referenced record does not exist."""

    kind = ErrorKind.not_found

    def __init__(
        self,
        resource_type: str,
        identifier: str | int,
        context: str | None = None,
    ) -> None:
        message = f"{resource_type} {identifier} not found"
        if context:
            message = f"{message} for {context}"
        super().__init__(message)
        self.resource_type = resource_type
        self.identifier = identifier
        self.context = context
        self.code = _NOT_FOUND_CODES.get(resource_type, "E-1099")


class PersistenceError(DomainError):
    """Underlying store failure, prefixed with the failing operation."""

    kind = ErrorKind.persistence
    code = "E-4001"

    def __init__(self, operation: str, cause: str) -> None:
        super().__init__(f"{operation}: {cause}")
        self.operation = operation
        self.cause = cause
