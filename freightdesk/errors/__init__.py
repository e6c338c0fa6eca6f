"""Error handling framework for FreightDesk.

This package provides:
- Typed domain errors (validation, not found, persistence)
- Error code registry with E-XXXX format codes
- Error formatting for tool responses

Error categories:
- E-1xxx: Not-found errors
- E-2xxx: Validation errors
- E-3xxx: Mail provider errors
- E-4xxx: System/persistence errors
"""

from freightdesk.errors.domain import (
    DomainError,
    ErrorKind,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from freightdesk.errors.formatter import (
    format_error,
    format_error_text,
    to_tool_error,
)
from freightdesk.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    ErrorCode,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Domain errors
    "DomainError",
    "ErrorKind",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "get_error",
    "get_errors_by_category",
    # Formatter
    "format_error",
    "format_error_text",
    "to_tool_error",
]
