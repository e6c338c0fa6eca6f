"""Error code registry with E-XXXX format codes.

This module defines the error code system for FreightDesk, organizing
errors into categories:
- E-1xxx: Not-found errors (referenced record absent)
- E-2xxx: Validation errors (bad input, rejected before store access)
- E-3xxx: Mail provider errors
- E-4xxx: System/persistence errors

Each error includes a code, title, message template, and remediation steps.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    NOT_FOUND = "not_found"  # E-1xxx
    VALIDATION = "validation"  # E-2xxx
    MAIL = "mail"  # E-3xxx
    SYSTEM = "system"  # E-4xxx


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for display.
        message_template: Message with {placeholders} for context.
        remediation: Action the caller should take to resolve.
        is_retryable: Whether the operation can be retried without changes.
    """

    code: str
    category: ErrorCategory
    title: str
    message_template: str
    remediation: str
    is_retryable: bool = False


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Not-found errors (E-1xxx)
    "E-1001": ErrorCode(
        code="E-1001",
        category=ErrorCategory.NOT_FOUND,
        title="Shipment Not Found",
        message_template="Shipment {identifier} not found",
        remediation="Check the shipment ID (CART-YYYY-NNNNN) or list shipments to find it.",
    ),
    "E-1002": ErrorCode(
        code="E-1002",
        category=ErrorCategory.NOT_FOUND,
        title="Quote Not Found",
        message_template="Quote {identifier} not found",
        remediation="List the shipment's quotes and pick an ID that belongs to it.",
    ),
    "E-1003": ErrorCode(
        code="E-1003",
        category=ErrorCategory.NOT_FOUND,
        title="Email Not Found",
        message_template="Email {identifier} not found",
        remediation="Fetch unprocessed emails again; the email ID may be stale.",
    ),
    "E-1099": ErrorCode(
        code="E-1099",
        category=ErrorCategory.NOT_FOUND,
        title="Record Not Found",
        message_template="{identifier} not found",
        remediation="Verify the identifier and retry.",
    ),
    # Validation errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.VALIDATION,
        title="Invalid Input",
        message_template="{message}",
        remediation="Correct the named field and retry.",
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        category=ErrorCategory.VALIDATION,
        title="Malformed Arguments",
        message_template="{message}",
        remediation="Pass only the documented arguments for this operation.",
    ),
    "E-2003": ErrorCode(
        code="E-2003",
        category=ErrorCategory.VALIDATION,
        title="Unknown Operation",
        message_template="Unknown tool: {name}",
        remediation="List the available tools and use one of their names.",
    ),
    "E-2004": ErrorCode(
        code="E-2004",
        category=ErrorCategory.VALIDATION,
        title="Sender Not Allowed",
        message_template="{message}",
        remediation="Send from one of the approved addresses at the company domain.",
    ),
    # Mail provider errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.MAIL,
        title="Mail Provider Not Configured",
        message_template="Resend API is not configured. Please set RESEND_API_KEY environment variable.",
        remediation="Set RESEND_API_KEY (or mail.api_key in freightdesk.yaml) and restart.",
    ),
    "E-3002": ErrorCode(
        code="E-3002",
        category=ErrorCategory.MAIL,
        title="Mail Provider Error",
        message_template="{message}",
        remediation="Wait a few minutes and retry. Check the provider status page if it persists.",
        is_retryable=True,
    ),
    "E-3003": ErrorCode(
        code="E-3003",
        category=ErrorCategory.MAIL,
        title="Email Sent But Not Recorded",
        message_template="{message}",
        remediation="Do not resend. Record the email manually with add_email using the provider message ID.",
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Database Error",
        message_template="{operation}: {cause}",
        remediation="This is a system error. Retry the operation. Contact support if issue persists.",
        is_retryable=True,
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all errors in a category.

    Args:
        category: The error category to filter by.

    Returns:
        List of ErrorCode objects in the specified category.
    """
    return [e for e in ERROR_REGISTRY.values() if e.category == category]
