"""Input validation predicates.

Pure functions over primitive values. None of them raise; callers turn a
False result into a ValidationError naming the offending field. The one
exception to "predicate" is sanitize_string, which truncates instead of
rejecting.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any

from dateutil import parser as date_parser

from freightdesk.db.models import (
    ChatRole,
    EmailBadge,
    EmailDirection,
    EmailType,
    ServiceType,
    ShipmentPriority,
    ShipmentStatus,
)

# Deliberately simple: one "@", at least one "." after it, no whitespace.
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# CART-<4-digit year>-<5-digit zero-padded sequence>
SHIPMENT_ID_PATTERN = re.compile(r"^CART-\d{4}-\d{5}$")

# quote-<lowercase alphanumeric carrier slug>-<3 digits>
QUOTE_ID_PATTERN = re.compile(r"^quote-[a-z0-9]+-\d{3}$")

MAX_STRING_LENGTH = 10000


def _is_member(value: Any, enum_cls: type[Enum]) -> bool:
    return isinstance(value, str) and value in {m.value for m in enum_cls}


def is_valid_email(email: Any) -> bool:
    """Validate email address shape (not full RFC 5322)."""
    return isinstance(email, str) and bool(EMAIL_PATTERN.match(email))


def is_valid_shipment_status(status: Any) -> bool:
    return _is_member(status, ShipmentStatus)


def is_valid_email_type(email_type: Any) -> bool:
    return _is_member(email_type, EmailType)


def is_valid_chat_role(role: Any) -> bool:
    return _is_member(role, ChatRole)


def is_valid_service_type(service_type: Any) -> bool:
    return _is_member(service_type, ServiceType)


def is_valid_email_direction(direction: Any) -> bool:
    return _is_member(direction, EmailDirection)


def is_valid_email_badge(badge: Any) -> bool:
    return _is_member(badge, EmailBadge)


def is_valid_shipment_priority(priority: Any) -> bool:
    return _is_member(priority, ShipmentPriority)


def is_valid_shipment_id(shipment_id: Any) -> bool:
    """Validate shipment ID format: CART-YYYY-NNNNN."""
    return isinstance(shipment_id, str) and bool(SHIPMENT_ID_PATTERN.match(shipment_id))


def is_valid_quote_id(quote_id: Any) -> bool:
    """Validate quote ID format: quote-{carrier}-{3 digits}."""
    return isinstance(quote_id, str) and bool(QUOTE_ID_PATTERN.match(quote_id))


def parse_iso_date(value: str) -> datetime | None:
    """Parse an ISO 8601 date or datetime string.

    Returns:
        The parsed datetime, or None when the string is not ISO 8601.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date_parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None


def is_valid_date_string(value: Any) -> bool:
    """Validate date string (ISO 8601 format)."""
    return parse_iso_date(value) is not None


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid amount
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_positive_number(value: Any) -> bool:
    return _is_number(value) and value > 0


def is_non_negative_number(value: Any) -> bool:
    return _is_number(value) and value >= 0


def is_positive_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def is_valid_otif_score(score: Any) -> bool:
    """Validate OTIF (on-time-in-full) score, 0-100 inclusive."""
    return _is_number(score) and 0 <= score <= 100


def is_non_empty_object(obj: Any) -> bool:
    return isinstance(obj, dict) and len(obj) > 0


def sanitize_string(value: str) -> str:
    """Trim whitespace and cap length at MAX_STRING_LENGTH characters."""
    return value.strip()[:MAX_STRING_LENGTH]
