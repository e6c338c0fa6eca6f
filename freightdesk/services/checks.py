"""Argument checks shared by the lifecycle services.

Thin wrappers that turn validator predicates into ValidationError, plus
the normalizers applied to optional values before they are stored.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from freightdesk.db.models import Shipment
from freightdesk.errors import NotFoundError, ValidationError
from freightdesk.utils.validators import (
    is_non_empty_object,
    is_valid_shipment_id,
    parse_iso_date,
    sanitize_string,
)


def require(condition: bool, message: str, field: str | None = None) -> None:
    """Raise ValidationError(message) unless condition holds."""
    if not condition:
        raise ValidationError(message, field=field)


def require_shipment_id(shipment_id: Any) -> None:
    require(is_valid_shipment_id(shipment_id), "Invalid shipment ID format", "shipment_id")


def normalize_date(value: str | None, message: str, field: str) -> str | None:
    """Validate an optional ISO 8601 date and return its canonical form.

    Empty values mean "not provided" and return None.
    """
    if not value:
        return None
    parsed = parse_iso_date(value)
    require(parsed is not None, message, field)
    return parsed.isoformat()


def clean_text(value: str | None) -> str | None:
    """Sanitize optional free text; blank becomes None."""
    if value is None:
        return None
    cleaned = sanitize_string(value)
    return cleaned or None


def clean_object(value: dict[str, Any] | None) -> dict[str, Any] | None:
    """Store empty JSON objects as NULL."""
    return value if is_non_empty_object(value) else None


def lock_shipment(session: Session, shipment_id: str) -> Shipment:
    """Load a shipment inside a transaction, locking its row.

    FOR UPDATE is a no-op on SQLite, where the immediate transaction
    already holds the write lock.

    Raises:
        NotFoundError: If no shipment has this ID.
    """
    shipment = session.scalars(
        select(Shipment).where(Shipment.id == shipment_id).with_for_update()
    ).one_or_none()
    if shipment is None:
        raise NotFoundError("Shipment", shipment_id)
    return shipment
