"""Email record operations for shipment cases."""

import logging

from sqlalchemy import select

from freightdesk.db.gateway import PersistenceGateway
from freightdesk.db.models import Email, Shipment, utc_now_iso
from freightdesk.errors import NotFoundError
from freightdesk.schemas import (
    AddEmailRequest,
    AddEmailResult,
    EmailList,
    EmailRecord,
    GetEmailsRequest,
    GetUnprocessedEmailsRequest,
    MarkEmailProcessedRequest,
    MarkEmailProcessedResult,
)
from freightdesk.services.checks import clean_object, require, require_shipment_id
from freightdesk.utils.validators import (
    is_non_empty_string,
    is_positive_integer,
    is_valid_email,
    is_valid_email_badge,
    is_valid_email_direction,
    is_valid_email_type,
)

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
DEFAULT_UNPROCESSED_LIMIT = 50


def make_preview(body: str) -> str:
    """First 100 characters of the body."""
    return body[:PREVIEW_LENGTH]


class EmailService:
    """Stores and queries emails attached to shipments."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    def add_email(self, request: AddEmailRequest) -> AddEmailResult:
        """Record an email on a shipment.

        Raises:
            ValidationError: Bad shipment ID, type, address, subject or body.
            NotFoundError: The shipment does not exist.
        """
        require_shipment_id(request.shipment_id)
        require(is_valid_email_type(request.type), "Invalid email type", "type")
        require(is_valid_email(request.from_email), "Invalid from_email address", "from_email")
        require(is_valid_email(request.to_email), "Invalid to_email address", "to_email")
        require(is_non_empty_string(request.subject), "Subject is required", "subject")
        require(is_non_empty_string(request.body), "Email body is required", "body")
        if request.direction is not None:
            require(
                is_valid_email_direction(request.direction),
                "Invalid email direction (must be inbound or outbound)",
                "direction",
            )
        if request.badge is not None:
            require(is_valid_email_badge(request.badge), "Invalid email badge", "badge")

        now = utc_now_iso()
        email = Email(
            shipment_id=request.shipment_id,
            thread_id=request.thread_id or None,
            type=request.type,
            from_email=request.from_email,
            from_name=request.from_name or None,
            to_email=request.to_email,
            to_name=request.to_name or None,
            subject=request.subject,
            body=request.body,
            preview=make_preview(request.body),
            direction=request.direction,
            badge=request.badge,
            parsed_data=clean_object(request.parsed_data),
            processed=False,
            created_at=now,
        )

        with self.gateway.transaction("Failed to add email") as session:
            if session.get(Shipment, request.shipment_id) is None:
                raise NotFoundError("Shipment", request.shipment_id)
            session.add(email)
            session.flush()
            email_id = email.id

        logger.info("Added %s email %d to shipment %s", request.type, email_id, request.shipment_id)
        return AddEmailResult(email_id=email_id, created_at=now)

    def get_emails(self, request: GetEmailsRequest) -> EmailList:
        """List a shipment's emails, newest first, optionally of one type."""
        require_shipment_id(request.shipment_id)
        if request.type:
            require(is_valid_email_type(request.type), "Invalid email type", "type")

        stmt = select(Email).where(Email.shipment_id == request.shipment_id)
        if request.type:
            stmt = stmt.where(Email.type == request.type)
        emails = self.gateway.execute(
            stmt.order_by(Email.created_at.desc(), Email.id.desc()),
            "Failed to fetch emails",
        )
        return EmailList(emails=[EmailRecord.model_validate(e) for e in emails])

    def get_unprocessed_emails(self, request: GetUnprocessedEmailsRequest) -> EmailList:
        """Oldest unprocessed emails across all shipments."""
        limit = request.limit if request.limit and request.limit > 0 else DEFAULT_UNPROCESSED_LIMIT
        emails = self.gateway.execute(
            select(Email)
            .where(Email.processed.is_(False))
            .order_by(Email.created_at.asc(), Email.id.asc())
            .limit(limit),
            "Failed to fetch unprocessed emails",
        )
        return EmailList(emails=[EmailRecord.model_validate(e) for e in emails])

    def mark_email_processed(self, request: MarkEmailProcessedRequest) -> MarkEmailProcessedResult:
        """Flag an email as processed. Calling it again is harmless."""
        require(
            is_positive_integer(request.email_id),
            "Invalid email_id (must be a positive integer)",
            "email_id",
        )
        with self.gateway.transaction("Failed to mark email as processed") as session:
            email = session.get(Email, request.email_id, with_for_update=True)
            if email is None:
                raise NotFoundError("Email", request.email_id)
            email.processed = True

        logger.info("Marked email %d processed", request.email_id)
        return MarkEmailProcessedResult(success=True)
