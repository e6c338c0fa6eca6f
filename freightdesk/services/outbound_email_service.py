"""Outbound email: send through the mail provider, then record it.

Flow:
    1. Sender checks (company domain, approved address) and input checks.
    2. The shipment must exist.
    3. The mail client must be configured.
    4. Send. Provider failures come back as success=False.
    5. Record the email with add_email. If that fails the message has
       already gone out, so the result carries the provider message ID
       with success=False.

Steps 1 and 2 raise; nothing reaches the provider before they pass.
"""

import asyncio
import logging

from sqlalchemy import select

from freightdesk.clients.base import MailClient, MailDeliveryError
from freightdesk.config import MailConfig
from freightdesk.db.gateway import PersistenceGateway
from freightdesk.db.models import EmailDirection, Shipment
from freightdesk.errors import NotFoundError, ValidationError, get_error
from freightdesk.schemas import AddEmailRequest, SendEmailRequest, SendEmailResult
from freightdesk.services.checks import require, require_shipment_id
from freightdesk.services.email_service import EmailService
from freightdesk.utils.validators import (
    is_non_empty_string,
    is_valid_email,
    is_valid_email_type,
)

logger = logging.getLogger(__name__)


class OutboundEmailService:
    """Sends case email on behalf of the company domain."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        emails: EmailService,
        mail_client: MailClient,
        mail_config: MailConfig,
    ) -> None:
        self.gateway = gateway
        self.emails = emails
        self.mail_client = mail_client
        self.mail_config = mail_config

    def check_sender(self, from_address: str) -> None:
        """Reject senders outside the company domain or the approved list.

        Raises:
            ValidationError: With code E-2004.
        """
        suffix = f"@{self.mail_config.sender_domain}"
        if not from_address.endswith(suffix):
            raise _sender_error(
                f"Invalid sender domain. Sender must be {suffix} (received: {from_address})"
            )
        allowed = self.mail_config.allowed_senders
        if allowed and from_address not in allowed:
            raise _sender_error(f"Sender {from_address} is not an approved address")

    def _shipment_exists(self, shipment_id: str) -> bool:
        rows = self.gateway.execute(
            select(Shipment.id).where(Shipment.id == shipment_id),
            "Failed to verify shipment",
        )
        return bool(rows)

    async def send_email(self, request: SendEmailRequest) -> SendEmailResult:
        """Send an email and record it on the shipment.

        Raises:
            ValidationError: Sender not allowed, or malformed input.
            NotFoundError: The shipment does not exist.
            PersistenceError: The shipment lookup failed.
        """
        self.check_sender(request.from_address)
        require(is_valid_email(request.from_address), "Invalid from_email address", "from")
        require(is_valid_email(request.to_address), "Invalid to_email address", "to")
        require_shipment_id(request.shipment_id)
        require(is_valid_email_type(request.type), "Invalid email type", "type")
        require(is_non_empty_string(request.subject), "Subject is required", "subject")
        require(is_non_empty_string(request.body), "Email body is required", "body")

        if not await asyncio.to_thread(self._shipment_exists, request.shipment_id):
            raise NotFoundError("Shipment", request.shipment_id)

        if not self.mail_client.is_configured:
            error_def = get_error("E-3001")
            return SendEmailResult(
                success=False,
                error=error_def.message_template,
                error_code=error_def.code,
            )

        try:
            message_id = await self.mail_client.send(
                request.from_address,
                request.to_address,
                request.subject,
                request.body,
            )
        except MailDeliveryError as e:
            logger.warning("Send to %s failed: %s", request.to_address, e)
            return SendEmailResult(success=False, error=str(e), error_code="E-3002")

        try:
            recorded = await asyncio.to_thread(
                self.emails.add_email,
                AddEmailRequest(
                    shipment_id=request.shipment_id,
                    type=request.type,
                    from_email=request.from_address,
                    to_email=request.to_address,
                    subject=request.subject,
                    body=request.body,
                    direction=EmailDirection.outbound.value,
                ),
            )
        except Exception as e:
            logger.error(
                "Email %s sent but not recorded on %s: %s",
                message_id,
                request.shipment_id,
                e,
            )
            return SendEmailResult(
                success=False,
                provider_message_id=message_id,
                error=(
                    f"Email sent via Resend (ID: {message_id}) but failed to save "
                    f"to database: {getattr(e, 'message', e)}"
                ),
                error_code="E-3003",
            )

        return SendEmailResult(
            success=True,
            email_id=recorded.email_id,
            provider_message_id=message_id,
        )


def _sender_error(message: str) -> ValidationError:
    return ValidationError(message, field="from", code="E-2004")
