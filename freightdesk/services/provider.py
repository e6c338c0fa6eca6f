"""Service container: single owner of the per-process service graph.

The server lifespan and the CLI build one FreightServices from an engine
and hand it to every operation. Nothing here is a module-level singleton;
tests build their own container against an in-memory engine.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import Engine

from freightdesk.clients.base import MailClient
from freightdesk.clients.resend import ResendClient
from freightdesk.config import MailConfig
from freightdesk.db.connection import create_session_factory
from freightdesk.db.gateway import PersistenceGateway
from freightdesk.services.chat_service import ChatService
from freightdesk.services.email_service import EmailService
from freightdesk.services.id_allocator import IdAllocator
from freightdesk.services.outbound_email_service import OutboundEmailService
from freightdesk.services.quote_service import QuoteService
from freightdesk.services.shipment_service import ShipmentService

logger = logging.getLogger(__name__)


@dataclass
class FreightServices:
    """Everything an operation handler can reach."""

    gateway: PersistenceGateway
    shipments: ShipmentService
    quotes: QuoteService
    emails: EmailService
    chat: ChatService
    outbound: OutboundEmailService


def build_services(
    engine: Engine,
    mail_config: MailConfig | None = None,
    mail_client: MailClient | None = None,
    allocator: IdAllocator | None = None,
) -> FreightServices:
    """Wire the services around one engine.

    Args:
        engine: Engine from create_db_engine().
        mail_config: Sender rules and provider settings. Defaults apply
            when omitted.
        mail_client: Outbound collaborator. Defaults to a ResendClient
            built from mail_config.
        allocator: ID allocator override (tests pin the clock and RNG).

    Returns:
        A ready FreightServices.
    """
    mail_config = mail_config or MailConfig()
    gateway = PersistenceGateway(create_session_factory(engine))
    allocator = allocator or IdAllocator(gateway)
    if mail_client is None:
        mail_client = ResendClient.from_config(mail_config)
    if not mail_client.is_configured:
        logger.warning("Mail provider not configured; send_email will report failure")

    emails = EmailService(gateway)
    return FreightServices(
        gateway=gateway,
        shipments=ShipmentService(gateway, allocator),
        quotes=QuoteService(gateway, allocator),
        emails=emails,
        chat=ChatService(gateway),
        outbound=OutboundEmailService(gateway, emails, mail_client, mail_config),
    )
