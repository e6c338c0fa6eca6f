"""Service layer for FreightDesk.

Lifecycle operations for shipments, quotes, emails and chat, the ID
allocator, and the container that wires them together.
"""

from freightdesk.services.chat_service import ChatService
from freightdesk.services.email_service import EmailService
from freightdesk.services.id_allocator import IdAllocator
from freightdesk.services.outbound_email_service import OutboundEmailService
from freightdesk.services.provider import FreightServices, build_services
from freightdesk.services.quote_service import QuoteService
from freightdesk.services.shipment_service import ShipmentService

__all__ = [
    "ShipmentService",
    "QuoteService",
    "EmailService",
    "ChatService",
    "OutboundEmailService",
    "IdAllocator",
    "FreightServices",
    "build_services",
]
