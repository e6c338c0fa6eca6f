"""Database module for FreightDesk persistence."""

from freightdesk.db.connection import (
    close_db,
    create_db_engine,
    create_session_factory,
    init_db,
)
from freightdesk.db.gateway import PersistenceGateway
from freightdesk.db.models import (
    Base,
    ChatMessage,
    ChatRole,
    Email,
    EmailBadge,
    EmailDirection,
    EmailType,
    Quote,
    ServiceType,
    Shipment,
    ShipmentPriority,
    ShipmentStatus,
)

__all__ = [
    # Models
    "Base",
    "Shipment",
    "Quote",
    "Email",
    "ChatMessage",
    # Enums
    "ShipmentStatus",
    "ShipmentPriority",
    "ServiceType",
    "EmailType",
    "EmailDirection",
    "EmailBadge",
    "ChatRole",
    # Connection
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "close_db",
    "PersistenceGateway",
]
