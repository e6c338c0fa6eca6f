"""Assistant chat history for shipment cases."""

import logging

from sqlalchemy import select

from freightdesk.db.gateway import PersistenceGateway
from freightdesk.db.models import ChatMessage, Shipment, utc_now_iso
from freightdesk.errors import NotFoundError
from freightdesk.schemas import (
    AddChatMessageRequest,
    AddChatMessageResult,
    ChatHistory,
    ChatMessageRecord,
    GetChatHistoryRequest,
)
from freightdesk.services.checks import clean_object, require, require_shipment_id
from freightdesk.utils.validators import (
    is_non_empty_string,
    is_valid_chat_role,
    sanitize_string,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


class ChatService:
    """Append-only chat log per shipment."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    def add_chat_message(self, request: AddChatMessageRequest) -> AddChatMessageResult:
        require_shipment_id(request.shipment_id)
        require(
            is_valid_chat_role(request.role),
            "Invalid chat role (must be user, assistant, or system)",
            "role",
        )
        require(is_non_empty_string(request.message), "Message is required", "message")

        now = utc_now_iso()
        message = ChatMessage(
            shipment_id=request.shipment_id,
            role=request.role,
            message=sanitize_string(request.message),
            message_metadata=clean_object(request.metadata),
            created_at=now,
        )

        with self.gateway.transaction("Failed to add chat message") as session:
            if session.get(Shipment, request.shipment_id) is None:
                raise NotFoundError("Shipment", request.shipment_id)
            session.add(message)
            session.flush()
            message_id = message.id

        logger.debug("Added %s chat message %d to %s", request.role, message_id, request.shipment_id)
        return AddChatMessageResult(message_id=message_id, created_at=now)

    def get_chat_history(self, request: GetChatHistoryRequest) -> ChatHistory:
        """Chat messages for a shipment, oldest first."""
        require_shipment_id(request.shipment_id)
        limit = request.limit if request.limit and request.limit > 0 else DEFAULT_HISTORY_LIMIT
        messages = self.gateway.execute(
            select(ChatMessage)
            .where(ChatMessage.shipment_id == request.shipment_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            .limit(limit),
            "Failed to fetch chat history",
        )
        return ChatHistory(messages=[ChatMessageRecord.model_validate(m) for m in messages])
