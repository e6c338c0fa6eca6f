"""Shipment lifecycle operations.

Creates, reads, updates and lists shipment cases, and resolves a
customer's open case when an inbound email carries no shipment ID.

Example:
    svc = ShipmentService(gateway, IdAllocator(gateway))
    created = svc.create_shipment(CreateShipmentRequest(...))
    detail = svc.get_shipment(GetShipmentRequest(shipment_id=created.shipment_id))
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from freightdesk.db.gateway import PersistenceGateway
from freightdesk.db.models import (
    OPEN_SHIPMENT_STATUSES,
    ChatMessage,
    Email,
    Quote,
    Shipment,
    ShipmentStatus,
    utc_now_iso,
)
from freightdesk.errors import NotFoundError, PersistenceError
from freightdesk.schemas import (
    ChatMessageRecord,
    CreateShipmentRequest,
    CreateShipmentResult,
    EmailRecord,
    FindOpenShipmentRequest,
    GetShipmentRequest,
    ListShipmentsRequest,
    OpenShipmentResult,
    QuoteRecord,
    ShipmentDetail,
    ShipmentPage,
    ShipmentRecord,
    UpdateShipmentRequest,
    UpdateShipmentResult,
)
from freightdesk.services.checks import (
    clean_object,
    clean_text,
    lock_shipment,
    normalize_date,
    require,
    require_shipment_id,
)
from freightdesk.services.id_allocator import IdAllocator
from freightdesk.utils.validators import (
    is_non_empty_string,
    is_non_negative_number,
    is_positive_number,
    is_valid_email,
    is_valid_shipment_priority,
    is_valid_shipment_status,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50

# A duplicate shipment ID is retried once with a fresh allocation
MAX_CREATE_ATTEMPTS = 2

_FREE_TEXT_FIELDS = (
    "loading_requirements",
    "unloading_requirements",
    "special_notes",
)

# Applied only when a non-empty value is supplied
_SKIP_IF_EMPTY_FIELDS = (
    "status",
    "selected_carrier",
    "pickup_address",
    "pickup_date",
    "delivery_address",
    "delivery_date",
)


def _check_cargo_measures(weight_kg: float | None, volume_cbm: float | None) -> None:
    if weight_kg is not None:
        require(is_non_negative_number(weight_kg), "Weight must be a non-negative number", "weight_kg")
    if volume_cbm is not None:
        require(is_non_negative_number(volume_cbm), "Volume must be a non-negative number", "volume_cbm")


def _check_priority(priority: str | None) -> None:
    if priority is not None:
        require(
            is_valid_shipment_priority(priority),
            "Invalid shipment priority (must be urgent, standard, or economy)",
            "priority",
        )


class ShipmentService:
    """Shipment CRUD on top of the persistence gateway."""

    def __init__(self, gateway: PersistenceGateway, allocator: IdAllocator) -> None:
        self.gateway = gateway
        self.allocator = allocator

    def create_shipment(self, request: CreateShipmentRequest) -> CreateShipmentResult:
        """Create a shipment in status 'pending'.

        Raises:
            ValidationError: Bad email, blank name/address, bad date, etc.
            PersistenceError: Insert failed, or a fresh ID collided twice.
        """
        require(is_valid_email(request.customer_email), "Invalid customer email address", "customer_email")
        require(is_non_empty_string(request.customer_name), "Customer name is required", "customer_name")
        require(is_non_empty_string(request.pickup_address), "Pickup address is required", "pickup_address")
        require(is_non_empty_string(request.delivery_address), "Delivery address is required", "delivery_address")
        pickup_date = normalize_date(
            request.pickup_date, "Invalid pickup date format (use ISO 8601)", "pickup_date"
        )
        delivery_date = normalize_date(
            request.delivery_date, "Invalid delivery date format (use ISO 8601)", "delivery_date"
        )
        _check_cargo_measures(request.weight_kg, request.volume_cbm)
        _check_priority(request.priority)

        now = utc_now_iso()
        fields = dict(
            customer_email=request.customer_email,
            customer_name=request.customer_name.strip(),
            status=ShipmentStatus.pending.value,
            pickup_address=request.pickup_address.strip(),
            pickup_date=pickup_date,
            delivery_address=request.delivery_address.strip(),
            delivery_date=delivery_date,
            cargo_type=request.cargo_type or None,
            load_type=request.load_type or None,
            weight_kg=request.weight_kg,
            volume_cbm=request.volume_cbm,
            loading_requirements=clean_text(request.loading_requirements),
            unloading_requirements=clean_text(request.unloading_requirements),
            special_notes=clean_text(request.special_notes),
            cargo_details=clean_object(request.cargo_details),
            priority=request.priority,
            assigned_agent=request.assigned_agent or None,
            created_at=now,
            updated_at=now,
        )

        for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
            try:
                with self.gateway.transaction("Failed to create shipment") as session:
                    shipment_id = self.allocator.allocate_shipment_id(session)
                    session.add(Shipment(id=shipment_id, **fields))
                break
            except PersistenceError as e:
                if attempt == MAX_CREATE_ATTEMPTS or not isinstance(e.__cause__, IntegrityError):
                    raise
                logger.warning("Shipment ID %s already taken, allocating again", shipment_id)

        logger.info("Created shipment %s for %s", shipment_id, request.customer_email)
        return CreateShipmentResult(shipment_id=shipment_id, created_at=now)

    def get_shipment(self, request: GetShipmentRequest) -> ShipmentDetail:
        """Read a shipment with its quotes, emails and chat history.

        Four independent reads: quotes cheapest first, emails newest first,
        chat messages oldest first.
        """
        require_shipment_id(request.shipment_id)
        shipment_id = request.shipment_id

        shipments = self.gateway.execute(
            select(Shipment).where(Shipment.id == shipment_id),
            "Failed to fetch shipment",
        )
        if not shipments:
            raise NotFoundError("Shipment", shipment_id)

        quotes = self.gateway.execute(
            select(Quote)
            .where(Quote.shipment_id == shipment_id)
            .order_by(Quote.total_cost.asc(), Quote.created_at.asc()),
            "Failed to fetch quotes",
        )
        emails = self.gateway.execute(
            select(Email)
            .where(Email.shipment_id == shipment_id)
            .order_by(Email.created_at.desc(), Email.id.desc()),
            "Failed to fetch emails",
        )
        chat_messages = self.gateway.execute(
            select(ChatMessage)
            .where(ChatMessage.shipment_id == shipment_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc()),
            "Failed to fetch chat messages",
        )

        return ShipmentDetail(
            shipment=ShipmentRecord.model_validate(shipments[0]),
            quotes=[QuoteRecord.model_validate(q) for q in quotes],
            emails=[EmailRecord.model_validate(e) for e in emails],
            chat_messages=[ChatMessageRecord.model_validate(m) for m in chat_messages],
        )

    def update_shipment(self, request: UpdateShipmentRequest) -> UpdateShipmentResult:
        """Write only the fields the caller supplied and bump updated_at.

        Status, carrier, addresses and dates are ignored when empty. Any
        status may be set; transitions are not policed here.

        Raises:
            ValidationError: Bad ID, status, cost, date, priority or measure.
            NotFoundError: No shipment with this ID.
        """
        require_shipment_id(request.shipment_id)

        updates = request.model_dump(exclude_unset=True, exclude={"shipment_id"})
        for field in _SKIP_IF_EMPTY_FIELDS:
            if field in updates and not updates[field]:
                del updates[field]

        if "status" in updates:
            require(is_valid_shipment_status(updates["status"]), "Invalid shipment status", "status")
        if "total_cost" in updates:
            require(is_positive_number(updates["total_cost"]), "Total cost must be a positive number", "total_cost")
        if "pickup_date" in updates:
            updates["pickup_date"] = normalize_date(
                updates["pickup_date"], "Invalid pickup date format", "pickup_date"
            )
        if "delivery_date" in updates:
            updates["delivery_date"] = normalize_date(
                updates["delivery_date"], "Invalid delivery date format", "delivery_date"
            )
        _check_cargo_measures(updates.get("weight_kg"), updates.get("volume_cbm"))
        _check_priority(updates.get("priority"))
        for field in _FREE_TEXT_FIELDS:
            if field in updates:
                updates[field] = clean_text(updates[field])
        if "cargo_details" in updates:
            updates["cargo_details"] = clean_object(updates["cargo_details"])

        with self.gateway.transaction("Failed to update shipment") as session:
            shipment = lock_shipment(session, request.shipment_id)
            for field, value in updates.items():
                setattr(shipment, field, value)
            shipment.updated_at = utc_now_iso()
            session.flush()
            record = ShipmentRecord.model_validate(shipment)

        logger.info("Updated shipment %s: %s", request.shipment_id, sorted(updates))
        return UpdateShipmentResult(success=True, updated_shipment=record)

    def list_shipments(self, request: ListShipmentsRequest) -> ShipmentPage:
        """Page through shipments, newest first, with the filtered total."""
        limit = request.limit if request.limit and request.limit > 0 else DEFAULT_PAGE_SIZE
        offset = request.offset if request.offset and request.offset >= 0 else 0

        if request.status:
            require(is_valid_shipment_status(request.status), "Invalid shipment status", "status")
        if request.customer_email:
            require(is_valid_email(request.customer_email), "Invalid customer email format", "customer_email")

        conditions = []
        if request.status:
            conditions.append(Shipment.status == request.status)
        if request.customer_email:
            conditions.append(Shipment.customer_email == request.customer_email)

        shipments = self.gateway.execute(
            select(Shipment)
            .where(*conditions)
            .order_by(Shipment.created_at.desc(), Shipment.id.desc())
            .limit(limit)
            .offset(offset),
            "Failed to list shipments",
        )
        total = self.gateway.execute(
            select(func.count()).select_from(Shipment).where(*conditions),
            "Failed to count shipments",
        )

        return ShipmentPage(
            shipments=[ShipmentRecord.model_validate(s) for s in shipments],
            total=int(total[0]),
        )

    def find_open_shipment_by_customer(
        self, request: FindOpenShipmentRequest
    ) -> OpenShipmentResult:
        """Find the customer's most recent shipment still pending or quoted."""
        require(is_valid_email(request.customer_email), "Invalid customer email address", "customer_email")

        rows = self.gateway.execute(
            select(Shipment.id)
            .where(
                Shipment.customer_email == request.customer_email,
                Shipment.status.in_(OPEN_SHIPMENT_STATUSES),
            )
            .order_by(Shipment.created_at.desc(), Shipment.id.desc())
            .limit(1),
            "Failed to find open shipment",
        )
        return OpenShipmentResult(shipment_id=rows[0] if rows else None)
