"""Carrier quote operations: attach, list and select quotes.

add_quote and select_quote each run as a single transaction with the
owning shipment row locked, so concurrent calls on one shipment serialize.
"""

import logging

from sqlalchemy import select, update

from freightdesk.db.gateway import PersistenceGateway
from freightdesk.db.models import Quote, ShipmentStatus, utc_now_iso
from freightdesk.errors import NotFoundError, PersistenceError
from freightdesk.schemas import (
    AddQuoteRequest,
    AddQuoteResult,
    GetQuotesRequest,
    QuoteList,
    QuoteRecord,
    SelectQuoteRequest,
    SelectQuoteResult,
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
    is_positive_integer,
    is_positive_number,
    is_valid_email,
    is_valid_otif_score,
    is_valid_quote_id,
    is_valid_service_type,
)

logger = logging.getLogger(__name__)

MAX_QUOTE_ID_ATTEMPTS = 10


class QuoteService:
    """Quote operations on top of the persistence gateway."""

    def __init__(self, gateway: PersistenceGateway, allocator: IdAllocator) -> None:
        self.gateway = gateway
        self.allocator = allocator

    def _validate_new_quote(self, request: AddQuoteRequest) -> None:
        require_shipment_id(request.shipment_id)
        require(is_non_empty_string(request.carrier_name), "Carrier name is required", "carrier_name")
        require(is_valid_email(request.carrier_email), "Invalid carrier email address", "carrier_email")
        require(is_positive_number(request.total_cost), "Total cost must be a positive number", "total_cost")
        require(is_positive_number(request.base_rate), "Base rate must be a positive number", "base_rate")
        require(
            is_positive_number(request.fuel_surcharge),
            "Fuel surcharge must be a positive number",
            "fuel_surcharge",
        )
        require(
            is_positive_integer(request.transit_days),
            "Transit days must be a positive integer",
            "transit_days",
        )
        require(
            is_valid_service_type(request.service_type),
            "Invalid service type (must be LTL, FTL, or Expedited)",
            "service_type",
        )
        if request.otif_score is not None:
            require(
                is_valid_otif_score(request.otif_score),
                "OTIF score must be between 0 and 100",
                "otif_score",
            )

    def add_quote(self, request: AddQuoteRequest) -> AddQuoteResult:
        """Attach a carrier quote to a shipment.

        The quote is stored unselected and unrecommended. If the shipment is
        still 'pending' it moves to 'quoted'; any other status is left alone.

        Quote IDs are retried against existing rows until one is free.

        Raises:
            ValidationError: Any field fails its check.
            NotFoundError: The shipment does not exist.
            PersistenceError: The store failed, or no free quote ID was found.
        """
        self._validate_new_quote(request)
        quote_valid_until = normalize_date(
            request.quote_valid_until, "Invalid quote_valid_until date format", "quote_valid_until"
        )
        now = utc_now_iso()

        with self.gateway.transaction("Failed to add quote") as session:
            shipment = lock_shipment(session, request.shipment_id)

            quote_id = None
            for _ in range(MAX_QUOTE_ID_ATTEMPTS):
                candidate = self.allocator.allocate_quote_id(request.carrier_name)
                if session.get(Quote, candidate) is None:
                    quote_id = candidate
                    break
                logger.debug("Quote ID %s already taken, retrying", candidate)
            if quote_id is None:
                raise PersistenceError(
                    "Failed to add quote",
                    f"no free quote ID after {MAX_QUOTE_ID_ATTEMPTS} attempts",
                )

            session.add(
                Quote(
                    id=quote_id,
                    shipment_id=request.shipment_id,
                    carrier_name=request.carrier_name.strip(),
                    carrier_email=request.carrier_email,
                    total_cost=request.total_cost,
                    base_rate=request.base_rate,
                    fuel_surcharge=request.fuel_surcharge,
                    price_breakdown=clean_object(request.price_breakdown),
                    transit_days=request.transit_days,
                    otif_score=request.otif_score,
                    service_type=request.service_type,
                    is_selected=False,
                    is_recommended=False,
                    quote_valid_until=quote_valid_until,
                    notes=clean_text(request.notes),
                    created_at=now,
                )
            )

            if shipment.status == ShipmentStatus.pending.value:
                shipment.status = ShipmentStatus.quoted.value
                shipment.updated_at = now

        logger.info(
            "Added quote %s from %s to shipment %s",
            quote_id,
            request.carrier_name,
            request.shipment_id,
        )
        return AddQuoteResult(quote_id=quote_id, created_at=now)

    def get_quotes(self, request: GetQuotesRequest) -> QuoteList:
        """List a shipment's quotes, cheapest first."""
        require_shipment_id(request.shipment_id)
        quotes = self.gateway.execute(
            select(Quote)
            .where(Quote.shipment_id == request.shipment_id)
            .order_by(Quote.total_cost.asc(), Quote.created_at.asc()),
            "Failed to fetch quotes",
        )
        return QuoteList(quotes=[QuoteRecord.model_validate(q) for q in quotes])

    def select_quote(self, request: SelectQuoteRequest) -> SelectQuoteResult:
        """Book a shipment with one of its quotes.

        Clears the selected flag on every quote of the shipment, sets it on
        the chosen quote, and marks the shipment 'booked' with the quote's
        carrier and total cost. All of it commits together or not at all.

        Raises:
            ValidationError: Malformed quote or shipment ID.
            NotFoundError: The shipment is missing, or the quote does not
                belong to it.
        """
        require(is_valid_quote_id(request.quote_id), "Invalid quote ID format", "quote_id")
        require_shipment_id(request.shipment_id)

        with self.gateway.transaction("Failed to select quote") as session:
            shipment = lock_shipment(session, request.shipment_id)

            quote = session.scalars(
                select(Quote).where(
                    Quote.id == request.quote_id,
                    Quote.shipment_id == request.shipment_id,
                )
            ).one_or_none()
            if quote is None:
                raise NotFoundError(
                    "Quote", request.quote_id, context=f"shipment {request.shipment_id}"
                )

            session.execute(
                update(Quote)
                .where(Quote.shipment_id == request.shipment_id)
                .values(is_selected=False)
            )
            session.execute(
                update(Quote).where(Quote.id == request.quote_id).values(is_selected=True)
            )

            shipment.status = ShipmentStatus.booked.value
            shipment.selected_carrier = quote.carrier_name
            shipment.total_cost = quote.total_cost
            shipment.updated_at = utc_now_iso()
            session.flush()

            session.refresh(quote)
            selected = QuoteRecord.model_validate(quote)

        logger.info(
            "Selected quote %s (%s) for shipment %s",
            request.quote_id,
            selected.carrier_name,
            request.shipment_id,
        )
        return SelectQuoteResult(success=True, selected_quote=selected)
