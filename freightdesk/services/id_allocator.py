"""Human-readable identifier allocation for shipments and quotes.

Shipment IDs are year-scoped sequences: CART-2025-00001, CART-2025-00002...
The next number is derived from the lexicographically greatest ID of the
current year, which only sorts correctly while the sequence stays 5 digits
wide. Past 99999 in one year the suffix grows to 6 digits and ordering
breaks; this is logged, not prevented.

Quote IDs are quote-<carrier slug>-<3 random digits>.

Example:
    allocator = IdAllocator(gateway)
    allocator.allocate_shipment_id()      # "CART-2025-00042"
    allocator.allocate_quote_id("J.B. Hunt Transport")  # "quote-jbhunttransport-317"
"""

import logging
import random
import re
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from freightdesk.db.gateway import PersistenceGateway
from freightdesk.db.models import Shipment

logger = logging.getLogger(__name__)

SHIPMENT_ID_PREFIX = "CART"
SEQUENCE_WIDTH = 5
MAX_SEQUENCE = 10**SEQUENCE_WIDTH - 1

QUOTE_ID_PREFIX = "quote"
QUOTE_SLUG_MAX_LENGTH = 15
QUOTE_SUFFIX_WIDTH = 3
DEFAULT_CARRIER_SLUG = "carrier"

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]")


def shipment_id_prefix(year: int) -> str:
    """Return the per-year ID prefix, e.g. 'CART-2025-'."""
    return f"{SHIPMENT_ID_PREFIX}-{year}-"


def format_shipment_id(year: int, sequence: int) -> str:
    """Format a shipment ID from its year and sequence number."""
    return f"{shipment_id_prefix(year)}{sequence:0{SEQUENCE_WIDTH}d}"


def next_shipment_id(last_id: str | None, year: int) -> str:
    """Compute the ID following last_id within the given year.

    Args:
        last_id: Greatest existing ID for the year, or None if none exist.
        year: Calendar year the ID is scoped to.

    Returns:
        The next shipment ID. Starts at 1 when last_id is None.
    """
    next_number = 1
    if last_id:
        next_number = int(last_id.split("-")[2]) + 1
    if next_number > MAX_SEQUENCE:
        logger.warning(
            "Shipment sequence for %d exceeded %d; IDs will no longer sort lexicographically",
            year,
            MAX_SEQUENCE,
        )
    return format_shipment_id(year, next_number)


def carrier_slug(carrier_name: str) -> str:
    """Lowercase, strip everything outside [a-z0-9], cap at 15 characters.

    A name with no usable characters falls back to 'carrier' so the
    resulting quote ID still matches the quote ID format.
    """
    slug = _NON_SLUG_CHARS.sub("", carrier_name.lower())[:QUOTE_SLUG_MAX_LENGTH]
    return slug or DEFAULT_CARRIER_SLUG


class IdAllocator:
    """Allocates shipment and quote identifiers."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        rng: random.Random | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the allocator.

        Args:
            gateway: Persistence gateway for the sequence lookup.
            rng: Random source for quote suffixes and the fallback sequence.
            now: Clock used to pick the year scope.
        """
        self._gateway = gateway
        self._rng = rng or random.Random()
        self._now = now

    def allocate_shipment_id(self, session: Session | None = None) -> str:
        """Allocate the next shipment ID for the current year.

        Best effort, not a strict sequence: if the lookup or the parse of
        the latest ID fails for any reason, a random 5-digit number is used
        instead of failing the caller, which can collide with an existing ID.

        Args:
            session: Open transaction to run the lookup in. Passing the
                transaction that inserts the shipment keeps the lookup and
                the insert under one write lock.
        """
        year = self._now().year
        prefix = shipment_id_prefix(year)
        stmt = (
            select(Shipment.id)
            .where(Shipment.id.like(f"{prefix}%"))
            .order_by(Shipment.id.desc())
            .limit(1)
        )
        try:
            if session is not None:
                last_id = session.scalars(stmt).first()
            else:
                rows = self._gateway.execute(stmt, "Failed to look up latest shipment ID")
                last_id = rows[0] if rows else None
            return next_shipment_id(last_id, year)
        except Exception as e:
            fallback = format_shipment_id(year, self._rng.randrange(0, MAX_SEQUENCE + 1))
            logger.warning("Error generating shipment ID, using %s: %s", fallback, e)
            return fallback

    def allocate_quote_id(self, carrier_name: str) -> str:
        """Build a quote ID from the carrier name and a random suffix.

        No uniqueness check here; callers that need one retry on collision.
        """
        suffix = self._rng.randrange(0, 10**QUOTE_SUFFIX_WIDTH)
        return f"{QUOTE_ID_PREFIX}-{carrier_slug(carrier_name)}-{suffix:0{QUOTE_SUFFIX_WIDTH}d}"
