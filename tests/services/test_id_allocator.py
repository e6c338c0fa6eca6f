"""Tests for shipment and quote ID allocation."""

import random
import re
from datetime import datetime
from unittest.mock import MagicMock

from freightdesk.db.models import Shipment, utc_now_iso
from freightdesk.errors import PersistenceError
from freightdesk.services.id_allocator import (
    IdAllocator,
    carrier_slug,
    format_shipment_id,
    next_shipment_id,
)


def _insert(gateway, shipment_id: str) -> None:
    now = utc_now_iso()
    with gateway.transaction("seed") as session:
        session.add(
            Shipment(
                id=shipment_id,
                customer_email="ops@acme.com",
                customer_name="Acme",
                status="pending",
                pickup_address="A",
                delivery_address="B",
                created_at=now,
                updated_at=now,
            )
        )


class TestShipmentIdFormat:
    def test_format_zero_pads(self):
        assert format_shipment_id(2025, 7) == "CART-2025-00007"

    def test_first_id_of_year(self):
        assert next_shipment_id(None, 2025) == "CART-2025-00001"

    def test_increments_last(self):
        assert next_shipment_id("CART-2025-00041", 2025) == "CART-2025-00042"

    def test_overflow_widens_and_logs(self, caplog):
        assert next_shipment_id("CART-2025-99999", 2025) == "CART-2025-100000"
        assert "no longer sort" in caplog.text


class TestAllocateShipmentId:
    def test_empty_store_starts_at_one(self, gateway, allocator_factory):
        allocator = allocator_factory(gateway, year=2025)
        assert allocator.allocate_shipment_id() == "CART-2025-00001"

    def test_continues_from_greatest_of_year(self, gateway, allocator_factory):
        _insert(gateway, "CART-2025-00003")
        _insert(gateway, "CART-2025-00010")
        _insert(gateway, "CART-2024-00500")
        allocator = allocator_factory(gateway, year=2025)
        assert allocator.allocate_shipment_id() == "CART-2025-00011"

    def test_new_year_restarts(self, gateway, allocator_factory):
        _insert(gateway, "CART-2025-00010")
        allocator = allocator_factory(gateway, year=2026)
        assert allocator.allocate_shipment_id() == "CART-2026-00001"

    def test_lookup_failure_falls_back_to_random(self):
        gateway = MagicMock()
        gateway.execute.side_effect = PersistenceError("Failed to look up latest shipment ID", "boom")
        allocator = IdAllocator(
            gateway, rng=random.Random(1), now=lambda: datetime(2025, 1, 2)
        )
        shipment_id = allocator.allocate_shipment_id()
        assert re.fullmatch(r"CART-2025-\d{5}", shipment_id)

    def test_unexpected_lookup_error_falls_back_to_random(self, caplog):
        gateway = MagicMock()
        gateway.execute.side_effect = RuntimeError("driver went away")
        allocator = IdAllocator(
            gateway, rng=random.Random(1), now=lambda: datetime(2025, 1, 2)
        )
        shipment_id = allocator.allocate_shipment_id()
        assert re.fullmatch(r"CART-2025-\d{5}", shipment_id)
        assert "driver went away" in caplog.text

    def test_malformed_latest_id_falls_back_to_random(self):
        gateway = MagicMock()
        gateway.execute.return_value = ["CART-2025-abcde"]
        allocator = IdAllocator(
            gateway, rng=random.Random(1), now=lambda: datetime(2025, 1, 2)
        )
        assert re.fullmatch(r"CART-2025-\d{5}", allocator.allocate_shipment_id())

    def test_lookup_inside_caller_transaction(self, gateway, allocator_factory):
        _insert(gateway, "CART-2025-00007")
        allocator = allocator_factory(gateway, year=2025)
        with gateway.transaction("allocate") as session:
            assert allocator.allocate_shipment_id(session) == "CART-2025-00008"


class TestQuoteIds:
    def test_slug_strips_and_lowercases(self):
        assert carrier_slug("J.B. Hunt Transport") == "jbhunttransport"

    def test_slug_truncates_to_15(self):
        assert carrier_slug("Old Dominion Freight Line") == "olddominionfrei"

    def test_empty_slug_falls_back(self):
        assert carrier_slug("!!!") == "carrier"

    def test_quote_id_shape(self, gateway, allocator_factory):
        allocator = allocator_factory(gateway)
        quote_id = allocator.allocate_quote_id("Swift Freight")
        assert re.fullmatch(r"quote-swiftfreight-\d{3}", quote_id)
