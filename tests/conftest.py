"""Root-level pytest fixtures for all tests.

Provides shared fixtures:
- Database fixtures (in-memory and file-based SQLite)
- Service container wired to a fake mail client
- FastMCP context mocks
- Seed helpers for shipments and quotes
"""

import os
import random
import tempfile
from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import Engine

from freightdesk.clients.base import MailClient, MailDeliveryError
from freightdesk.config import DatabaseConfig, MailConfig
from freightdesk.db.connection import (
    close_db,
    create_db_engine,
    create_session_factory,
    init_db,
)
from freightdesk.db.gateway import PersistenceGateway
from freightdesk.schemas import AddQuoteRequest, CreateShipmentRequest
from freightdesk.services.id_allocator import IdAllocator
from freightdesk.services.provider import FreightServices, build_services


class FakeMailClient(MailClient):
    """Records sends instead of calling a provider."""

    def __init__(self, configured: bool = True, fail_with: str | None = None) -> None:
        self.configured = configured
        self.fail_with = fail_with
        self.sent: list[dict] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def send(self, from_address, to_address, subject, html) -> str:
        if self.fail_with:
            raise MailDeliveryError(self.fail_with)
        self.sent.append(
            {"from": from_address, "to": to_address, "subject": subject, "html": html}
        )
        return f"msg_{len(self.sent)}"


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with all tables created."""
    eng = create_db_engine(DatabaseConfig(), url="sqlite:///:memory:")
    init_db(eng)
    yield eng
    close_db(eng)


@pytest.fixture
def file_based_db() -> Generator[str, None, None]:
    """Create a file-based SQLite database URL.

    Unlike in-memory databases, this is shared across connections and
    threads, which the concurrency tests need.
    """
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield f"sqlite:///{path}"
    for suffix in ("", "-wal", "-shm"):
        Path(path + suffix).unlink(missing_ok=True)


@pytest.fixture
def file_engine(file_based_db: str) -> Generator[Engine, None, None]:
    """Engine over the file-based database, tables created."""
    eng = create_db_engine(DatabaseConfig(pool_timeout=30), url=file_based_db)
    init_db(eng)
    yield eng
    close_db(eng)


@pytest.fixture
def gateway(engine: Engine) -> PersistenceGateway:
    return PersistenceGateway(create_session_factory(engine))


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def mail_client() -> FakeMailClient:
    return FakeMailClient()


@pytest.fixture
def fake_mail_client_cls() -> type[FakeMailClient]:
    return FakeMailClient


@pytest.fixture
def allocator_factory():
    """Build an allocator with a seeded RNG and a pinned clock."""

    def _make(gateway: PersistenceGateway, year: int = 2025, seed: int = 7) -> IdAllocator:
        return IdAllocator(
            gateway,
            rng=random.Random(seed),
            now=lambda: datetime(year, 6, 1, 12, 0, 0),
        )

    return _make


@pytest.fixture
def services(engine: Engine, mail_client: FakeMailClient) -> FreightServices:
    """Service container over the in-memory engine with a fake mail client."""
    return build_services(engine, mail_config=MailConfig(), mail_client=mail_client)


# ============================================================================
# Seed Helpers
# ============================================================================


def _shipment_request(**overrides) -> CreateShipmentRequest:
    """Valid create_shipment arguments with optional overrides."""
    data = {
        "customer_email": "ops@acme-foods.com",
        "customer_name": "Acme Foods",
        "pickup_address": "100 Dock St, Oakland, CA",
        "delivery_address": "9 Harbor Way, Portland, OR",
        "pickup_date": "2025-07-01",
        "cargo_type": "palletized",
        "weight_kg": 1200.0,
    }
    data.update(overrides)
    return CreateShipmentRequest(**data)


def _quote_request(shipment_id: str, **overrides) -> AddQuoteRequest:
    """Valid add_quote arguments with optional overrides."""
    data = {
        "shipment_id": shipment_id,
        "carrier_name": "Swift Freight",
        "carrier_email": "rates@swiftfreight.com",
        "total_cost": 1850.0,
        "base_rate": 1600.0,
        "fuel_surcharge": 250.0,
        "transit_days": 3,
        "service_type": "LTL",
    }
    data.update(overrides)
    return AddQuoteRequest(**data)


@pytest.fixture
def shipment_request():
    """Factory for valid CreateShipmentRequest objects."""
    return _shipment_request


@pytest.fixture
def quote_request():
    """Factory for valid AddQuoteRequest objects."""
    return _quote_request


@pytest.fixture
def shipment_id(services: FreightServices) -> str:
    """A freshly created pending shipment."""
    return services.shipments.create_shipment(_shipment_request()).shipment_id


# ============================================================================
# MCP Context Fixtures
# ============================================================================


@pytest.fixture
def mock_ctx(services: FreightServices) -> AsyncMock:
    """FastMCP Context mock whose lifespan context holds the services."""
    ctx = AsyncMock()
    ctx.request_context = MagicMock()
    ctx.request_context.lifespan_context = {"services": services}
    return ctx
