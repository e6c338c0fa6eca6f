"""End-to-end tests through the FastMCP server, in memory."""

import json
import threading
from unittest.mock import patch

import httpx
import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from freightdesk.config import FreightDeskConfig
from freightdesk.mcp.server import TOOLS, create_server


@pytest.fixture
def server(services):
    return create_server(FreightDeskConfig(), services=services)


@pytest.mark.asyncio
async def test_lists_every_tool(server):
    async with Client(server) as client:
        tools = await client.list_tools()
    assert len(tools) == len(TOOLS) == 15
    names = {t.name for t in tools}
    assert {"create_shipment", "select_quote", "send_email", "get_chat_history"} <= names


@pytest.mark.asyncio
async def test_send_email_schema_uses_from_and_to(server):
    async with Client(server) as client:
        tools = {t.name: t for t in await client.list_tools()}
    properties = tools["send_email"].inputSchema["properties"]
    assert "from" in properties
    assert "to" in properties
    assert "from_address" not in properties
    assert "to_address" not in properties
    assert "ctx" not in properties


@pytest.mark.asyncio
async def test_call_tool_round_trip(server):
    async with Client(server) as client:
        created = await client.call_tool(
            "create_shipment",
            {
                "customer_email": "ops@acme.com",
                "customer_name": "Acme",
                "pickup_address": "A St",
                "delivery_address": "B Ave",
            },
        )
        shipment_id = created.data["shipment_id"]

        listed = await client.call_tool("list_shipments", {"status": "pending"})

    assert listed.data["total"] == 1
    assert listed.data["shipments"][0]["id"] == shipment_id


@pytest.mark.asyncio
async def test_send_email_accepts_from_and_to(server, mail_client):
    async with Client(server) as client:
        created = await client.call_tool(
            "create_shipment",
            {
                "customer_email": "ops@acme.com",
                "customer_name": "Acme",
                "pickup_address": "A St",
                "delivery_address": "B Ave",
            },
        )
        shipment_id = created.data["shipment_id"]

        sent = await client.call_tool(
            "send_email",
            {
                "shipment_id": shipment_id,
                "from": "quotes@go2irl.com",
                "to": "ops@acme.com",
                "subject": "Your quote",
                "body": "<p>Attached</p>",
                "type": "wilson_analysis",
            },
        )

    assert sent.data["success"] is True
    assert sent.data["provider_message_id"] == "msg_1"
    assert len(mail_client.sent) == 1


@pytest.mark.asyncio
async def test_domain_error_surfaces_as_tool_error(server):
    async with Client(server) as client:
        with pytest.raises(ToolError) as exc_info:
            await client.call_tool("get_shipment", {"shipment_id": "not-an-id"})
    payload = json.loads(str(exc_info.value))
    assert payload["message"] == "Invalid shipment ID format"


@pytest.mark.asyncio
async def test_health_route_reports_database(server):
    transport = httpx.ASGITransport(app=server.http_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["tools"] == 15


@pytest.mark.asyncio
async def test_health_route_without_services_is_degraded():
    server = create_server(FreightDeskConfig())
    transport = httpx.ASGITransport(app=server.http_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_health_route_pings_off_the_event_loop(server, services):
    loop_thread = threading.get_ident()
    ping_threads: list[int] = []

    def ping() -> bool:
        ping_threads.append(threading.get_ident())
        return True

    transport = httpx.ASGITransport(app=server.http_app())
    with patch.object(services.gateway, "ping", side_effect=ping):
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")

    assert response.status_code == 200
    assert len(ping_threads) == 1
    assert ping_threads[0] != loop_thread
