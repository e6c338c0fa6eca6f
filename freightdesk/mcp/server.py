"""FastMCP server for FreightDesk.

Exposes the freight lifecycle operations (shipments, quotes, emails,
chat, outbound email) as MCP tools.

The lifespan owns the store connection:
- opens the engine and creates tables on startup
- builds the service container and mail client
- disposes the engine on shutdown

Tools reach the services via ctx.request_context.lifespan_context.
NEVER use print() in tools: stdout carries the stdio transport.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from freightdesk import __version__
from freightdesk.config import FreightDeskConfig
from freightdesk.db.connection import close_db, create_db_engine, init_db
from freightdesk.mcp.dispatch import OPERATIONS
from freightdesk.mcp.tools.chat_tools import add_chat_message, get_chat_history
from freightdesk.mcp.tools.email_tools import (
    add_email,
    get_emails,
    get_unprocessed_emails,
    mark_email_processed,
    send_email,
)
from freightdesk.mcp.tools.quote_tools import add_quote, get_quotes, select_quote
from freightdesk.mcp.tools.shipment_tools import (
    create_shipment,
    find_open_shipment_by_customer,
    get_shipment,
    list_shipments,
    update_shipment,
)
from freightdesk.services.provider import FreightServices, build_services

logger = logging.getLogger(__name__)

TOOLS = [
    create_shipment,
    get_shipment,
    update_shipment,
    list_shipments,
    add_quote,
    get_quotes,
    select_quote,
    add_email,
    get_emails,
    get_unprocessed_emails,
    mark_email_processed,
    find_open_shipment_by_customer,
    send_email,
    add_chat_message,
    get_chat_history,
]


def create_server(
    config: FreightDeskConfig,
    services: FreightServices | None = None,
) -> FastMCP:
    """Build the FreightDesk MCP server.

    Args:
        config: Loaded configuration.
        services: Prebuilt service container. When given, the lifespan
            uses it as-is and leaves its engine alone (tests pass one
            bound to an in-memory store).

    Returns:
        A FastMCP instance with every tool and the /health route registered.
    """
    # Shared with the /health route, which has no lifespan context
    state: dict[str, Any] = {"services": services}

    @asynccontextmanager
    async def lifespan(app: Any) -> AsyncIterator[dict[str, Any]]:
        if services is not None:
            yield {"services": services, "config": config}
            return

        engine = create_db_engine(config.database)
        init_db(engine)
        built = build_services(engine, mail_config=config.mail)
        state["services"] = built
        logger.info("FreightDesk server ready (%d tools)", len(TOOLS))
        try:
            yield {"services": built, "config": config}
        finally:
            state["services"] = None
            close_db(engine)

    mcp = FastMCP(name=config.server.name, lifespan=lifespan)

    for tool in TOOLS:
        mcp.tool()(tool)

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        current = state["services"]
        connected = current is not None and await asyncio.to_thread(current.gateway.ping)
        database = "connected" if connected else "unavailable"
        return JSONResponse(
            {
                "status": "ok" if database == "connected" else "degraded",
                "timestamp": datetime.now(UTC).isoformat(),
                "service": config.server.name,
                "version": __version__,
                "tools": len(OPERATIONS),
                "database": database,
            },
            status_code=200 if database == "connected" else 503,
        )

    return mcp


def run_server(config: FreightDeskConfig) -> None:
    """Run the server on the configured transport (blocking)."""
    mcp = create_server(config)
    server = config.server
    if server.transport == "stdio":
        mcp.run(transport="stdio")
    else:
        logger.info("Listening on %s:%d (%s)", server.host, server.resolved_port(), server.transport)
        mcp.run(
            transport=server.transport,
            host=server.host,
            port=server.resolved_port(),
            log_level=server.log_level,
        )
