"""FreightDesk CLI.

Runs the MCP server and offers in-process access to the same operations
for operators and scripts.

Usage:
    freightdesk serve                      Run the MCP server
    freightdesk init-db                    Create tables
    freightdesk health                     Probe the database
    freightdesk tools                      List operations
    freightdesk call get_shipment --args '{"shipment_id": "CART-2025-00001"}'
    freightdesk config show                Show resolved configuration
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from freightdesk import __version__
from freightdesk.config import FreightDeskConfig, load_config
from freightdesk.db.connection import close_db, create_db_engine, init_db
from freightdesk.errors import DomainError, format_error, format_error_text
from freightdesk.mcp.dispatch import OPERATIONS, dispatch
from freightdesk.services.provider import build_services

_log = logging.getLogger(__name__)

app = typer.Typer(
    name="freightdesk",
    help="Freight operations MCP server",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")

console = Console()
err_console = Console(stderr=True)

# --- Global state ---
_config_path: str | None = None


def _configure_logging(level: str) -> None:
    """Log to stderr; stdout belongs to the stdio transport."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load() -> FreightDeskConfig:
    try:
        return load_config(config_path=_config_path)
    except FileNotFoundError as e:
        err_console.print(f"[red]Config file not found:[/red] {e}")
        raise typer.Exit(1)
    except (ValueError, TypeError) as e:
        err_console.print(f"[red]Config validation failed:[/red] {e}")
        raise typer.Exit(1)


def _mask(secret: str) -> str:
    if not secret:
        return "[dim]not set[/dim]"
    return "***" + secret[-4:] if len(secret) > 4 else "***"


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to freightdesk.yaml config file"
    ),
):
    """FreightDesk: shipments, quotes and case email over MCP."""
    global _config_path
    _config_path = config


@app.command()
def version():
    """Show FreightDesk version."""
    console.print(f"[bold]FreightDesk[/bold] v{__version__}")


@app.command()
def serve(
    transport: Optional[str] = typer.Option(
        None, "--transport", "-t", help="stdio, http or sse (overrides config)"
    ),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port for http/sse"),
):
    """Run the MCP server."""
    from freightdesk.mcp.server import run_server

    cfg = _load()
    if transport:
        if transport not in ("stdio", "http", "sse"):
            err_console.print(f"[red]Unknown transport:[/red] {transport}")
            raise typer.Exit(2)
        cfg.server.transport = transport
    if port:
        cfg.server.port = port

    _configure_logging(cfg.server.log_level)
    run_server(cfg)


@app.command("init-db")
def init_db_command():
    """Create the database tables if they do not exist."""
    cfg = _load()
    engine = create_db_engine(cfg.database)
    try:
        init_db(engine)
    finally:
        close_db(engine)
    console.print("[green]Database initialized.[/green]")


@app.command()
def health():
    """Check that the database is reachable."""
    cfg = _load()
    engine = create_db_engine(cfg.database)
    try:
        services = build_services(engine, mail_config=cfg.mail)
        ok = services.gateway.ping()
        mail_ready = services.outbound.mail_client.is_configured
    finally:
        close_db(engine)

    console.print(f"[bold]FreightDesk[/bold] v{__version__}")
    console.print(f"  database: {'[green]connected[/green]' if ok else '[red]unavailable[/red]'}")
    console.print(f"  mail: {'configured' if mail_ready else '[yellow]not configured[/yellow]'}")
    console.print(f"  tools: {len(OPERATIONS)}")
    if not ok:
        raise typer.Exit(1)


@app.command()
def tools(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List the available operations."""
    if json_output:
        console.print_json(
            json.dumps(
                [
                    {
                        "name": op.name,
                        "description": op.description,
                        "arguments": list(op.request_model.model_json_schema().get("properties", {})),
                    }
                    for op in OPERATIONS.values()
                ]
            )
        )
        return

    table = Table(title=f"Operations ({len(OPERATIONS)})")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for op in OPERATIONS.values():
        table.add_row(op.name, op.description)
    console.print(table)


@app.command()
def call(
    operation: str = typer.Argument(help="Operation name, e.g. get_shipment"),
    args: str = typer.Option("{}", "--args", "-a", help="Arguments as a JSON object"),
    json_errors: bool = typer.Option(False, "--json-errors", help="Print errors as JSON"),
):
    """Run one operation in-process and print its JSON result."""
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as e:
        err_console.print(f"[red]--args is not valid JSON:[/red] {e}")
        raise typer.Exit(2)
    if not isinstance(arguments, dict):
        err_console.print("[red]--args must be a JSON object[/red]")
        raise typer.Exit(2)

    cfg = _load()
    engine = create_db_engine(cfg.database)
    try:
        init_db(engine)
        services = build_services(engine, mail_config=cfg.mail)
        result = asyncio.run(dispatch(operation, arguments, services))
    except DomainError as e:
        _log.debug("%s failed: %s", operation, e)
        if json_errors:
            err_console.print_json(json.dumps(format_error(e)))
        else:
            err_console.print(f"[red]{format_error_text(e)}[/red]")
        raise typer.Exit(1)
    finally:
        close_db(engine)

    console.print_json(json.dumps(result))


# --- Config commands ---


@config_app.command("show")
def config_show():
    """Display resolved configuration (secrets masked)."""
    cfg = _load()

    console.print("[bold]Database:[/bold]")
    url = cfg.database.resolved_url()
    console.print(f"  backend: {url.split(':', 1)[0]}")
    console.print(f"  pool_size: {cfg.database.pool_size}")
    console.print(f"  pool_timeout: {cfg.database.pool_timeout}s")
    console.print(f"  pool_recycle: {cfg.database.pool_recycle}s")

    console.print("\n[bold]Mail:[/bold]")
    console.print(f"  api_key: {_mask(cfg.mail.resolved_api_key())}")
    console.print(f"  api_url: {cfg.mail.api_url}")
    console.print(f"  sender_domain: {cfg.mail.sender_domain}")
    console.print(f"  allowed_senders: {len(cfg.mail.allowed_senders)}")

    console.print("\n[bold]Server:[/bold]")
    console.print(f"  name: {cfg.server.name}")
    console.print(f"  transport: {cfg.server.transport}")
    console.print(f"  host: {cfg.server.host}")
    console.print(f"  port: {cfg.server.resolved_port()}")
    console.print(f"  log_level: {cfg.server.log_level}")


if __name__ == "__main__":
    app()
