"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. --config <path> CLI flag
2. ./freightdesk.yaml (working directory)
3. ~/.freightdesk/config.yaml (user home)

Environment variables override YAML: FREIGHTDESK_<SECTION>_<KEY>.
${VAR} references in YAML values resolve from environment at load time.
The conventional DATABASE_URL, RESEND_API_KEY and PORT variables are
honoured when the corresponding setting is left empty.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel

from freightdesk.utils.paths import get_default_db_path

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

DEFAULT_ALLOWED_SENDERS = [
    "wilsonjr@go2irl.com",
    "rfq@go2irl.com",
    "quotes@go2irl.com",
    "support@go2irl.com",
    "transportation@go2irl.com",
    "swiftship@go2irl.com",
    "inbox@go2irl.com",
    "ilovetrucks@go2irl.com",
    "realtruck@go2irl.com",
    "supertrucks@go2irl.com",
]


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Args:
        value: String potentially containing ${VAR} references.

    Returns:
        String with all ${VAR} references replaced by their env values.
        Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve ${VAR} references in a nested data structure."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class DatabaseConfig(BaseModel):
    """Relational store connection settings."""

    url: str = ""
    pool_size: int = 10
    pool_timeout: int = 10
    pool_recycle: int = 20
    echo: bool = False

    def resolved_url(self) -> str:
        """Return the database URL to connect to.

        Precedence:
        1. database.url (config file or FREIGHTDESK_DATABASE_URL)
        2. DATABASE_URL
        3. SQLite file in the user data directory
        """
        if self.url.strip():
            return self.url.strip()
        database_url = os.environ.get("DATABASE_URL", "").strip()
        if database_url:
            return database_url
        return f"sqlite:///{get_default_db_path()}"


class MailConfig(BaseModel):
    """Outbound mail provider settings."""

    api_key: str = ""
    api_url: str = "https://api.resend.com"
    sender_domain: str = "go2irl.com"
    allowed_senders: list[str] = DEFAULT_ALLOWED_SENDERS
    timeout_seconds: float = 10.0

    def resolved_api_key(self) -> str:
        """Return the provider API key, falling back to RESEND_API_KEY."""
        return self.api_key.strip() or os.environ.get("RESEND_API_KEY", "").strip()


class ServerConfig(BaseModel):
    """MCP server settings."""

    name: str = "FreightDesk"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 0
    log_level: str = "info"

    def resolved_port(self) -> int:
        """Return the HTTP port, falling back to PORT then 8080."""
        if self.port:
            return self.port
        env_port = os.environ.get("PORT", "").strip()
        return int(env_port) if env_port.isdigit() else 8080


class FreightDeskConfig(BaseModel):
    """Top-level configuration for the FreightDesk server and CLI."""

    database: DatabaseConfig = DatabaseConfig()
    mail: MailConfig = MailConfig()
    server: ServerConfig = ServerConfig()


def _find_config_file() -> Path | None:
    """Search for config file in standard locations.

    Returns:
        Path to config file if found, None otherwise.
    """
    candidates = [
        Path.cwd() / "freightdesk.yaml",
        Path.cwd() / "freightdesk.yml",
        Path.home() / ".freightdesk" / "config.yaml",
        Path.home() / ".freightdesk" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply FREIGHTDESK_<SECTION>_<KEY> env var overrides to config data.

    For example, ``FREIGHTDESK_MAIL_SENDER_DOMAIN`` maps to section
    ``mail``, field ``sender_domain``. List fields take a comma-separated
    value.

    Args:
        data: Parsed YAML config dict.

    Returns:
        Config dict with env var overrides applied.
    """
    prefix = "FREIGHTDESK_"
    known_sections = sorted(
        FreightDeskConfig.model_fields.keys(), key=len, reverse=True
    )
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        suffix = key[len(prefix):].lower()
        matched_section = None
        matched_field = None
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix):
                matched_section = section
                matched_field = suffix[len(section_prefix):]
                break
        if matched_section is None or not matched_field:
            continue
        if matched_section not in data or data[matched_section] is None:
            data[matched_section] = {}
        if not isinstance(data[matched_section], dict):
            continue
        section_model = FreightDeskConfig.model_fields[matched_section].annotation
        field_info = section_model.model_fields.get(matched_field)
        if field_info is not None and field_info.annotation is str:
            data[matched_section][matched_field] = value
            continue
        if matched_field == "allowed_senders":
            data[matched_section][matched_field] = [
                item.strip() for item in value.split(",") if item.strip()
            ]
            continue
        # Coerce to int, bool, or keep as string
        try:
            data[matched_section][matched_field] = int(value)
        except ValueError:
            if value.lower() in ("true", "false"):
                data[matched_section][matched_field] = value.lower() == "true"
            else:
                data[matched_section][matched_field] = value
    return data


def load_config(config_path: str | None = None) -> FreightDeskConfig:
    """Load FreightDesk configuration from YAML file with env var resolution.

    Args:
        config_path: Explicit path to config file. If None, searches
            standard locations (cwd, then ~/.freightdesk/).

    Returns:
        Parsed and validated FreightDeskConfig. Defaults plus environment
        overrides when no config file exists.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
    """
    raw_data: dict[str, Any] = {}
    if config_path:
        path: Path | None = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        path = _find_config_file()

    if path is not None:
        logger.info("Loading config from %s", path)
        with open(path) as f:
            raw_data = yaml.safe_load(f) or {}

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)
    return FreightDeskConfig(**data)
