"""Tests for the freightdesk CLI."""

import json
import re

import pytest
from typer.testing import CliRunner

from freightdesk.cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def file_database(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.delenv("RESEND_API_KEY", raising=False)

def _call(operation: str, arguments: dict, *extra: str):
    return runner.invoke(app, ["call", operation, "--args", json.dumps(arguments), *extra])

def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "FreightDesk" in result.stdout

def test_tools_json_lists_all_operations():
    result = runner.invoke(app, ["tools", "--json"])
    assert result.exit_code == 0
    operations = json.loads(result.stdout)
    assert len(operations) == 15
    send = next(op for op in operations if op["name"] == "send_email")
    assert "from" in send["arguments"]

def test_init_db_and_health():
    assert runner.invoke(app, ["init-db"]).exit_code == 0
    result = runner.invoke(app, ["health"])
    assert result.exit_code == 0
    assert "connected" in result.stdout
    assert "not configured" in result.stdout

def test_call_create_then_get():
    created = _call(
        "create_shipment",
        {
            "customer_email": "ops@acme.com",
            "customer_name": "Acme",
            "pickup_address": "A St",
            "delivery_address": "B Ave",
        },
    )
    assert created.exit_code == 0
    shipment_id = json.loads(created.stdout)["shipment_id"]
    assert re.fullmatch(r"CART-\d{4}-\d{5}", shipment_id)

    fetched = _call("get_shipment", {"shipment_id": shipment_id})
    assert fetched.exit_code == 0
    assert json.loads(fetched.stdout)["shipment"]["customer_name"] == "Acme"

def test_call_domain_error_exits_nonzero():
    result = _call("get_shipment", {"shipment_id": "CART-2025-00404"})
    assert result.exit_code == 1

def test_call_unknown_operation():
    result = _call("teleport_cargo", {})
    assert result.exit_code == 1

def test_call_rejects_bad_json():
    result = runner.invoke(app, ["call", "get_shipment", "--args", "{nope"])
    assert result.exit_code == 2

def test_config_show_masks_key(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_supersecretkey1234")
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "***1234" in result.stdout
    assert "supersecret" not in result.stdout
    assert "backend: sqlite" in result.stdout

def test_missing_config_file():
    result = runner.invoke(app, ["--config", "nope.yaml", "config", "show"])
    assert result.exit_code == 1
