"""Tests for error formatting and ToolError conversion."""

import json

from fastmcp.exceptions import ToolError

from freightdesk.errors import (
    NotFoundError,
    PersistenceError,
    ValidationError,
    format_error,
    format_error_text,
    to_tool_error,
)


def test_validation_payload():
    payload = format_error(ValidationError("Invalid customer email address", field="customer_email"))
    assert payload["code"] == "E-2001"
    assert payload["kind"] == "validation"
    assert payload["message"] == "Invalid customer email address"
    assert payload["details"] == {"field": "customer_email"}
    assert payload["is_retryable"] is False


def test_not_found_payload():
    error = NotFoundError("Quote", "quote-swift-001", context="shipment CART-2025-00001")
    payload = format_error(error)
    assert payload["code"] == "E-1002"
    assert payload["kind"] == "not_found"
    assert payload["message"] == "Quote quote-swift-001 not found for shipment CART-2025-00001"
    assert payload["details"] == {"resource_type": "Quote", "identifier": "quote-swift-001"}


def test_persistence_payload():
    payload = format_error(PersistenceError("Failed to add quote", "database is locked"))
    assert payload["code"] == "E-4001"
    assert payload["kind"] == "persistence"
    assert payload["message"] == "Failed to add quote: database is locked"
    assert payload["details"] == {"operation": "Failed to add quote"}
    assert payload["is_retryable"] is True


def test_unknown_resource_uses_generic_code():
    assert NotFoundError("Carrier", "x").code == "E-1099"


def test_text_format():
    text = format_error_text(ValidationError("Subject is required", field="subject"))
    assert text.splitlines()[0] == "E-2001: Subject is required"
    assert "Field: subject" in text
    assert "Action:" in text


def test_text_without_remediation():
    text = format_error_text(ValidationError("Subject is required"), include_remediation=False)
    assert text == "E-2001: Subject is required"


def test_tool_error_carries_json():
    error = to_tool_error(NotFoundError("Shipment", "CART-2025-00009"))
    assert isinstance(error, ToolError)
    payload = json.loads(str(error))
    assert payload["code"] == "E-1001"
    assert payload["message"] == "Shipment CART-2025-00009 not found"
