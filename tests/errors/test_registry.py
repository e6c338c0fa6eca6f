"""Unit tests for freightdesk/errors/registry.py."""

import pytest

from freightdesk.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    get_error,
    get_errors_by_category,
)


@pytest.mark.parametrize(
    "code,category,title",
    [
        ("E-1001", ErrorCategory.NOT_FOUND, "Shipment Not Found"),
        ("E-1002", ErrorCategory.NOT_FOUND, "Quote Not Found"),
        ("E-1003", ErrorCategory.NOT_FOUND, "Email Not Found"),
        ("E-2001", ErrorCategory.VALIDATION, "Invalid Input"),
        ("E-2002", ErrorCategory.VALIDATION, "Malformed Arguments"),
        ("E-2003", ErrorCategory.VALIDATION, "Unknown Operation"),
        ("E-2004", ErrorCategory.VALIDATION, "Sender Not Allowed"),
        ("E-3001", ErrorCategory.MAIL, "Mail Provider Not Configured"),
        ("E-3002", ErrorCategory.MAIL, "Mail Provider Error"),
        ("E-3003", ErrorCategory.MAIL, "Email Sent But Not Recorded"),
        ("E-4001", ErrorCategory.SYSTEM, "Database Error"),
    ],
)
def test_error_codes_registered(code, category, title):
    error = get_error(code)
    assert error is not None, f"{code} not found in registry"
    assert error.category == category
    assert error.title == title


def test_unknown_code_returns_none():
    assert get_error("E-9999") is None


def test_codes_match_keys():
    for key, error in ERROR_REGISTRY.items():
        assert error.code == key


def test_by_category():
    mail = get_errors_by_category(ErrorCategory.MAIL)
    assert {e.code for e in mail} == {"E-3001", "E-3002", "E-3003"}


def test_retryable_flags():
    assert get_error("E-3002").is_retryable is True
    assert get_error("E-4001").is_retryable is True
    assert get_error("E-2001").is_retryable is False
