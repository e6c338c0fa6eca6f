"""Tests for EmailService."""

import pytest

from freightdesk.errors import NotFoundError, ValidationError
from freightdesk.schemas import (
    AddEmailRequest,
    GetEmailsRequest,
    GetUnprocessedEmailsRequest,
    MarkEmailProcessedRequest,
)


def _email(shipment_id: str, **overrides) -> AddEmailRequest:
    data = {
        "shipment_id": shipment_id,
        "type": "customer_request",
        "from_email": "ops@acme-foods.com",
        "to_email": "inbox@go2irl.com",
        "subject": "Reefer load to Portland",
        "body": "Need a reefer for 12 pallets.",
    }
    data.update(overrides)
    return AddEmailRequest(**data)


class TestAddEmail:
    def test_short_body_preview_is_whole_body(self, services, shipment_id):
        services.emails.add_email(_email(shipment_id, body="Short body"))
        email = services.emails.get_emails(GetEmailsRequest(shipment_id=shipment_id)).emails[0]
        assert email.preview == "Short body"
        assert email.processed is False

    def test_long_body_preview_is_first_100_chars(self, services, shipment_id):
        body = "".join(str(i % 10) for i in range(250))
        services.emails.add_email(_email(shipment_id, body=body))
        email = services.emails.get_emails(GetEmailsRequest(shipment_id=shipment_id)).emails[0]
        assert email.preview == body[:100]
        assert email.body == body

    def test_returns_integer_id(self, services, shipment_id):
        result = services.emails.add_email(_email(shipment_id))
        assert isinstance(result.email_id, int)
        assert result.email_id > 0

    def test_optional_fields_stored(self, services, shipment_id):
        services.emails.add_email(
            _email(
                shipment_id,
                direction="inbound",
                badge="NEW",
                thread_id="thread-77",
                parsed_data={"pallets": 12},
            )
        )
        email = services.emails.get_emails(GetEmailsRequest(shipment_id=shipment_id)).emails[0]
        assert email.direction == "inbound"
        assert email.badge == "NEW"
        assert email.thread_id == "thread-77"
        assert email.parsed_data == {"pallets": 12}

    def test_shipment_not_found(self, services):
        with pytest.raises(NotFoundError):
            services.emails.add_email(_email("CART-2025-55555"))

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"type": "newsletter"}, "Invalid email type"),
            ({"from_email": "bad"}, "Invalid from_email address"),
            ({"to_email": "bad"}, "Invalid to_email address"),
            ({"subject": "  "}, "Subject is required"),
            ({"body": ""}, "Email body is required"),
            ({"direction": "up"}, "Invalid email direction (must be inbound or outbound)"),
            ({"badge": "HOT"}, "Invalid email badge"),
        ],
    )
    def test_validation_errors(self, services, shipment_id, overrides, message):
        with pytest.raises(ValidationError) as exc_info:
            services.emails.add_email(_email(shipment_id, **overrides))
        assert exc_info.value.message == message


class TestGetEmails:
    def test_newest_first_with_type_filter(self, services, shipment_id):
        services.emails.add_email(_email(shipment_id, subject="request"))
        services.emails.add_email(_email(shipment_id, type="carrier_quote", subject="quote 1"))
        services.emails.add_email(_email(shipment_id, type="carrier_quote", subject="quote 2"))

        all_emails = services.emails.get_emails(GetEmailsRequest(shipment_id=shipment_id)).emails
        assert [e.subject for e in all_emails] == ["quote 2", "quote 1", "request"]

        quotes = services.emails.get_emails(
            GetEmailsRequest(shipment_id=shipment_id, type="carrier_quote")
        ).emails
        assert [e.subject for e in quotes] == ["quote 2", "quote 1"]

    def test_invalid_type_filter(self, services, shipment_id):
        with pytest.raises(ValidationError, match="Invalid email type"):
            services.emails.get_emails(GetEmailsRequest(shipment_id=shipment_id, type="junk"))


class TestUnprocessedEmails:
    def test_oldest_first_and_excludes_processed(self, services, shipment_id):
        ids = [services.emails.add_email(_email(shipment_id, subject=f"m{i}")).email_id for i in range(3)]
        services.emails.mark_email_processed(MarkEmailProcessedRequest(email_id=ids[1]))

        emails = services.emails.get_unprocessed_emails(GetUnprocessedEmailsRequest()).emails
        assert [e.id for e in emails] == [ids[0], ids[2]]

    def test_limit(self, services, shipment_id):
        for i in range(4):
            services.emails.add_email(_email(shipment_id, subject=f"m{i}"))
        emails = services.emails.get_unprocessed_emails(GetUnprocessedEmailsRequest(limit=2)).emails
        assert [e.subject for e in emails] == ["m0", "m1"]


class TestMarkEmailProcessed:
    def test_idempotent(self, services, shipment_id):
        email_id = services.emails.add_email(_email(shipment_id)).email_id
        assert services.emails.mark_email_processed(MarkEmailProcessedRequest(email_id=email_id)).success
        assert services.emails.mark_email_processed(MarkEmailProcessedRequest(email_id=email_id)).success
        email = services.emails.get_emails(GetEmailsRequest(shipment_id=shipment_id)).emails[0]
        assert email.processed is True

    def test_not_found(self, services):
        with pytest.raises(NotFoundError, match="Email 4242 not found"):
            services.emails.mark_email_processed(MarkEmailProcessedRequest(email_id=4242))

    def test_non_positive_id(self, services):
        with pytest.raises(ValidationError, match="Invalid email_id"):
            services.emails.mark_email_processed(MarkEmailProcessedRequest(email_id=0))
