"""Tests for send_email (OutboundEmailService)."""

from unittest.mock import AsyncMock, patch

import pytest

from freightdesk.config import MailConfig
from freightdesk.errors import NotFoundError, PersistenceError, ValidationError
from freightdesk.schemas import GetEmailsRequest, SendEmailRequest
from freightdesk.services.provider import build_services


def _send(shipment_id: str, **overrides) -> SendEmailRequest:
    data = {
        "shipment_id": shipment_id,
        "from": "quotes@go2irl.com",
        "to": "ops@acme-foods.com",
        "subject": "Your freight quote",
        "body": "<p>Best rate: $1,850</p>",
        "type": "wilson_notification",
    }
    data.update(overrides)
    return SendEmailRequest(**data)


@pytest.mark.asyncio
async def test_sends_and_records(services, shipment_id, mail_client):
    result = await services.outbound.send_email(_send(shipment_id))

    assert result.success is True
    assert result.provider_message_id == "msg_1"
    assert result.email_id is not None
    assert mail_client.sent[0]["from"] == "quotes@go2irl.com"
    assert mail_client.sent[0]["html"] == "<p>Best rate: $1,850</p>"

    emails = services.emails.get_emails(GetEmailsRequest(shipment_id=shipment_id)).emails
    assert emails[0].id == result.email_id
    assert emails[0].direction == "outbound"
    assert emails[0].from_email == "quotes@go2irl.com"


@pytest.mark.asyncio
async def test_foreign_domain_rejected_before_network(services, shipment_id, mail_client):
    with patch.object(mail_client, "send", new_callable=AsyncMock) as mock_send:
        with pytest.raises(ValidationError) as exc_info:
            await services.outbound.send_email(_send(shipment_id, **{"from": "sales@gmail.com"}))
    assert exc_info.value.code == "E-2004"
    assert "Sender must be @go2irl.com" in exc_info.value.message
    mock_send.assert_not_called()


@pytest.mark.asyncio
async def test_unapproved_company_sender_rejected(services, shipment_id, mail_client):
    with pytest.raises(ValidationError, match="not an approved address"):
        await services.outbound.send_email(_send(shipment_id, **{"from": "ceo@go2irl.com"}))
    assert mail_client.sent == []


@pytest.mark.asyncio
async def test_empty_allow_list_accepts_any_company_address(engine, shipment_request, fake_mail_client_cls):
    client = fake_mail_client_cls()
    services = build_services(engine, mail_config=MailConfig(allowed_senders=[]), mail_client=client)
    shipment_id = services.shipments.create_shipment(shipment_request()).shipment_id

    result = await services.outbound.send_email(_send(shipment_id, **{"from": "ceo@go2irl.com"}))
    assert result.success is True


@pytest.mark.asyncio
async def test_invalid_recipient(services, shipment_id, mail_client):
    with pytest.raises(ValidationError, match="Invalid to_email address"):
        await services.outbound.send_email(_send(shipment_id, to="nobody"))
    assert mail_client.sent == []


@pytest.mark.asyncio
async def test_missing_shipment_raises_before_send(services, mail_client):
    with pytest.raises(NotFoundError):
        await services.outbound.send_email(_send("CART-2025-33333"))
    assert mail_client.sent == []


@pytest.mark.asyncio
async def test_not_configured(engine, shipment_request, fake_mail_client_cls):
    services = build_services(
        engine, mail_config=MailConfig(), mail_client=fake_mail_client_cls(configured=False)
    )
    shipment_id = services.shipments.create_shipment(shipment_request()).shipment_id

    result = await services.outbound.send_email(_send(shipment_id))

    assert result.success is False
    assert result.error_code == "E-3001"
    assert "RESEND_API_KEY" in result.error
    assert result.provider_message_id is None


@pytest.mark.asyncio
async def test_provider_failure(engine, shipment_request, fake_mail_client_cls):
    services = build_services(
        engine,
        mail_config=MailConfig(),
        mail_client=fake_mail_client_cls(fail_with="Resend API error: 422 invalid"),
    )
    shipment_id = services.shipments.create_shipment(shipment_request()).shipment_id

    result = await services.outbound.send_email(_send(shipment_id))

    assert result.success is False
    assert result.error_code == "E-3002"
    assert result.error == "Resend API error: 422 invalid"
    assert services.emails.get_emails(GetEmailsRequest(shipment_id=shipment_id)).emails == []


@pytest.mark.asyncio
async def test_sent_but_not_recorded(services, shipment_id, mail_client):
    with patch.object(
        services.outbound.emails,
        "add_email",
        side_effect=PersistenceError("Failed to add email", "disk I/O error"),
    ):
        result = await services.outbound.send_email(_send(shipment_id))

    assert result.success is False
    assert result.provider_message_id == "msg_1"
    assert result.email_id is None
    assert result.error_code == "E-3003"
    assert "msg_1" in result.error
    assert "disk I/O error" in result.error
    assert len(mail_client.sent) == 1


@pytest.mark.asyncio
async def test_sent_but_recording_crashed(services, shipment_id, mail_client):
    with patch.object(services.outbound.emails, "add_email", side_effect=RuntimeError("boom")):
        result = await services.outbound.send_email(_send(shipment_id))

    assert result.success is False
    assert result.provider_message_id == "msg_1"
    assert result.error_code == "E-3003"
    assert "boom" in result.error
    assert len(mail_client.sent) == 1
