"""Resend mail client.

Implements MailClient against the Resend REST API (POST /emails with a
bearer token). The API key is read once at construction; a client without
one reports is_configured == False and refuses to send.

API Reference: https://resend.com/docs/api-reference/emails/send-email
"""

import logging
from typing import Any

import httpx

from freightdesk.clients.base import MailClient, MailDeliveryError
from freightdesk.config import MailConfig

logger = logging.getLogger(__name__)


class ResendClient(MailClient):
    """Resend delivery over httpx.

    Example usage:
        client = ResendClient(api_key="re_...")
        message_id = await client.send(
            "quotes@go2irl.com", "ops@acme.com", "Your quote", "<p>...</p>"
        )
    """

    def __init__(
        self,
        api_key: str | None,
        api_url: str = "https://api.resend.com",
        timeout: float = 10.0,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: MailConfig) -> "ResendClient":
        """Build a client from the mail section of the config."""
        return cls(
            api_key=config.resolved_api_key(),
            api_url=config.api_url,
            timeout=config.timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def send(
        self,
        from_address: str,
        to_address: str,
        subject: str,
        html: str,
    ) -> str:
        """Send one message through Resend.

        Returns:
            The Resend message ID.

        Raises:
            MailDeliveryError: Not configured, HTTP error, transport error,
                or a response without an ID.
        """
        if not self.is_configured:
            raise MailDeliveryError("Resend API key is not set")

        payload = {
            "from": from_address,
            "to": to_address,
            "subject": subject,
            "html": html,
        }
        data = await self._post("emails", payload)

        message_id = data.get("id") if isinstance(data, dict) else None
        if not message_id:
            raise MailDeliveryError("Resend API did not return a message ID")

        logger.info("Sent email via Resend: %s -> %s (%s)", from_address, to_address, message_id)
        return str(message_id)

    async def _post(self, endpoint: str, json: dict[str, Any]) -> Any:
        url = f"{self._api_url}/{endpoint}"
        headers = {"Authorization": f"Bearer {self._api_key}"}

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(url, json=json, headers=headers)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                raise MailDeliveryError(
                    f"Resend API error: {e.response.status_code} {_error_detail(e.response)}"
                ) from e
            except httpx.RequestError as e:
                raise MailDeliveryError(f"Failed to send email via Resend: {e}") from e
            except ValueError as e:
                raise MailDeliveryError(f"Resend API returned invalid JSON: {e}") from e


def _error_detail(response: httpx.Response) -> str:
    """Pull the provider's message out of an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase
