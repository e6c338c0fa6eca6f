"""Outbound mail collaborators.

MailClient is the interface the send_email operation depends on;
ResendClient delivers through the Resend REST API.
"""

from freightdesk.clients.base import MailClient, MailDeliveryError
from freightdesk.clients.resend import ResendClient

__all__ = [
    "MailClient",
    "MailDeliveryError",
    "ResendClient",
]
