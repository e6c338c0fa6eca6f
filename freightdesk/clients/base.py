"""Abstract base class for outbound mail clients."""

from abc import ABC, abstractmethod


class MailDeliveryError(Exception):
    """Raised when the mail provider rejects or cannot take a message."""

    pass


class MailClient(ABC):
    """Sends one email and returns the provider's message ID.

    Example implementation:
        class ConsoleMailClient(MailClient):
            @property
            def is_configured(self) -> bool:
                return True

            async def send(self, from_address, to_address, subject, html) -> str:
                print(subject)
                return "console-1"
    """

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the client has the credentials it needs to send."""
        ...

    @abstractmethod
    async def send(
        self,
        from_address: str,
        to_address: str,
        subject: str,
        html: str,
    ) -> str:
        """Deliver a message.

        Args:
            from_address: Sender address.
            to_address: Recipient address.
            subject: Subject line.
            html: Body; HTML or plain text.

        Returns:
            Provider message ID.

        Raises:
            MailDeliveryError: If the provider rejects the message or the
                request fails.
        """
        ...
