"""Mailbox and outbound mail protocols."""

from typing import Optional, Protocol

from topic_bridge.models.mail import InboundMail


class Mailbox(Protocol):
    """The single watched mailbox, addressed by sequence number."""

    def count(self) -> int:
        """Total number of messages currently in the mailbox. Raises TransportError."""
        ...

    def fetch_range(self, start: int, end: int) -> list[InboundMail]:
        """Fetch messages start..end inclusive (1-based sequence numbers). Raises TransportError."""
        ...


class MailSender(Protocol):
    """Outbound mail. Both methods raise TransportError on failure; nothing is retried."""

    def send(self, to: str, subject: str, body: str) -> None:
        ...

    def reply(self, to: str, subject: str, in_reply_to: Optional[str], body: str) -> None:
        """Send with In-Reply-To/References set to in_reply_to."""
        ...
