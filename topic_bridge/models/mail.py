"""Inbound mail model."""

from typing import Optional

from pydantic import BaseModel


class InboundMail(BaseModel):
    """One message fetched from the watched mailbox by sequence number."""

    seq: int
    sender_name: str = ""
    sender_address: str = ""
    subject: str = ""
    message_id: Optional[str] = None
    raw: Optional[bytes] = None  # full RFC 822 source (BODY[]); None when the server sent no body section

    @property
    def display_name(self) -> str:
        """Topic title for this sender: "Name (address)"."""
        name = self.sender_name or self.sender_address.split("@", 1)[0]
        return f"{name} ({self.sender_address})"

    def body_section(self) -> Optional[bytes]:
        return self.raw
