"""Map IMAP FETCH responses to InboundMail and build reply subjects."""

from email.errors import HeaderParseError
from email.header import decode_header, make_header
from typing import Any, Optional

from topic_bridge.models.mail import InboundMail

REPLY_PREFIX = "Re:"


def build_reply_subject(subject: str) -> str:
    """Subject for a reply: unchanged when it already starts with "Re:", else "Re: " + subject.

    An empty subject gives "Re: " (trailing space, no title).
    """
    if not subject:
        return "Re: "
    if subject.startswith(REPLY_PREFIX):
        return subject
    return f"Re: {subject}"


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def decode_header_value(value: Any) -> str:
    """Decode RFC 2047 encoded-words ("=?utf-8?b?...?=") in an envelope field."""
    text = _to_text(value)
    if "=?" not in text:
        return text
    try:
        return str(make_header(decode_header(text)))
    except (HeaderParseError, LookupError, UnicodeError):
        return text


def _sender(envelope: Any) -> tuple[str, str]:
    """Return (display name, lower-cased address) of the first From entry."""
    if envelope is None or not envelope.from_:
        return "", ""
    first = envelope.from_[0]
    mailbox = _to_text(first.mailbox)
    host = _to_text(first.host)
    if not mailbox or not host:
        return "", ""
    name = decode_header_value(first.name).strip()
    return name or mailbox, f"{mailbox}@{host}".lower()


def fetch_response_to_mail(seq: int, data: dict[bytes, Any]) -> InboundMail:
    """Convert one entry of IMAPClient.fetch(..., [ENVELOPE, BODY.PEEK[]]) to InboundMail."""
    envelope = data.get(b"ENVELOPE")
    sender_name, sender_address = _sender(envelope)
    subject = decode_header_value(envelope.subject) if envelope is not None else ""
    message_id: Optional[str] = None
    if envelope is not None and envelope.message_id:
        message_id = _to_text(envelope.message_id).strip() or None
    raw = data.get(b"BODY[]")
    return InboundMail(
        seq=seq,
        sender_name=sender_name,
        sender_address=sender_address,
        subject=subject,
        message_id=message_id,
        raw=bytes(raw) if raw is not None else None,
    )
