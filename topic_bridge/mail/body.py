"""Best-effort readable body from a raw RFC 822 message."""

from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import Iterator

from topic_bridge.errors import NoReadableBodyError
from topic_bridge.models.mail import InboundMail
from topic_bridge.utils.logger import get_logger

logger = get_logger("topic_bridge.mail.body")


def _parse(message: InboundMail | bytes | EmailMessage) -> EmailMessage:
    if isinstance(message, EmailMessage):
        return message
    raw = message.body_section() if isinstance(message, InboundMail) else message
    if not raw:
        raise NoReadableBodyError("message has no body section")
    return BytesParser(policy=policy.default).parsebytes(raw)


def _body_parts(part: EmailMessage) -> Iterator[EmailMessage]:
    """Yield leaf parts in order, never descending into attachments or embedded messages."""
    if part.is_attachment():
        return
    maintype = part.get_content_maintype()
    if maintype == "multipart":
        for sub in part.iter_parts():
            yield from _body_parts(sub)
    elif maintype != "message":
        yield part


def extract_body(message: InboundMail | bytes | EmailMessage) -> str:
    """Return the first text/plain part, else the last non-empty text/html part as raw markup.

    Plain text wins wherever it sits in part order. Attachments, including
    forwarded message/rfc822 parts, are opaque and HTML is not converted.
    Raises NoReadableBodyError when neither exists.
    """
    parsed = _parse(message)
    html_body = ""
    for part in _body_parts(parsed):
        content_type = part.get_content_type()
        if content_type not in ("text/plain", "text/html"):
            continue
        try:
            content = part.get_content()
        except (LookupError, UnicodeError, ValueError) as e:
            logger.debug("body.part_unreadable", content_type=content_type, error=str(e))
            continue
        if content_type == "text/plain":
            return content
        if content.strip():
            html_body = content
    if html_body:
        return html_body
    raise NoReadableBodyError("no readable body found")
