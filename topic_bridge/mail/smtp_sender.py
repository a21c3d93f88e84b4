"""SMTP sender: new messages and threaded replies (STARTTLS when offered)."""

import smtplib
import ssl
from email.message import EmailMessage
from typing import Any, Callable, Optional

from topic_bridge.config import MAIL_PASSWORD, MAIL_USE_TLS, MAIL_USERNAME, SMTP_HOST, SMTP_PORT
from topic_bridge.errors import TransportError
from topic_bridge.utils.logger import get_logger

logger = get_logger("topic_bridge.mail.smtp")


class SmtpSender:
    """Sends plain-text UTF-8 mail from the bridged account."""

    def __init__(
        self,
        host: str = SMTP_HOST,
        username: str = MAIL_USERNAME,
        password: str = MAIL_PASSWORD,
        port: int = SMTP_PORT,
        use_tls: bool = MAIL_USE_TLS,
        from_address: Optional[str] = None,
        smtp_factory: Callable[..., Any] = smtplib.SMTP,
    ):
        self._host = host
        self._username = username
        self._password = password
        self._port = port
        self._use_tls = use_tls
        self._from_address = from_address or username
        self._smtp_factory = smtp_factory

    def build_message(self, to: str, subject: str, body: str, in_reply_to: Optional[str] = None) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._from_address
        msg["To"] = to
        msg["Subject"] = subject
        if in_reply_to:
            msg["In-Reply-To"] = in_reply_to
            msg["References"] = in_reply_to
        msg.set_content(body, charset="utf-8")
        return msg

    def send(self, to: str, subject: str, body: str) -> None:
        self._deliver(self.build_message(to, subject, body))
        logger.info("smtp.sent", to=to, subject=subject)

    def reply(self, to: str, subject: str, in_reply_to: Optional[str], body: str) -> None:
        self._deliver(self.build_message(to, subject, body, in_reply_to=in_reply_to))
        logger.info("smtp.replied", to=to, subject=subject, in_reply_to=in_reply_to)

    def _deliver(self, msg: EmailMessage) -> None:
        try:
            with self._smtp_factory(self._host, self._port) as server:
                server.ehlo()
                if self._use_tls and server.has_extn("starttls"):
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()
                server.login(self._username, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(f"failed to send mail to {msg['To']}: {e}") from e
