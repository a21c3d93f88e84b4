"""Mail side: mailbox polling, body extraction, IMAP/SMTP adapters."""

from topic_bridge.mail.body import extract_body
from topic_bridge.mail.imap_mailbox import ImapMailbox
from topic_bridge.mail.mapping import build_reply_subject, fetch_response_to_mail
from topic_bridge.mail.poller import MailboxPoller
from topic_bridge.mail.protocol import Mailbox, MailSender
from topic_bridge.mail.smtp_sender import SmtpSender

__all__ = [
    "extract_body",
    "ImapMailbox",
    "build_reply_subject",
    "fetch_response_to_mail",
    "MailboxPoller",
    "Mailbox",
    "MailSender",
    "SmtpSender",
]
