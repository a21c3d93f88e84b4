"""IMAP mailbox adapter (imapclient, sequence-number mode)."""

import threading
from typing import Any, Callable, Optional

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError

from topic_bridge.config import (
    IMAP_HOST,
    IMAP_PORT,
    IMAP_TIMEOUT_SECONDS,
    MAIL_PASSWORD,
    MAIL_USE_TLS,
    MAIL_USERNAME,
    MAILBOX_FOLDER,
)
from topic_bridge.errors import TransportError
from topic_bridge.mail.mapping import fetch_response_to_mail
from topic_bridge.models.mail import InboundMail
from topic_bridge.utils.logger import get_logger

logger = get_logger("topic_bridge.mail.imap")

FETCH_ITEMS = [b"ENVELOPE", b"BODY.PEEK[]"]


class ImapMailbox:
    """Watched folder on an IMAP server.

    Holds one connection, opened lazily and dropped after any transport error
    so the next call reconnects. Calls are serialized: IMAPClient is not
    thread-safe.
    """

    def __init__(
        self,
        host: str = IMAP_HOST,
        username: str = MAIL_USERNAME,
        password: str = MAIL_PASSWORD,
        port: int = IMAP_PORT,
        ssl: bool = MAIL_USE_TLS,
        folder: str = MAILBOX_FOLDER,
        timeout: Optional[float] = IMAP_TIMEOUT_SECONDS,
        client_factory: Callable[..., Any] = IMAPClient,
    ):
        self._host = host
        self._username = username
        self._password = password
        self._port = port
        self._ssl = ssl
        self._folder = folder
        self._timeout = timeout
        self._client_factory = client_factory
        self._client: Optional[Any] = None
        self._lock = threading.Lock()

    def _connect(self):
        if self._client is None:
            client = self._client_factory(
                self._host, port=self._port, ssl=self._ssl, use_uid=False, timeout=self._timeout
            )
            try:
                client.login(self._username, self._password)
            except Exception:
                self._safe_logout(client)
                raise
            self._client = client
            logger.info("imap.connected", host=self._host, port=self._port, username=self._username)
        return self._client

    @staticmethod
    def _safe_logout(client) -> None:
        try:
            client.logout()
        except (IMAPClientError, OSError) as e:
            logger.debug("imap.logout_error", error=str(e))

    def _reset(self) -> None:
        if self._client is not None:
            self._safe_logout(self._client)
            self._client = None

    def _select(self) -> dict:
        return self._connect().select_folder(self._folder, readonly=True)

    def count(self) -> int:
        with self._lock:
            try:
                info = self._select()
            except (IMAPClientError, OSError) as e:
                self._reset()
                raise TransportError(f"failed to select mailbox {self._folder}: {e}") from e
        return int(info.get(b"EXISTS", 0))

    def fetch_range(self, start: int, end: int) -> list[InboundMail]:
        with self._lock:
            try:
                self._select()
                response = self._connect().fetch(f"{start}:{end}", FETCH_ITEMS)
            except (IMAPClientError, OSError) as e:
                self._reset()
                raise TransportError(f"failed to fetch messages {start}:{end}: {e}") from e
        messages = [fetch_response_to_mail(seq, data) for seq, data in sorted(response.items())]
        logger.debug("imap.fetch_range", start=start, end=end, count=len(messages))
        return messages

    def list_folders(self) -> list[str]:
        with self._lock:
            try:
                folders = self._connect().list_folders()
            except (IMAPClientError, OSError) as e:
                self._reset()
                raise TransportError(f"failed to list mailboxes: {e}") from e
        return [name for _flags, _delimiter, name in folders]

    def close(self) -> None:
        with self._lock:
            self._reset()
