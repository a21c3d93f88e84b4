"""Resolve mail identities and chat thread handles to threads, creating topics on first contact."""

from typing import Optional

from topic_bridge.chat.protocol import ChatPlatform
from topic_bridge.db.models.thread import ThreadRecord
from topic_bridge.db.store import ThreadStore
from topic_bridge.errors import NotFoundError, ThreadNotFoundError, TransportError
from topic_bridge.models.thread import ThreadKind
from topic_bridge.utils.logger import get_logger

logger = get_logger("topic_bridge.reconciler")


class ThreadReconciler:
    """One thread per (kind, target), one chat topic per thread.

    First contact from an identity creates a topic and then inserts the row
    with the store's insert-if-absent. Two concurrent first messages from the
    same address can both create a topic; only one row is stored, and the
    losing topic is deleted so the identity keeps a single topic.
    """

    def __init__(self, store: ThreadStore, chat: ChatPlatform, space_id: int):
        self._store = store
        self._chat = chat
        self._space_id = space_id

    def resolve_or_create(
        self,
        kind: ThreadKind,
        target: str,
        display_hint: str,
        subject: Optional[str] = None,
        message_ref: Optional[str] = None,
    ) -> int:
        """Return the thread handle for (kind, target), creating topic + row on a miss."""
        log = logger.bind(kind=ThreadKind(kind).value, target=target)
        try:
            return self._store.get_by_target(kind, target).thread_handle
        except NotFoundError:
            log.debug("reconciler.thread_missing")

        thread_handle = self._chat.create_thread(self._space_id, display_hint)
        thread, created = self._store.insert_if_absent(
            kind,
            target,
            thread_handle,
            last_subject=subject,
            last_message_ref=message_ref,
        )
        if created:
            log.info("reconciler.thread_created", thread_handle=thread_handle, title=display_hint)
            return thread_handle

        log.warning(
            "reconciler.duplicate_thread_discarded",
            kept_thread_handle=thread.thread_handle,
            discarded_thread_handle=thread_handle,
        )
        try:
            self._chat.delete_thread(self._space_id, thread_handle)
        except TransportError as e:
            log.warning(
                "reconciler.duplicate_thread_delete_failed",
                thread_handle=thread_handle,
                error=str(e),
            )
        return thread.thread_handle

    def refresh_metadata(self, thread_handle: int, subject: Optional[str], message_ref: Optional[str]) -> None:
        """Overwrite last subject / message ref (last write wins). None keeps the stored value."""
        if not self._store.update_metadata(thread_handle, subject, message_ref):
            raise ThreadNotFoundError(thread_handle)
        logger.debug("reconciler.metadata_refreshed", thread_handle=thread_handle, subject=subject)

    def resolve_by_handle(self, thread_handle: int) -> ThreadRecord:
        """Return the thread for a chat thread handle. Raises ThreadNotFoundError if unmanaged."""
        try:
            return self._store.get_by_handle(thread_handle)
        except NotFoundError:
            raise ThreadNotFoundError(thread_handle) from None
