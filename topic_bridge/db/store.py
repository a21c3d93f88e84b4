"""Thread store protocol and its SQLAlchemy implementation."""

from typing import Optional, Protocol

from topic_bridge.db.models.thread import ThreadRecord
from topic_bridge.db.repositories import thread_repo
from topic_bridge.errors import NotFoundError
from topic_bridge.models.thread import ThreadKind
from topic_bridge.utils.logger import get_logger

logger = get_logger("topic_bridge.db.store")


class ThreadStore(Protocol):
    """Persistence used by the reconciler. Lookups raise NotFoundError on a miss."""

    def get_by_target(self, kind: ThreadKind, target: str) -> ThreadRecord:
        ...

    def get_by_handle(self, thread_handle: int) -> ThreadRecord:
        ...

    def insert_if_absent(
        self,
        kind: ThreadKind,
        target: str,
        thread_handle: int,
        last_subject: Optional[str] = None,
        last_message_ref: Optional[str] = None,
    ) -> tuple[ThreadRecord, bool]:
        """Insert unless (kind, target) exists; return (row, created)."""
        ...

    def update_metadata(
        self, thread_handle: int, last_subject: Optional[str], last_message_ref: Optional[str]
    ) -> bool:
        ...

    def list_threads(self, kind: Optional[ThreadKind] = None) -> list[ThreadRecord]:
        ...


class SqlThreadStore:
    """ThreadStore backed by the thread repository (one session per call)."""

    def get_by_target(self, kind: ThreadKind, target: str) -> ThreadRecord:
        row = thread_repo.get_by_kind_target(kind, target)
        if row is None:
            raise NotFoundError(f"No thread for {ThreadKind(kind).value}:{target}")
        return row

    def get_by_handle(self, thread_handle: int) -> ThreadRecord:
        row = thread_repo.get_by_thread_handle(thread_handle)
        if row is None:
            raise NotFoundError(f"No thread for handle: {thread_handle}")
        return row

    def insert_if_absent(
        self,
        kind: ThreadKind,
        target: str,
        thread_handle: int,
        last_subject: Optional[str] = None,
        last_message_ref: Optional[str] = None,
    ) -> tuple[ThreadRecord, bool]:
        row, created = thread_repo.insert_if_absent(
            kind,
            target,
            thread_handle,
            last_subject=last_subject,
            last_message_ref=last_message_ref,
        )
        logger.debug(
            "store.insert_if_absent",
            kind=ThreadKind(kind).value,
            target=target,
            thread_handle=row.thread_handle,
            created=created,
        )
        return row, created

    def update_metadata(
        self, thread_handle: int, last_subject: Optional[str], last_message_ref: Optional[str]
    ) -> bool:
        return thread_repo.update_metadata(thread_handle, last_subject, last_message_ref)

    def list_threads(self, kind: Optional[ThreadKind] = None) -> list[ThreadRecord]:
        return thread_repo.list_threads(kind)
