"""Thread repository: lookups by identity and by handle, atomic insert-if-absent, metadata refresh."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from topic_bridge.db import get_session
from topic_bridge.db.models.thread import ThreadRecord
from topic_bridge.models.thread import ThreadKind


def _detached(session, row: ThreadRecord) -> ThreadRecord:
    session.flush()
    session.refresh(row)
    session.expunge(row)
    return row


def get_by_kind_target(kind: ThreadKind | str, target: str) -> Optional[ThreadRecord]:
    """Return the thread for this identity, or None."""
    with get_session() as session:
        row = session.scalars(
            select(ThreadRecord)
            .where(ThreadRecord.kind == ThreadKind(kind).value)
            .where(ThreadRecord.target == target)
            .limit(1)
        ).first()
        if row is not None:
            session.expunge(row)
        return row


def get_by_thread_handle(thread_handle: int) -> Optional[ThreadRecord]:
    """Return the thread bound to this chat thread handle, or None."""
    with get_session() as session:
        row = session.scalars(
            select(ThreadRecord).where(ThreadRecord.thread_handle == thread_handle).limit(1)
        ).first()
        if row is not None:
            session.expunge(row)
        return row


def insert_if_absent(
    kind: ThreadKind | str,
    target: str,
    thread_handle: int,
    last_subject: Optional[str] = None,
    last_message_ref: Optional[str] = None,
) -> tuple[ThreadRecord, bool]:
    """Insert a thread unless (kind, target) already exists.

    Returns (row, created). On a (kind, target) conflict the stored row is
    returned with created=False. A conflict on thread_handle alone re-raises.
    """
    try:
        with get_session() as session:
            row = ThreadRecord(
                kind=ThreadKind(kind).value,
                target=target,
                thread_handle=thread_handle,
                last_subject=last_subject,
                last_message_ref=last_message_ref,
            )
            session.add(row)
            return _detached(session, row), True
    except IntegrityError:
        existing = get_by_kind_target(kind, target)
        if existing is None:
            raise
        return existing, False


def update_metadata(
    thread_handle: int,
    last_subject: Optional[str],
    last_message_ref: Optional[str],
) -> bool:
    """Overwrite subject / message ref for the thread. None leaves a field as stored.

    Returns True if a row was updated.
    """
    with get_session() as session:
        row = session.scalars(
            select(ThreadRecord).where(ThreadRecord.thread_handle == thread_handle)
        ).first()
        if row is None:
            return False
        if last_subject is not None:
            row.last_subject = last_subject
        if last_message_ref is not None:
            row.last_message_ref = last_message_ref
        return True


def list_threads(kind: ThreadKind | str | None = None) -> list[ThreadRecord]:
    """Return all threads (optionally of one kind), oldest first."""
    with get_session() as session:
        q = select(ThreadRecord).order_by(ThreadRecord.created_at, ThreadRecord.id)
        if kind is not None:
            q = q.where(ThreadRecord.kind == ThreadKind(kind).value)
        rows = list(session.scalars(q).all())
        for row in rows:
            session.expunge(row)
        return rows
