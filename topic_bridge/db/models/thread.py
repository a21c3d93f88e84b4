"""ORM model for threads: one row per external identity, bound to one chat topic."""

from typing import Optional

from sqlalchemy import BigInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from topic_bridge.db.base import Base, TimestampMixin


class ThreadRecord(Base, TimestampMixin):
    """Correlation between (kind, target) and a chat thread handle.

    (kind, target) is unique: at most one thread per identity. thread_handle is
    unique and is never rewritten after insert.
    """

    __tablename__ = "threads"
    __table_args__ = (UniqueConstraint("kind", "target", name="uq_threads_kind_target"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    target: Mapped[str] = mapped_column(String(320), nullable=False)
    thread_handle: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)
    last_subject: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    last_message_ref: Mapped[Optional[str]] = mapped_column(String(998), nullable=True)
