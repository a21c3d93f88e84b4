"""Re-export all ORM models so Base.metadata has all tables."""

from topic_bridge.db.models.thread import ThreadRecord

__all__ = [
    "ThreadRecord",
]
