"""DB repositories: sync functions returning detached ORM rows."""

from topic_bridge.db.repositories.thread_repo import (
    get_by_kind_target as thread_get_by_kind_target,
    get_by_thread_handle as thread_get_by_thread_handle,
    insert_if_absent as thread_insert_if_absent,
    list_threads as thread_list,
    update_metadata as thread_update_metadata,
)

__all__ = [
    "thread_get_by_kind_target",
    "thread_get_by_thread_handle",
    "thread_insert_if_absent",
    "thread_list",
    "thread_update_metadata",
]
