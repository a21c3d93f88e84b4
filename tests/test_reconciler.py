"""Tests for thread resolution, first-contact topic creation and duplicate handling."""

import sys
import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fakes import FakeChat, InMemoryThreadStore

from topic_bridge.errors import ThreadNotFoundError
from topic_bridge.models.thread import ThreadKind
from topic_bridge.reconciler import ThreadReconciler

SPACE_ID = -1001


class TestThreadReconciler(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryThreadStore()
        self.chat = FakeChat()
        self.reconciler = ThreadReconciler(self.store, self.chat, SPACE_ID)

    def test_first_contact_creates_topic_and_row(self):
        handle = self.reconciler.resolve_or_create(
            ThreadKind.EMAIL, "a@x.com", "A (a@x.com)", subject="Hi", message_ref="<m1@x>"
        )
        self.assertEqual(self.chat.created, [(SPACE_ID, "A (a@x.com)", handle)])
        row = self.store.get_by_target(ThreadKind.EMAIL, "a@x.com")
        self.assertEqual(row.thread_handle, handle)
        self.assertEqual(row.last_subject, "Hi")
        self.assertEqual(row.last_message_ref, "<m1@x>")

    def test_resolve_is_idempotent(self):
        first = self.reconciler.resolve_or_create(ThreadKind.EMAIL, "a@x.com", "A")
        second = self.reconciler.resolve_or_create(ThreadKind.EMAIL, "a@x.com", "A")
        self.assertEqual(first, second)
        self.assertEqual(len(self.chat.created), 1)

    def test_distinct_targets_get_distinct_topics(self):
        a = self.reconciler.resolve_or_create(ThreadKind.EMAIL, "a@x.com", "A")
        b = self.reconciler.resolve_or_create(ThreadKind.EMAIL, "b@x.com", "B")
        self.assertNotEqual(a, b)
        self.assertEqual(len(self.store.list_threads()), 2)

    def test_lost_insert_race_deletes_new_topic(self):
        """Another worker stores a row between our lookup and our insert."""

        def competitor(_handle):
            self.chat.on_create = None
            self.store.insert_if_absent(ThreadKind.EMAIL, "a@x.com", 999)

        self.chat.on_create = competitor
        handle = self.reconciler.resolve_or_create(ThreadKind.EMAIL, "a@x.com", "A")
        self.assertEqual(handle, 999)
        discarded = self.chat.created[0][2]
        self.assertEqual(self.chat.deleted, [(SPACE_ID, discarded)])
        self.assertEqual(len(self.store.list_threads()), 1)

    def test_failed_duplicate_delete_still_returns_stored_handle(self):
        self.chat.fail_delete = True
        self.chat.on_create = lambda _h: self.store.insert_if_absent(ThreadKind.EMAIL, "a@x.com", 999)
        self.assertEqual(self.reconciler.resolve_or_create(ThreadKind.EMAIL, "a@x.com", "A"), 999)

    def test_concurrent_first_contact_yields_one_thread(self):
        barrier = threading.Barrier(2, timeout=5.0)
        self.chat.on_create = lambda _h: barrier.wait()

        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [
                pool.submit(self.reconciler.resolve_or_create, ThreadKind.EMAIL, "a@x.com", "A")
                for _ in range(2)
            ]
            handles = [f.result(timeout=10) for f in futures]

        self.assertEqual(handles[0], handles[1])
        self.assertEqual(len(self.chat.created), 2)
        self.assertEqual(len(self.chat.deleted), 1)
        self.assertNotEqual(self.chat.deleted[0][1], handles[0])
        self.assertEqual(len(self.store.list_threads()), 1)

    def test_refresh_metadata_overwrites(self):
        handle = self.reconciler.resolve_or_create(ThreadKind.EMAIL, "a@x.com", "A", "One", "<1@x>")
        self.reconciler.refresh_metadata(handle, "Two", "<2@x>")
        row = self.reconciler.resolve_by_handle(handle)
        self.assertEqual((row.last_subject, row.last_message_ref), ("Two", "<2@x>"))

    def test_refresh_metadata_none_keeps_stored_ref(self):
        handle = self.reconciler.resolve_or_create(ThreadKind.EMAIL, "a@x.com", "A", "One", "<1@x>")
        self.reconciler.refresh_metadata(handle, "Two", None)
        self.assertEqual(self.reconciler.resolve_by_handle(handle).last_message_ref, "<1@x>")

    def test_refresh_metadata_unknown_handle(self):
        with self.assertRaises(ThreadNotFoundError):
            self.reconciler.refresh_metadata(12345, "x", None)

    def test_resolve_by_unknown_handle(self):
        with self.assertRaises(ThreadNotFoundError) as ctx:
            self.reconciler.resolve_by_handle(777)
        self.assertEqual(ctx.exception.thread_handle, 777)


if __name__ == "__main__":
    unittest.main()
