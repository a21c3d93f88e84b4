"""Tests for the chat update listener."""

import sys
import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fakes import FakeChat, InlineExecutor

import topic_bridge.chat.listener as listener_mod
from topic_bridge.chat.listener import ChatUpdateListener
from topic_bridge.errors import AlreadyRunningError
from topic_bridge.models.chat import ChatUpdate


class TestChatUpdateListener(unittest.TestCase):
    def setUp(self):
        self.chat = FakeChat()
        self.listener = ChatUpdateListener(self.chat, executor=InlineExecutor(), retry_delay=0.01)

    def tearDown(self):
        self.listener.stop(timeout=5.0)

    def test_offset_advances_past_each_batch(self):
        self.chat.update_batches = [
            [ChatUpdate(update_id=3), ChatUpdate(update_id=4)],
            [ChatUpdate(update_id=5)],
        ]
        seen = []
        done = threading.Event()

        def on_update(update):
            seen.append(update.update_id)
            if len(seen) == 3:
                done.set()

        self.listener.start(on_update)
        self.assertTrue(done.wait(5.0))
        self.listener.stop(timeout=5.0)

        self.assertEqual(seen, [3, 4, 5])
        self.assertEqual(self.listener.offset, 6)
        self.assertEqual(self.chat.offsets[:3], [None, 5, 6])

    def test_start_twice_raises(self):
        self.listener.start(lambda u: None)
        with self.assertRaises(AlreadyRunningError):
            self.listener.start(lambda u: None)

    def test_stop_is_idempotent(self):
        self.listener.stop()
        self.listener.start(lambda u: None)
        self.listener.stop(timeout=5.0)
        self.listener.stop(timeout=5.0)

    def test_task_paused_before_stop_check_never_calls_back(self):
        entered = threading.Event()
        release = threading.Event()
        real_bind = listener_mod.bind_context

        def slow_bind(**context):
            real_bind(**context)
            entered.set()
            release.wait(5.0)

        seen = []
        pool = ThreadPoolExecutor(max_workers=1)
        listener = ChatUpdateListener(self.chat, executor=pool, retry_delay=0.01)
        self.chat.update_batches = [[ChatUpdate(update_id=7)]]
        with mock.patch.object(listener_mod, "bind_context", slow_bind):
            listener.start(seen.append)
            self.assertTrue(entered.wait(5.0))
            listener.stop(timeout=5.0)
            release.set()
            pool.shutdown(wait=True)
        self.assertEqual(seen, [])


if __name__ == "__main__":
    unittest.main()
