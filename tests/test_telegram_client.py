"""Tests for the Telegram Bot API client using httpx.MockTransport."""

import json
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import httpx

from topic_bridge.chat.telegram import MAX_TOPIC_NAME_LENGTH, TelegramClient
from topic_bridge.errors import TransportError


class TestTelegramClient(unittest.TestCase):
    def setUp(self):
        self.requests = []
        self.responses = {}

        def handler(request: httpx.Request) -> httpx.Response:
            method = request.url.path.rsplit("/", 1)[-1]
            self.requests.append((request.url.path, json.loads(request.content)))
            status, body = self.responses.get(method, (200, {"ok": True, "result": True}))
            return httpx.Response(status, json=body)

        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        self.client = TelegramClient(
            token="123456:ABCDEF", api_base="https://api.test", http_client=http_client, poll_timeout=0
        )

    def tearDown(self):
        self.client.close()

    def test_create_thread_returns_handle(self):
        self.responses["createForumTopic"] = (200, {"ok": True, "result": {"message_thread_id": 77, "name": "A"}})
        self.assertEqual(self.client.create_thread(-1001, "A (a@x.com)"), 77)
        path, payload = self.requests[0]
        self.assertEqual(path, "/bot123456:ABCDEF/createForumTopic")
        self.assertEqual(payload, {"chat_id": -1001, "name": "A (a@x.com)"})

    def test_create_thread_truncates_long_title(self):
        self.responses["createForumTopic"] = (200, {"ok": True, "result": {"message_thread_id": 1}})
        self.client.create_thread(-1001, "x" * 300)
        self.assertEqual(len(self.requests[0][1]["name"]), MAX_TOPIC_NAME_LENGTH)

    def test_post_message_targets_topic(self):
        self.client.post_message(-1001, 77, "hello")
        _, payload = self.requests[0]
        self.assertEqual(payload, {"chat_id": -1001, "message_thread_id": 77, "text": "hello"})

    def test_delete_thread(self):
        self.client.delete_thread(-1001, 77)
        path, payload = self.requests[0]
        self.assertTrue(path.endswith("/deleteForumTopic"))
        self.assertEqual(payload["message_thread_id"], 77)

    def test_api_error_raises_transport_error(self):
        self.responses["sendMessage"] = (400, {"ok": False, "description": "Bad Request: thread not found"})
        with self.assertRaises(TransportError) as ctx:
            self.client.post_message(-1001, 77, "hello")
        self.assertIn("thread not found", str(ctx.exception))

    def test_network_error_raises_transport_error(self):
        def failing(request):
            raise httpx.ConnectError("refused", request=request)

        client = TelegramClient(
            token="t", api_base="https://api.test", http_client=httpx.Client(transport=httpx.MockTransport(failing))
        )
        with self.assertRaises(TransportError):
            client.get_me()
        client.close()

    def test_get_updates_parses_messages(self):
        self.responses["getUpdates"] = (
            200,
            {
                "ok": True,
                "result": [
                    {
                        "update_id": 5,
                        "message": {
                            "message_id": 9,
                            "message_thread_id": 77,
                            "is_topic_message": True,
                            "chat": {"id": -1001, "type": "supergroup"},
                            "from": {"id": 1, "is_bot": False, "first_name": "Bob", "last_name": "Smith"},
                            "text": "hi",
                        },
                    },
                    {"update_id": 6},
                ],
            },
        )
        updates = self.client.get_updates(offset=5)
        self.assertEqual(self.requests[0][1]["offset"], 5)
        self.assertEqual([u.update_id for u in updates], [5, 6])
        first = updates[0]
        self.assertEqual((first.space_id, first.thread_handle, first.text), (-1001, 77, "hi"))
        self.assertTrue(first.is_topic_message)
        self.assertEqual(first.sender_display_name, "Bob Smith")
        self.assertIsNone(updates[1].thread_handle)


if __name__ == "__main__":
    unittest.main()
