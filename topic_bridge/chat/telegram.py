"""Telegram Bot API client (forum topics) over httpx."""

from typing import Any

import httpx

from topic_bridge.config import TELEGRAM_API_BASE, TELEGRAM_BOT_TOKEN, TELEGRAM_POLL_TIMEOUT
from topic_bridge.errors import TransportError
from topic_bridge.models.chat import ChatUpdate
from topic_bridge.utils.body_sanitizer import truncate_post
from topic_bridge.utils.logger import get_logger

logger = get_logger("topic_bridge.chat.telegram")

# createForumTopic accepts 1-128 characters
MAX_TOPIC_NAME_LENGTH = 128
# Added on top of the long-poll window so the HTTP read never times out first
_LONG_POLL_GRACE_SECONDS = 10.0


def _mask_token(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}...{token[-4:]}"


class TelegramClient:
    """Bot API calls used by the bridge. Errors and ok=false replies raise TransportError."""

    def __init__(
        self,
        token: str = TELEGRAM_BOT_TOKEN,
        api_base: str = TELEGRAM_API_BASE,
        http_client: httpx.Client | None = None,
        poll_timeout: int = TELEGRAM_POLL_TIMEOUT,
    ):
        self._base_url = f"{api_base.rstrip('/')}/bot{token}"
        self._poll_timeout = poll_timeout
        self._client = http_client or httpx.Client(
            timeout=httpx.Timeout(30.0),
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )
        logger.info("telegram.init", token=_mask_token(token))

    def _call(self, method: str, payload: dict[str, Any] | None = None, timeout: float | None = None) -> Any:
        kwargs: dict[str, Any] = {"json": payload or {}}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = self._client.post(f"{self._base_url}/{method}", **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"telegram {method} failed: {e}") from e
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"telegram {method} returned non-JSON (HTTP {response.status_code})") from e
        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise TransportError(
                f"telegram {method} rejected (HTTP {response.status_code}): {description or 'unknown error'}"
            )
        return data.get("result")

    def get_me(self) -> dict[str, Any]:
        return self._call("getMe")

    def create_thread(self, space_id: int, title: str) -> int:
        name = (title or "").strip()[:MAX_TOPIC_NAME_LENGTH] or "(unknown)"
        result = self._call("createForumTopic", {"chat_id": space_id, "name": name})
        thread_handle = int(result["message_thread_id"])
        logger.info("telegram.topic_created", space_id=space_id, thread_handle=thread_handle, name=name)
        return thread_handle

    def post_message(self, space_id: int, thread_handle: int, text: str) -> None:
        self._call(
            "sendMessage",
            {
                "chat_id": space_id,
                "message_thread_id": thread_handle,
                "text": truncate_post(text),
            },
        )
        logger.debug("telegram.message_sent", space_id=space_id, thread_handle=thread_handle)

    def delete_thread(self, space_id: int, thread_handle: int) -> None:
        self._call("deleteForumTopic", {"chat_id": space_id, "message_thread_id": thread_handle})
        logger.info("telegram.topic_deleted", space_id=space_id, thread_handle=thread_handle)

    def get_updates(self, offset: int | None = None, timeout: int | None = None) -> list[ChatUpdate]:
        poll_timeout = self._poll_timeout if timeout is None else timeout
        payload: dict[str, Any] = {"timeout": poll_timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        result = self._call("getUpdates", payload, timeout=poll_timeout + _LONG_POLL_GRACE_SECONDS)
        return [ChatUpdate.from_telegram(item) for item in (result or [])]

    def close(self) -> None:
        self._client.close()
