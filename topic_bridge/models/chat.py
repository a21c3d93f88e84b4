"""Chat-side update model (subset of a Telegram Bot API Update)."""

from typing import Any, Optional

from pydantic import BaseModel


class ChatUpdate(BaseModel):
    """A message posted in the chat space, flattened to the fields the bridge reads."""

    update_id: int
    space_id: Optional[int] = None  # chat.id
    thread_handle: Optional[int] = None  # message_thread_id
    text: Optional[str] = None
    is_topic_message: bool = False
    sender_first_name: str = ""
    sender_last_name: str = ""
    sender_is_bot: bool = False

    @classmethod
    def from_telegram(cls, payload: dict[str, Any]) -> "ChatUpdate":
        """Build from a raw getUpdates entry. Non-message updates keep only update_id."""
        message = payload.get("message") or {}
        chat = message.get("chat") or {}
        sender = message.get("from") or {}
        return cls(
            update_id=payload["update_id"],
            space_id=chat.get("id"),
            thread_handle=message.get("message_thread_id"),
            text=message.get("text"),
            is_topic_message=bool(message.get("is_topic_message", False)),
            sender_first_name=sender.get("first_name") or "",
            sender_last_name=sender.get("last_name") or "",
            sender_is_bot=bool(sender.get("is_bot", False)),
        )

    @property
    def sender_display_name(self) -> str:
        return " ".join(p for p in (self.sender_first_name, self.sender_last_name) if p)
