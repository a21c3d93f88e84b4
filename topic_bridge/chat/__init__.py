"""Chat side: Telegram client, platform protocol, update listener."""

from topic_bridge.chat.listener import ChatUpdateListener
from topic_bridge.chat.protocol import ChatPlatform
from topic_bridge.chat.telegram import TelegramClient

__all__ = [
    "ChatUpdateListener",
    "ChatPlatform",
    "TelegramClient",
]
