"""Pydantic models and enums for the topic bridge."""

from topic_bridge.models.chat import ChatUpdate
from topic_bridge.models.mail import InboundMail
from topic_bridge.models.thread import ThreadKind

__all__ = [
    "ChatUpdate",
    "InboundMail",
    "ThreadKind",
]
